"""Tests for MapConfig and the exception hierarchy."""

import dataclasses

import pytest

from polykey import (
    CapacityExhaustedError,
    ErrorKind,
    KeyConflictError,
    KeyNotFoundError,
    MapConfig,
    PathError,
    PolykeyError,
)


def test_default_config():
    config = MapConfig()
    assert config.id_start == 0
    assert config.id_bits == 64
    assert config.deep_copy_values is True


def test_config_is_frozen():
    config = MapConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.id_bits = 8


def test_with_overrides():
    config = MapConfig().with_overrides(name="orders", id_start=100)
    assert config.name == "orders"
    assert config.id_start == 100
    assert config.id_bits == 64


def test_config_validation():
    with pytest.raises(ValueError, match="id_bits"):
        MapConfig(id_bits=0)
    with pytest.raises(ValueError, match="outside"):
        MapConfig(id_start=4, id_bits=2)


def test_every_error_has_a_kind():
    assert KeyConflictError("x").kind is ErrorKind.KEY_CONFLICT
    assert KeyNotFoundError("x").kind is ErrorKind.KEY_NOT_FOUND
    assert CapacityExhaustedError(0, 64).kind is ErrorKind.CAPACITY_EXHAUSTED
    assert PathError("x").kind is ErrorKind.INVALID_PATH


def test_hierarchy():
    for exc in (
        KeyConflictError("x"),
        KeyNotFoundError("x"),
        CapacityExhaustedError(0, 64),
        PathError("x"),
    ):
        assert isinstance(exc, PolykeyError)
    assert isinstance(KeyNotFoundError("x"), KeyError)
    assert isinstance(PathError("x"), LookupError)
    assert isinstance(PathError("x"), ValueError)


def test_key_not_found_message_is_not_quoted():
    assert str(KeyNotFoundError("missing key")) == "missing key"


def test_error_kind_from_value():
    assert ErrorKind.from_value("key_conflict") is ErrorKind.KEY_CONFLICT
    with pytest.raises(ValueError, match="Unknown ErrorKind"):
        ErrorKind.from_value("nope")
