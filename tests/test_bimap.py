"""Tests for the string-to-index BiMap."""

import pickle

import pytest

from src.simrec.bimap import BiMap


@pytest.fixture
def item_index() -> BiMap:
    """BiMap over a small set of item IDs with a duplicate."""
    return BiMap.string_int(["i3", "i1", "i2", "i1"])


def test_string_int_assigns_contiguous_indices(item_index):
    """Test that distinct IDs get indices 0..count-1 in sorted order."""
    assert len(item_index) == 3
    assert sorted(item_index.values()) == [0, 1, 2]
    assert item_index["i1"] == 0
    assert item_index["i2"] == 1
    assert item_index["i3"] == 2


def test_bimap_is_a_bijection(item_index):
    """Test that forward and backward lookups invert each other."""
    for item_id in item_index:
        assert item_index.backward(item_index.forward(item_id)) == item_id

    for idx in range(len(item_index)):
        assert item_index.forward(item_index.backward(idx)) == idx


def test_inverse_maps_indices_back_to_ids(item_index):
    """Test that inverse is the backward mapping."""
    inverse = item_index.inverse

    assert inverse[0] == "i1"
    assert inverse[2] == "i3"
    assert inverse.inverse == item_index


def test_unknown_id_raises_key_error(item_index):
    """Test that forward lookup of an unregistered ID fails with KeyError."""
    with pytest.raises(KeyError):
        item_index.forward("missing")

    assert item_index.get("missing") is None
    assert "missing" not in item_index


def test_string_int_is_stable_for_same_ids():
    """Test that the same ID set always yields the same mapping."""
    first = BiMap.string_int(["b", "c", "a"])
    second = BiMap.string_int(["c", "a", "b", "a"])

    assert first == second


def test_duplicate_values_are_rejected():
    """Test that a non-injective mapping cannot be built."""
    with pytest.raises(ValueError, match="unique"):
        BiMap({"a": 0, "b": 0})


def test_bimap_is_read_only(item_index):
    """Test that the mapping cannot be modified after construction."""
    with pytest.raises(TypeError):
        item_index["i4"] = 3


def test_bimap_survives_pickling(item_index):
    """Test that a BiMap can be pickled, as joblib does when saving models."""
    restored = pickle.loads(pickle.dumps(item_index))

    assert restored == item_index
    assert restored.inverse[1] == "i2"
