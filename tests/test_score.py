"""Tests for catalog scoring by cosine similarity."""

import math

import numpy as np
import pytest

from src.simrec.bimap import BiMap
from src.simrec.data import Diagnostics, Item
from src.simrec.exceptions import InternalConsistencyError
from src.simrec.model import SimilarItemsModel
from src.simrec.score import score_items


def pair_model(v1, v2) -> SimilarItemsModel:
    """Two-item model where item "a" has vector v1 and item "b" has v2."""
    return SimilarItemsModel(
        product_features={0: np.array(v1, dtype=float), 1: np.array(v2, dtype=float)},
        item_index=BiMap.string_int(["a", "b"]),
        items={},
    )


def similarity(v1, v2) -> float:
    """Similarity of v2 to v1 as computed by the scorer."""
    return score_items(pair_model(v1, v2), ["a"])[1]


@pytest.fixture
def model() -> SimilarItemsModel:
    """Model with hand-picked 2-d feature vectors.

    i3 points almost along i1; i4 points away from i1 and towards i2.
    """
    item_index = BiMap.string_int(["i1", "i2", "i3", "i4"])
    vectors = {
        "i1": [1.0, 0.0],
        "i2": [0.0, 1.0],
        "i3": [1.0, 0.1],
        "i4": [-0.5, 0.3],
    }
    return SimilarItemsModel(
        product_features={item_index[k]: np.array(v) for k, v in vectors.items()},
        item_index=item_index,
        items={idx: Item() for idx in item_index.values()},
    )


def test_similarity_is_symmetric():
    """Test that scoring b against a equals scoring a against b."""
    rng = np.random.default_rng(0)
    for _ in range(20):
        model = pair_model(rng.normal(size=8), rng.normal(size=8))
        assert score_items(model, ["a"])[1] == pytest.approx(score_items(model, ["b"])[0])


def test_self_similarity_is_one():
    """Test that a nonzero query item scores 1.0 against itself."""
    model = pair_model([0.3, -1.2, 4.0], [1.0, 1.0, 1.0])

    assert score_items(model, ["a"])[0] == pytest.approx(1.0)


def test_similarity_known_values():
    """Test orthogonal and opposite vectors."""
    assert similarity([1.0, 0.0], [0.0, 2.0]) == pytest.approx(0.0)
    assert similarity([1.0, 1.0], [-2.0, -2.0]) == pytest.approx(-1.0)


def test_similarity_with_zero_vector_is_zero():
    """Test that a zero-magnitude query or candidate has zero similarity."""
    assert similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert similarity([1.0, 2.0], [0.0, 0.0]) == 0.0
    assert similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_score_items_sums_similarities_over_query(model):
    """Test that each item's score is the sum of cosines to every query item."""
    scores = score_items(model, ["i1", "i2"])

    i3 = np.array([1.0, 0.1])
    expected_i3 = (1.0 + 0.1) / np.linalg.norm(i3)
    i4 = np.array([-0.5, 0.3])
    expected_i4 = (-0.5 + 0.3) / np.linalg.norm(i4)

    assert set(scores) == {0, 1, 2, 3}
    assert scores[2] == pytest.approx(expected_i3)
    assert scores[3] == pytest.approx(expected_i4)
    # query items score themselves too; filtering happens later
    assert scores[0] == pytest.approx(1.0)


def test_score_items_drops_unknown_query_ids(model):
    """Test that unknown query IDs are ignored with a diagnostic note."""
    diagnostics = Diagnostics()

    scores = score_items(model, ["i1", "nope"], diagnostics)

    assert scores == pytest.approx(score_items(model, ["i1"]))
    assert diagnostics.count("unknown_query_item") == 1


def test_score_items_with_only_unknown_ids_is_empty(model):
    """Test that a query with no known items yields no scores."""
    diagnostics = Diagnostics()

    assert score_items(model, ["x", "y"], diagnostics) == {}
    assert diagnostics.count("empty_query") == 1
    assert any("No valid items" in note for note in diagnostics.notes)


def test_score_items_zero_vector_scores_zero():
    """Test that an item with a zero feature vector scores 0.0."""
    item_index = BiMap.string_int(["a", "b"])
    model = SimilarItemsModel(
        product_features={0: np.array([1.0, 2.0]), 1: np.zeros(2)},
        item_index=item_index,
        items={},
    )

    scores = score_items(model, ["a"])

    assert scores[1] == 0.0
    assert not any(math.isnan(s) for s in scores.values())


def test_query_item_without_vector_is_internal_error():
    """Test that a catalog item with no feature vector cannot be queried."""
    item_index = BiMap.string_int(["a", "b", "never_viewed"])
    model = SimilarItemsModel(
        product_features={0: np.array([1.0, 0.0]), 1: np.array([0.0, 1.0])},
        item_index=item_index,
        items={},
    )

    with pytest.raises(InternalConsistencyError) as exc_info:
        score_items(model, ["a", "never_viewed"])

    assert exc_info.value.details["num_vectors"] == 0


def test_items_without_vectors_are_never_scored():
    """Test that only items with feature vectors receive a score."""
    item_index = BiMap.string_int(["a", "b", "never_viewed"])
    model = SimilarItemsModel(
        product_features={0: np.array([1.0, 0.0]), 1: np.array([0.0, 1.0])},
        item_index=item_index,
        items={},
    )

    assert set(score_items(model, ["a"])) == {0, 1}
