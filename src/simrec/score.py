"""Similarity scoring of catalog items against a set of query items."""

import logging
from typing import Dict, Iterable, Optional, Set

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity

from src.simrec.data import Diagnostics
from src.simrec.exceptions import InternalConsistencyError
from src.simrec.model import SimilarItemsModel

# Configure module logger
logger = logging.getLogger(__name__)


def translate_item_ids(
    model: SimilarItemsModel,
    item_ids: Iterable[str],
    kind: str,
    diagnostics: Optional[Diagnostics] = None,
) -> Set[int]:
    """Translate item IDs to indices, dropping IDs the model does not know.

    Args:
        model: Trained model holding the item index.
        item_ids: Item IDs to translate.
        kind: What the IDs are used for (``"query"``, ``"white_list"``...),
            used in diagnostic notes.
        diagnostics: Optional accumulator for dropped-ID notes.

    Returns:
        Set of item indices for the known IDs.
    """
    if diagnostics is None:
        diagnostics = Diagnostics()

    indices = set()
    for item_id in item_ids:
        idx = model.item_index.get(item_id)
        if idx is None:
            diagnostics.note(
                f"unknown_{kind}_item",
                f"Dropping unknown {kind} item ID {item_id}.",
            )
            continue
        indices.add(idx)
    return indices


def query_features(model: SimilarItemsModel, query_list: Iterable[int]) -> np.ndarray:
    """Stack the feature vectors of the query items.

    Raises:
        InternalConsistencyError: If a query item does not have exactly one
            feature vector in the model.
    """
    vectors = []
    for item_idx in sorted(query_list):
        found = model.lookup(item_idx)
        if len(found) != 1:
            raise InternalConsistencyError(item_index=item_idx, num_vectors=len(found))
        vectors.append(found[0])
    return np.vstack(vectors)


def score_items(
    model: SimilarItemsModel,
    query_items: Iterable[str],
    diagnostics: Optional[Diagnostics] = None,
) -> Dict[int, float]:
    """Score every trained item by its summed cosine similarity to the query.

    Args:
        model: Trained model.
        query_items: Query item IDs. Unknown IDs are dropped.
        diagnostics: Optional accumulator for dropped-ID notes.

    Returns:
        Mapping from item index to aggregate score for every item with a
        feature vector, or an empty dict if no query item is known.

    Raises:
        InternalConsistencyError: If a known query item has no feature vector.
    """
    query_items = list(query_items)
    query_list = translate_item_ids(model, query_items, "query", diagnostics)
    return score_indices(model, query_list, query_items, diagnostics)


def score_indices(
    model: SimilarItemsModel,
    query_list: Set[int],
    query_items: Optional[Iterable[str]] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> Dict[int, float]:
    """Score every trained item against already-translated query indices.

    Same contract as :func:`score_items`; ``query_items`` is used only for the
    empty-query note.
    """
    if not query_list:
        if diagnostics is None:
            diagnostics = Diagnostics()
        diagnostics.note(
            "empty_query",
            f"No valid items in {sorted(query_items or [], key=str)}.",
        )
        return {}

    queries = query_features(model, query_list)

    # (n_catalog, n_query) similarities summed over the query axis.
    # cosine_similarity maps zero-norm rows to zero similarity.
    similarities = cosine_similarity(model.feature_matrix, queries)
    totals = similarities.sum(axis=1)

    logger.debug(
        "Scored catalog",
        extra={"num_query_items": len(query_list), "num_scored": len(totals)},
    )

    return {
        int(idx): float(score)
        for idx, score in zip(model.feature_ids, totals)
    }

