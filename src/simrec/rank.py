"""Candidate filtering and bounded-memory top-N ranking."""

import heapq
import logging
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from src.simrec.bimap import BiMap
from src.simrec.data import Item, ItemScore, PredictedResult

# Configure module logger
logger = logging.getLogger(__name__)


def is_candidate_item(
    i: int,
    items: Mapping[int, Item],
    categories: Optional[FrozenSet[str]],
    query_list: Set[int],
    white_list: Optional[Set[int]],
    black_list: Optional[Set[int]],
) -> bool:
    """Check whether an item may appear in the result.

    Args:
        i: Item index to check.
        items: Item metadata by index.
        categories: Required categories, or None for no constraint.
        query_list: Indices of the query items, which are never returned.
        white_list: Allowed indices, or None for no constraint.
        black_list: Forbidden indices, or None for no constraint.

    Returns:
        True if the item passes every active filter.
    """
    if white_list is not None and i not in white_list:
        return False
    if black_list is not None and i in black_list:
        return False
    # discard items in query as well
    if i in query_list:
        return False
    if categories is not None:
        item = items.get(i)
        # discard items without categories
        if item is None or not item.categories:
            return False
        if not categories.intersection(item.categories):
            return False
    return True


def top_n(scored: Iterable[Tuple[int, float]], n: int) -> List[Tuple[int, float]]:
    """Select the n highest-scoring (index, score) pairs.

    Keeps a min-heap of at most n entries whose root is the weakest entry
    kept so far; a candidate replaces the root only when it ranks higher.
    Memory is O(n) regardless of how many candidates are scanned.

    Equal scores are ordered by item index, lowest first.

    Args:
        scored: (item index, score) pairs.
        n: Maximum number of pairs to keep.

    Returns:
        Up to n pairs sorted by descending score.
    """
    if n <= 0:
        return []

    # Heap keys are (score, -index) so the root is the lowest score and,
    # among equal scores, the highest index.
    heap: List[Tuple[float, int]] = []
    for idx, score in scored:
        key = (score, -idx)
        if len(heap) < n:
            heapq.heappush(heap, key)
        elif key > heap[0]:
            heapq.heapreplace(heap, key)

    drained = [heapq.heappop(heap) for _ in range(len(heap))]
    drained.reverse()
    return [(-neg_idx, score) for score, neg_idx in drained]


def rank_candidates(
    scores: Dict[int, float],
    n: int,
    item_ids: BiMap,
    items: Mapping[int, Item],
    query_list: Set[int],
    categories: Optional[FrozenSet[str]] = None,
    white_list: Optional[Set[int]] = None,
    black_list: Optional[Set[int]] = None,
) -> PredictedResult:
    """Filter scored items and return the top n as a PredictedResult.

    Args:
        scores: Aggregate score per item index.
        n: Maximum number of results.
        item_ids: BiMap from item index back to item ID.
        items: Item metadata by index.
        query_list: Query item indices, excluded from the result.
        categories: Optional required categories.
        white_list: Optional allowed item indices.
        black_list: Optional forbidden item indices.

    Returns:
        PredictedResult with at most n items, highest score first.
    """
    candidates = (
        (i, score)
        for i, score in scores.items()
        if is_candidate_item(
            i=i,
            items=items,
            categories=categories,
            query_list=query_list,
            white_list=white_list,
            black_list=black_list,
        )
    )

    ranked = top_n(candidates, n)

    logger.debug(
        "Ranked candidates",
        extra={"num_scored": len(scores), "num_returned": len(ranked), "top_n": n},
    )

    return PredictedResult(
        item_scores=tuple(ItemScore(item=item_ids[i], score=score) for i, score in ranked)
    )
