"""Aggregation of raw view events into implicit preference triples.

Each view counts as one unit of implicit preference. Views of the same item by
the same user are summed, so the solver sees one (user, item, count) entry per
distinct pair.
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional, Tuple

import pandas as pd

from src.simrec.bimap import BiMap
from src.simrec.data import Diagnostics, PreferenceTriple, ViewEvent

# Configure module logger
logger = logging.getLogger(__name__)


def unpack_event(event: Any) -> Optional[Tuple[Any, Any]]:
    """Split a view event into (user, item), or None if it is not a pair.

    Mappings are rejected even when they have two keys, since unpacking one
    yields its keys rather than a user and an item.
    """
    if isinstance(event, Mapping):
        return None
    try:
        user, item = event
    except (TypeError, ValueError):
        return None
    return user, item


def aggregate_view_events(
    events: Iterable[ViewEvent],
    user_index: BiMap,
    item_index: BiMap,
    diagnostics: Optional[Diagnostics] = None,
) -> List[PreferenceTriple]:
    """Convert view events into aggregated preference triples.

    Events whose user or item ID is not registered in the corresponding index
    are dropped and noted in ``diagnostics``. Malformed events are skipped the
    same way, so one bad record never aborts the run.

    Args:
        events: (user ID, item ID) view events.
        user_index: BiMap from user ID to row index.
        item_index: BiMap from item ID to column index.
        diagnostics: Optional accumulator for dropped-event notes.

    Returns:
        One PreferenceTriple per distinct surviving (user, item) pair, sorted
        by user index then item index. Every count is at least 1.

    Example:
        >>> users = BiMap.string_int(["u1"])
        >>> items = BiMap.string_int(["i1"])
        >>> aggregate_view_events(
        ...     [ViewEvent("u1", "i1"), ViewEvent("u1", "i1")], users, items
        ... )
        [PreferenceTriple(user=0, item=0, count=2)]
    """
    if diagnostics is None:
        diagnostics = Diagnostics()

    user_indices = []
    item_indices = []
    n_events = 0

    for event in events:
        n_events += 1
        pair = unpack_event(event)
        if pair is None:
            diagnostics.note("malformed_event", f"Skipping malformed view event {event!r}.")
            continue
        user, item = pair

        try:
            uindex = user_index.get(user)
            iindex = item_index.get(item)
        except TypeError:
            # unhashable IDs
            diagnostics.note("malformed_event", f"Skipping malformed view event {event!r}.")
            continue

        if uindex is None:
            diagnostics.note(
                "unknown_user",
                f"Couldn't convert nonexistent user ID {user} to Int index.",
            )
        if iindex is None:
            diagnostics.note(
                "unknown_item",
                f"Couldn't convert nonexistent item ID {item} to Int index.",
            )

        # keep events with valid user and item index
        if uindex is None or iindex is None:
            continue

        user_indices.append(uindex)
        item_indices.append(iindex)

    logger.info(
        "Translated view events",
        extra={
            "num_events": n_events,
            "num_valid_events": len(user_indices),
        },
    )

    if not user_indices:
        return []

    df = pd.DataFrame({"user": user_indices, "item": item_indices, "count": 1})
    counts = df.groupby(["user", "item"], sort=True)["count"].sum().reset_index()

    triples = [
        PreferenceTriple(user=int(u), item=int(i), count=int(c))
        for u, i, c in counts.itertuples(index=False, name=None)
    ]

    logger.info(f"Aggregated {len(user_indices)} views into {len(triples)} preference triples")

    return triples
