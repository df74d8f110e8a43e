"""Data types shared by training and prediction.

Events and preference triples are lightweight named tuples since large
numbers of them flow through aggregation. Queries and results are frozen
dataclasses.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Tuple

# Configure module logger
logger = logging.getLogger(__name__)

# Default number of results returned by a query
DEFAULT_NUM = 10


class ViewEvent(NamedTuple):
    """A single user-viewed-item interaction."""

    user: str
    item: str


class PreferenceTriple(NamedTuple):
    """Aggregated implicit preference of one user for one item."""

    user: int
    item: int
    count: int


@dataclass(frozen=True)
class Item:
    """Catalog metadata for one item."""

    categories: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        if self.categories is not None:
            object.__setattr__(self, "categories", tuple(self.categories))


def _optional_frozenset(values: Optional[Iterable[str]]) -> Optional[FrozenSet[str]]:
    return None if values is None else frozenset(values)


@dataclass(frozen=True)
class Query:
    """A similar-items request.

    Attributes:
        items: Item IDs to find similar items for.
        num: Maximum number of results to return.
        categories: If set, only items sharing at least one category are kept.
        white_list: If set, only these item IDs may be returned.
        black_list: If set, these item IDs are never returned.
    """

    items: FrozenSet[str]
    num: int = DEFAULT_NUM
    categories: Optional[FrozenSet[str]] = None
    white_list: Optional[FrozenSet[str]] = None
    black_list: Optional[FrozenSet[str]] = None

    def __post_init__(self):
        object.__setattr__(self, "items", frozenset(self.items))
        object.__setattr__(self, "categories", _optional_frozenset(self.categories))
        object.__setattr__(self, "white_list", _optional_frozenset(self.white_list))
        object.__setattr__(self, "black_list", _optional_frozenset(self.black_list))


@dataclass(frozen=True)
class ItemScore:
    """An item ID with its aggregate similarity score."""

    item: str
    score: float


@dataclass(frozen=True)
class PredictedResult:
    """Ranked similar items, highest score first."""

    item_scores: Tuple[ItemScore, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "item_scores", tuple(self.item_scores))

    def __len__(self) -> int:
        return len(self.item_scores)

    def __iter__(self):
        return iter(self.item_scores)

    @property
    def items(self) -> List[str]:
        """Result item IDs in rank order."""
        return [item_score.item for item_score in self.item_scores]


@dataclass
class Diagnostics:
    """Side-channel log of recoverable problems seen during one call.

    Notes never change what a call returns; they only let callers observe
    dropped IDs and empty queries.
    """

    notes: List[str] = field(default_factory=list)
    counters: Dict[str, int] = field(default_factory=dict)

    def note(self, kind: str, message: str) -> None:
        """Record one observation and bump its counter.

        Args:
            kind: Short category such as ``"unknown_user"``.
            message: Human-readable description.
        """
        self.notes.append(message)
        self.counters[kind] = self.counters.get(kind, 0) + 1
        logger.info(message, extra={"diagnostic": kind})

    def count(self, kind: str) -> int:
        return self.counters.get(kind, 0)
