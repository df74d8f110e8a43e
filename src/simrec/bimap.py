"""Bidirectional mapping between string entity IDs and dense integer indices.

The ALS solver works on integer row/column indices, while users and items are
identified by opaque strings. ``BiMap`` keeps both directions of that mapping
so IDs can be translated to indices at training time and results translated
back at prediction time.
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Dict, Hashable, Iterable, Iterator, Optional

# Configure module logger
logger = logging.getLogger(__name__)


class BiMap(Mapping):
    """Immutable one-to-one mapping with O(1) lookup in both directions.

    Behaves like a read-only dict from keys to values. ``inverse`` returns the
    mapping from values back to keys.
    """

    def __init__(self, forward: Dict[Hashable, Hashable]):
        """Initialize from a forward dictionary.

        Args:
            forward: Mapping of keys to values. Values must be unique.

        Raises:
            ValueError: If two keys share the same value.
        """
        backward = {value: key for key, value in forward.items()}
        if len(backward) != len(forward):
            raise ValueError("BiMap values must be unique")

        self._forward = MappingProxyType(dict(forward))
        self._backward = MappingProxyType(backward)
        self._inverse: Optional["BiMap"] = None

    @classmethod
    def string_int(cls, ids: Iterable[str]) -> "BiMap":
        """Build a BiMap assigning each distinct ID an index in [0, count).

        IDs are sorted before numbering, so the same ID set always produces
        the same mapping.

        Args:
            ids: IDs to register. Duplicates are collapsed.

        Returns:
            BiMap from ID to contiguous integer index.

        Example:
            >>> index = BiMap.string_int(["b", "a", "b"])
            >>> index["a"], index.inverse[1]
            (0, 'b')
        """
        distinct = sorted(set(ids))
        logger.debug(f"Building string-int BiMap over {len(distinct)} IDs")
        return cls({entity_id: idx for idx, entity_id in enumerate(distinct)})

    def forward(self, key: Hashable) -> Hashable:
        """Translate a key to its value.

        Raises:
            KeyError: If the key was never registered.
        """
        return self._forward[key]

    def backward(self, value: Hashable) -> Hashable:
        """Translate a value back to its key.

        Raises:
            KeyError: If the value is outside the registered range.
        """
        return self._backward[value]

    @property
    def inverse(self) -> "BiMap":
        """Return the mapping from values back to keys."""
        if self._inverse is None:
            self._inverse = BiMap(dict(self._backward))
        return self._inverse

    def get(self, key: Hashable, default: Optional[Hashable] = None) -> Optional[Hashable]:
        return self._forward.get(key, default)

    def __getitem__(self, key: Hashable) -> Hashable:
        return self._forward[key]

    def __contains__(self, key: object) -> bool:
        return key in self._forward

    def __iter__(self) -> Iterator[Hashable]:
        return iter(self._forward)

    def __len__(self) -> int:
        return len(self._forward)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BiMap):
            return dict(self._forward) == dict(other._forward)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(frozenset(self._forward.items()))

    def __repr__(self) -> str:
        preview = list(self._forward.items())[:2]
        return f"BiMap([{len(self)}] {preview}...)"

    def __reduce__(self):
        # MappingProxyType is not picklable; rebuild from a plain dict
        return (BiMap, (dict(self._forward),))
