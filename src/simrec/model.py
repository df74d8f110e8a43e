"""Trained similar-items model.

A model bundles the ALS item feature vectors with the item ID index and the
item catalog metadata. It is built once per training run and never mutated,
so a single instance can serve any number of concurrent predictions.
"""

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping

import numpy as np

from src.simrec.bimap import BiMap
from src.simrec.data import Item

# Configure module logger
logger = logging.getLogger(__name__)


class SimilarItemsModel:
    """Immutable bundle of item feature vectors, item index and item metadata.

    Attributes:
        product_features: Read-only mapping from item index to feature vector.
        item_index: BiMap from item ID to item index.
        items: Read-only mapping from item index to Item metadata.
    """

    __slots__ = ("product_features", "item_index", "items", "_feature_ids", "_feature_matrix")

    def __init__(
        self,
        product_features: Mapping[int, np.ndarray],
        item_index: BiMap,
        items: Mapping[int, Item],
    ):
        """Initialize and freeze the model.

        Args:
            product_features: Feature vector per trained item index.
            item_index: BiMap from item ID to item index.
            items: Item metadata per item index.

        Raises:
            ValueError: If feature vectors differ in length.
        """
        features: Dict[int, np.ndarray] = {}
        for idx, vector in product_features.items():
            array = np.array(vector, dtype=np.float64)
            array.setflags(write=False)
            features[int(idx)] = array

        lengths = {vector.shape for vector in features.values()}
        if len(lengths) > 1:
            raise ValueError(f"Feature vectors have inconsistent shapes: {sorted(lengths)}")

        feature_ids = np.array(sorted(features), dtype=np.int64)
        if len(feature_ids) > 0:
            feature_matrix = np.vstack([features[idx] for idx in feature_ids])
        else:
            feature_matrix = np.empty((0, 0), dtype=np.float64)
        feature_ids.setflags(write=False)
        feature_matrix.setflags(write=False)

        setter = object.__setattr__
        setter(self, "product_features", MappingProxyType(features))
        setter(self, "item_index", item_index)
        setter(self, "items", MappingProxyType(dict(items)))
        setter(self, "_feature_ids", feature_ids)
        setter(self, "_feature_matrix", feature_matrix)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def item_ids(self) -> BiMap:
        """BiMap from item index back to item ID."""
        return self.item_index.inverse

    @property
    def rank(self) -> int:
        """Length of the feature vectors, or 0 for an empty model."""
        return int(self._feature_matrix.shape[1]) if len(self._feature_ids) else 0

    @property
    def feature_ids(self) -> np.ndarray:
        """Item indices that have feature vectors, ascending."""
        return self._feature_ids

    @property
    def feature_matrix(self) -> np.ndarray:
        """Feature vectors stacked in ``feature_ids`` order."""
        return self._feature_matrix

    def lookup(self, item_idx: int) -> List[np.ndarray]:
        """Return the feature vectors stored for an item index.

        The list holds one vector for a trained item and is empty for an item
        that never received a view.
        """
        vector = self.product_features.get(item_idx)
        return [] if vector is None else [vector]

    def __reduce__(self):
        return (
            SimilarItemsModel,
            (dict(self.product_features), self.item_index, dict(self.items)),
        )

    def __repr__(self) -> str:
        features_preview = [
            (idx, vector.tolist()) for idx, vector in list(self.product_features.items())[:2]
        ]
        return (
            f"SimilarItemsModel("
            f"product_features: [{len(self.product_features)}]({features_preview}...) "
            f"item_index: [{len(self.item_index)}]"
            f"({list(self.item_index.items())[:2]}...) "
            f"items: [{len(self.items)}]({list(self.items.items())[:2]}...))"
        )
