"""Similar-items recommendation module for SimRec.

This module learns item feature vectors from implicit view events with
Alternating Least Squares and ranks catalog items by their cosine similarity
to a set of query items, subject to white-list, black-list and category
filters.
"""

from src.simrec.data import Item, ItemScore, PredictedResult, Query, ViewEvent
from src.simrec.infer import predict
from src.simrec.model import SimilarItemsModel
from src.simrec.train import train

__all__ = [
    "Item",
    "ItemScore",
    "PredictedResult",
    "Query",
    "SimilarItemsModel",
    "ViewEvent",
    "predict",
    "train",
]
