"""Module for getting similar-item recommendations.

Uses a trained SimilarItemsModel to rank catalog items by their similarity to
a set of query items.
"""

import logging
import time
from typing import List, Optional, Sequence, Union

from src.simrec.data import Diagnostics, PredictedResult, Query
from src.simrec.metrics import metrics_service
from src.simrec.model import SimilarItemsModel
from src.simrec.rank import rank_candidates
from src.simrec.score import score_indices, translate_item_ids
from src.simrec.utils import load_model_artifacts

# Configure module logger
logger = logging.getLogger(__name__)

# Default parameters
DEFAULT_MODEL_DIR = "models"


def predict(
    model: SimilarItemsModel,
    query: Query,
    diagnostics: Optional[Diagnostics] = None,
) -> PredictedResult:
    """Rank catalog items by similarity to the query items.

    Unknown query, white-list and black-list IDs are dropped. If no query item
    is known the result is empty rather than an error.

    Args:
        model: Trained model.
        query: Query items, result size and filters.
        diagnostics: Optional accumulator for dropped-ID notes.

    Returns:
        PredictedResult with at most ``query.num`` items, highest score first,
        never containing the query items themselves.

    Raises:
        InternalConsistencyError: If a known query item has no feature vector.

    Example:
        >>> result = predict(model, Query(items={"i1", "i2"}, num=2))
        >>> [item_score.item for item_score in result]
        ['i3', 'i4']
    """
    start_time = time.time()

    if diagnostics is None:
        diagnostics = Diagnostics()

    # convert items to Int index
    query_list = translate_item_ids(model, query.items, "query", diagnostics)

    white_list = None
    if query.white_list is not None:
        white_list = translate_item_ids(model, query.white_list, "white_list", diagnostics)

    black_list = None
    if query.black_list is not None:
        black_list = translate_item_ids(model, query.black_list, "black_list", diagnostics)

    scores = score_indices(model, query_list, query.items, diagnostics)

    result = rank_candidates(
        scores,
        n=query.num,
        item_ids=model.item_ids,
        items=model.items,
        query_list=query_list,
        categories=query.categories,
        white_list=white_list,
        black_list=black_list,
    )

    latency_ms = (time.time() - start_time) * 1000
    metrics_service.record_prediction(latency_ms, len(result))

    logger.info(
        "Similar items predicted",
        extra={
            "num_query_items": len(query.items),
            "num_valid_query_items": len(query_list),
            "num": query.num,
            "num_results": len(result),
            "total_time_ms": round(latency_ms, 2),
        },
    )

    return result


def recommend_similar_items(
    query: Query,
    model_path: str = DEFAULT_MODEL_DIR,
    diagnostics: Optional[Diagnostics] = None,
) -> PredictedResult:
    """Load a saved model and run one query against it.

    Raises:
        ModelNotFoundError: If model files are not found at model_path.
    """
    load_start = time.time()
    model = load_model_artifacts(model_path)

    logger.info(
        "Model loaded",
        extra={
            "model_path": model_path,
            "load_time_ms": round((time.time() - load_start) * 1000, 2),
            "num_items": len(model.item_index),
        },
    )

    return predict(model, query, diagnostics)


def batch_predict(
    model: SimilarItemsModel,
    queries: Sequence[Query],
) -> List[Union[PredictedResult, Exception]]:
    """Run several queries against one model.

    A query that fails is logged and its exception takes its slot in the
    output, so the rest of the batch still completes and a failed query is
    never mistaken for one with no results.

    Args:
        model: Trained model shared by all queries.
        queries: Queries to run.

    Returns:
        One PredictedResult, or the exception raised for it, per query in
        input order.
    """
    logger.info(f"Running batch prediction for {len(queries)} queries")

    results = []
    for query in queries:
        try:
            results.append(predict(model, query))
        except Exception as e:
            logger.error(
                f"Failed to predict similar items for {sorted(query.items, key=str)}: {e}",
                exc_info=True,
            )
            metrics_service.record_failed_prediction()
            # Continue with other queries
            results.append(e)

    n_failed = sum(isinstance(r, Exception) for r in results)
    logger.info(f"Batch prediction completed for {len(results)} queries ({n_failed} failed)")

    return results
