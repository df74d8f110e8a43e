"""Similar-items model training module.

This module turns view events into a trained SimilarItemsModel. Views are
aggregated into implicit preference counts, factorized with implicit-feedback
Alternating Least Squares, and the resulting item feature vectors are packaged
with the item ID index and item catalog.
"""

import logging
import time
from dataclasses import dataclass
from functools import partial
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence

import numpy as np
from implicit.als import AlternatingLeastSquares
from scipy.sparse import csr_matrix

from src.simrec.aggregate import aggregate_view_events, unpack_event
from src.simrec.bimap import BiMap
from src.simrec.data import Diagnostics, Item, PreferenceTriple, ViewEvent
from src.simrec.exceptions import InvalidTrainingInputError
from src.simrec.metrics import metrics_service
from src.simrec.model import SimilarItemsModel
from src.simrec.utils import load_item_catalog, load_view_events, save_model_artifacts

# Configure module logger
logger = logging.getLogger(__name__)

# Model configuration constants
DEFAULT_RANK = 10
DEFAULT_ITERATIONS = 20
DEFAULT_REGULARIZATION = 0.01
DEFAULT_ALPHA = 1.0
DEFAULT_RANDOM_STATE = 42

# (triples, n_users, n_items, rank, iterations) -> item index to feature vector
Factorizer = Callable[[Sequence[PreferenceTriple], int, int, int, int], Dict[int, np.ndarray]]


@dataclass
class TrainingConfig:
    """Configuration for a training run from CSV files.

    Attributes:
        events_csv: CSV of view events with user_id and item_id columns.
        items_csv: CSV of the item catalog with item_id and categories columns.
        output_dir: Directory where model artifacts are written.
        rank: Length of the learned feature vectors.
        iterations: Number of ALS passes.
        regularization: L2 regularization of the ALS solver.
        alpha: Confidence scaling applied to view counts by the solver.
        random_state: Random seed for reproducibility.
        save: Whether to save artifacts to output_dir.
    """

    events_csv: str
    items_csv: str
    output_dir: str = "models"
    rank: int = DEFAULT_RANK
    iterations: int = DEFAULT_ITERATIONS
    regularization: float = DEFAULT_REGULARIZATION
    alpha: float = DEFAULT_ALPHA
    random_state: int = DEFAULT_RANDOM_STATE
    save: bool = True

    def validate(self) -> None:
        """Check the solver settings.

        Raises:
            InvalidTrainingInputError: If rank or iterations is not positive.
        """
        validate_training_params(self.rank, self.iterations)


def validate_training_params(rank: int, iterations: int) -> None:
    """Reject impossible factorization settings.

    Raises:
        InvalidTrainingInputError: If rank or iterations is not positive.
    """
    if not isinstance(rank, (int, np.integer)) or rank <= 0:
        raise InvalidTrainingInputError(
            f"rank must be a positive integer, got {rank!r}",
            details={"rank": rank},
        )
    if not isinstance(iterations, (int, np.integer)) or iterations <= 0:
        raise InvalidTrainingInputError(
            f"iterations must be a positive integer, got {iterations!r}",
            details={"iterations": iterations},
        )


def build_interaction_matrix(
    triples: Sequence[PreferenceTriple],
    n_users: int,
    n_items: int,
) -> csr_matrix:
    """Build the sparse user x item view-count matrix from triples."""
    rows = np.fromiter((t.user for t in triples), dtype=np.int32, count=len(triples))
    cols = np.fromiter((t.item for t in triples), dtype=np.int32, count=len(triples))
    data = np.fromiter((t.count for t in triples), dtype=np.float32, count=len(triples))

    user_item_matrix = csr_matrix(
        (data, (rows, cols)),
        shape=(n_users, n_items),
        dtype=np.float32,
    )

    logger.info(f"Matrix shape: {user_item_matrix.shape}")
    logger.info(f"Non-zero entries: {user_item_matrix.nnz}")

    return user_item_matrix


def train_als(
    triples: Sequence[PreferenceTriple],
    n_users: int,
    n_items: int,
    rank: int,
    iterations: int,
    regularization: float = DEFAULT_REGULARIZATION,
    alpha: float = DEFAULT_ALPHA,
    random_state: int = DEFAULT_RANDOM_STATE,
) -> Dict[int, np.ndarray]:
    """Learn item feature vectors with implicit-feedback ALS.

    View counts are treated as confidence weights. Only items that appear in
    at least one triple get a vector; the solver's output for untouched
    columns carries no signal and is discarded.

    Args:
        triples: Aggregated preference triples.
        n_users: Number of rows in the interaction matrix.
        n_items: Number of columns in the interaction matrix.
        rank: Length of the learned vectors.
        iterations: Number of ALS passes.
        regularization: L2 regularization.
        alpha: Confidence scaling of the counts.
        random_state: Random seed.

    Returns:
        Mapping from item index to feature vector of length ``rank``.
    """
    validate_training_params(rank, iterations)

    user_item_matrix = build_interaction_matrix(triples, n_users, n_items)

    logger.info(f"Training ALS model with rank {rank}")
    logger.info(f"Random state: {random_state}, Iterations: {iterations}")

    model = AlternatingLeastSquares(
        factors=rank,
        regularization=regularization,
        alpha=alpha,
        iterations=iterations,
        random_state=random_state,
        use_gpu=False,
        calculate_training_loss=False,
    )
    model.fit(user_item_matrix, show_progress=False)

    item_factors = np.asarray(model.item_factors, dtype=np.float64)
    trained_items = sorted({t.item for t in triples})

    logger.info("Model training completed")

    return {idx: item_factors[idx, :rank].copy() for idx in trained_items}


def _distinct_users(events: Iterable[ViewEvent]) -> List[str]:
    users = set()
    for event in events:
        pair = unpack_event(event)
        # malformed events and non-string IDs are left for the aggregator to report
        if pair is not None and isinstance(pair[0], str):
            users.add(pair[0])
    return sorted(users)


def train(
    events: Iterable[ViewEvent],
    catalog: Mapping[str, Item],
    rank: int = DEFAULT_RANK,
    iterations: int = DEFAULT_ITERATIONS,
    users: Optional[Iterable[str]] = None,
    regularization: float = DEFAULT_REGULARIZATION,
    alpha: float = DEFAULT_ALPHA,
    random_state: int = DEFAULT_RANDOM_STATE,
    factorizer: Optional[Factorizer] = None,
    diagnostics: Optional[Diagnostics] = None,
) -> SimilarItemsModel:
    """Train a similar-items model from view events and an item catalog.

    Args:
        events: (user ID, item ID) view events.
        catalog: Item metadata by item ID. Defines the item index; views of
            items missing from the catalog are dropped.
        rank: Length of the learned feature vectors.
        iterations: Number of ALS passes.
        users: Known user IDs. Defaults to the users seen in ``events``.
        regularization: L2 regularization for the default factorizer.
        alpha: Confidence scaling for the default factorizer.
        random_state: Random seed for the default factorizer.
        factorizer: Alternative implicit-feedback factorization routine with
            the signature of :func:`train_als` (without keyword options).
        diagnostics: Optional accumulator for dropped-event notes.

    Returns:
        Trained SimilarItemsModel.

    Raises:
        InvalidTrainingInputError: If rank or iterations is not positive, the
            catalog is empty, or no view event survives aggregation.

    Example:
        >>> model = train(
        ...     [ViewEvent("u1", "i1"), ViewEvent("u1", "i2")],
        ...     {"i1": Item(), "i2": Item(categories=("music",))},
        ...     rank=2,
        ...     iterations=5,
        ... )
        >>> sorted(model.item_index)
        ['i1', 'i2']
    """
    start_time = time.time()

    validate_training_params(rank, iterations)

    if not catalog:
        raise InvalidTrainingInputError("item catalog is empty")

    if diagnostics is None:
        diagnostics = Diagnostics()

    events = list(events)

    # create user and item string ID to integer index BiMaps
    user_index = BiMap.string_int(users if users is not None else _distinct_users(events))
    item_index = BiMap.string_int(catalog.keys())

    items = {item_index[item_id]: item for item_id, item in catalog.items()}

    logger.info(
        "Starting similar-items training",
        extra={
            "num_events": len(events),
            "num_users": len(user_index),
            "num_items": len(item_index),
            "rank": rank,
            "iterations": iterations,
        },
    )

    triples = aggregate_view_events(events, user_index, item_index, diagnostics)
    if not triples:
        raise InvalidTrainingInputError(
            "no view event matched a known user and item",
            details={"num_events": len(events)},
        )

    if factorizer is None:
        factorizer = partial(
            train_als,
            regularization=regularization,
            alpha=alpha,
            random_state=random_state,
        )

    product_features = factorizer(triples, len(user_index), len(item_index), rank, iterations)

    model = SimilarItemsModel(
        product_features=product_features,
        item_index=item_index,
        items=items,
    )

    duration_ms = (time.time() - start_time) * 1000
    metrics_service.record_training(duration_ms, len(model.product_features))

    logger.info(f"Trained feature vectors for {len(model.product_features)} items")

    return model


def train_with_config(config: TrainingConfig) -> SimilarItemsModel:
    """Train from CSV files described by a TrainingConfig.

    Loads events and catalog, trains, and saves artifacts when
    ``config.save`` is set.

    Raises:
        FileNotFoundError: If a CSV file does not exist.
        ValueError: If data is invalid or training parameters are incorrect.
        OSError: If unable to save model artifacts.
    """
    logger.info("=" * 60)
    logger.info("Starting similar-items model training")
    logger.info("=" * 60)

    config.validate()

    try:
        events = load_view_events(config.events_csv)
        catalog = load_item_catalog(config.items_csv)

        model = train(
            events,
            catalog,
            rank=config.rank,
            iterations=config.iterations,
            regularization=config.regularization,
            alpha=config.alpha,
            random_state=config.random_state,
        )

        if config.save:
            save_model_artifacts(model, config.output_dir)

        logger.info("=" * 60)
        logger.info("Training completed successfully!")
        logger.info("=" * 60)

        return model

    except Exception as e:
        logger.error(f"Training failed: {e}", exc_info=True)
        raise


def main() -> None:
    """Main entry point for command-line execution."""
    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = TrainingConfig(
        events_csv="data/fake_views.csv",
        items_csv="data/fake_items.csv",
    )

    try:
        train_with_config(config)
    except Exception as e:
        logger.error(f"Failed to train model: {e}")
        exit(1)


if __name__ == "__main__":
    main()
