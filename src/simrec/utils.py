"""Utility functions for the similar-items recommender.

This module provides helper functions for loading view events and item
catalogs from CSV files and for saving and loading trained model artifacts.
"""

import logging
from pathlib import Path
from typing import Dict, List, Tuple

import joblib
import pandas as pd

from src.simrec.bimap import BiMap
from src.simrec.data import Item, ViewEvent
from src.simrec.exceptions import ModelNotFoundError
from src.simrec.model import SimilarItemsModel

# Configure module logger
logger = logging.getLogger(__name__)

# Model artifact filenames
FEATURES_FILENAME = "product_features.joblib"
ITEM_MAPPING_FILENAME = "item_id_mapping.joblib"
ITEMS_FILENAME = "items.joblib"

# Separator between category labels in a catalog CSV cell
DEFAULT_CATEGORY_SEP = "|"


def _read_csv(csv_path: str, required_columns: set) -> pd.DataFrame:
    csv_file = Path(csv_path)
    if not csv_file.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")

    logger.info(f"Loading CSV from {csv_path}")
    # IDs are opaque strings; keep "007" from becoming 7
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)

    if not required_columns.issubset(df.columns):
        missing = required_columns - set(df.columns)
        raise ValueError(f"CSV missing required columns: {missing}")

    return df


def load_view_events(
    csv_path: str,
    user_col: str = "user_id",
    item_col: str = "item_id",
) -> List[ViewEvent]:
    """Load view events from a CSV file.

    Each row is one view. Extra columns such as timestamps are ignored.

    Args:
        csv_path: Path to CSV file containing view events.
        user_col: Name of the column containing user identifiers.
        item_col: Name of the column containing item identifiers.

    Returns:
        List of ViewEvent in file order.

    Raises:
        FileNotFoundError: If CSV file does not exist.
        ValueError: If CSV is missing required columns or is empty.

    Example:
        >>> events = load_view_events("data/views.csv")
        >>> print(f"Loaded {len(events)} views")
    """
    df = _read_csv(csv_path, {user_col, item_col})

    if df.empty:
        raise ValueError("Cannot load view events from empty CSV")

    events = [
        ViewEvent(user=user, item=item)
        for user, item in zip(df[user_col], df[item_col])
    ]

    logger.info(f"Loaded {len(events)} view events")
    logger.info(f"Unique users: {df[user_col].nunique()}")
    logger.info(f"Unique items: {df[item_col].nunique()}")

    return events


def load_item_catalog(
    csv_path: str,
    item_col: str = "item_id",
    categories_col: str = "categories",
    sep: str = DEFAULT_CATEGORY_SEP,
) -> Dict[str, Item]:
    """Load the item catalog from a CSV file.

    The categories cell holds labels joined by ``sep``. An empty cell, or a
    file without the categories column, means the item has no category
    metadata.

    Args:
        csv_path: Path to CSV file containing the catalog.
        item_col: Name of the column containing item identifiers.
        categories_col: Name of the column containing category labels.
        sep: Separator between labels.

    Returns:
        Dictionary mapping item ID to Item.

    Raises:
        FileNotFoundError: If CSV file does not exist.
        ValueError: If CSV is missing the item column or is empty.
    """
    df = _read_csv(csv_path, {item_col})

    if df.empty:
        raise ValueError("Cannot load item catalog from empty CSV")

    has_categories = categories_col in df.columns
    if not has_categories:
        logger.warning(f"No '{categories_col}' column in {csv_path}; items have no categories")

    catalog = {}
    for _, row in df.iterrows():
        categories = None
        if has_categories and row[categories_col].strip():
            categories = tuple(
                label.strip() for label in row[categories_col].split(sep) if label.strip()
            )
        catalog[row[item_col]] = Item(categories=categories)

    logger.info(f"Loaded {len(catalog)} catalog items")

    return catalog


def save_model_artifacts(
    model: SimilarItemsModel,
    output_dir: str,
    features_filename: str = FEATURES_FILENAME,
    item_mapping_filename: str = ITEM_MAPPING_FILENAME,
    items_filename: str = ITEMS_FILENAME,
) -> None:
    """Save a trained model to disk.

    Feature vectors, item ID mapping and item metadata are saved as separate
    joblib files in ``output_dir``, which is created if needed.

    Args:
        model: Trained model to save.
        output_dir: Directory path where artifacts will be saved.
        features_filename: Filename for the feature vectors.
        item_mapping_filename: Filename for the item ID mapping.
        items_filename: Filename for the item metadata.

    Raises:
        OSError: If unable to create output directory or save files.
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    logger.info(f"Saving model artifacts to {output_dir}")

    features_path = output_path / features_filename
    joblib.dump(dict(model.product_features), features_path)
    logger.info(f"Saved feature vectors to {features_path}")

    item_mapping_path = output_path / item_mapping_filename
    joblib.dump(dict(model.item_index), item_mapping_path)
    logger.info(f"Saved item mapping to {item_mapping_path}")

    items_path = output_path / items_filename
    joblib.dump(dict(model.items), items_path)
    logger.info(f"Saved item metadata to {items_path}")


def load_model_artifacts(
    model_dir: str,
    features_filename: str = FEATURES_FILENAME,
    item_mapping_filename: str = ITEM_MAPPING_FILENAME,
    items_filename: str = ITEMS_FILENAME,
) -> SimilarItemsModel:
    """Load a trained model from disk.

    Args:
        model_dir: Directory path where artifacts are stored.
        features_filename: Filename for the feature vectors.
        item_mapping_filename: Filename for the item ID mapping.
        items_filename: Filename for the item metadata.

    Returns:
        The reassembled SimilarItemsModel.

    Raises:
        ModelNotFoundError: If the directory or any artifact file is missing.
    """
    model_path = Path(model_dir)

    if not model_path.exists():
        raise ModelNotFoundError(str(model_dir))

    logger.info(f"Loading model artifacts from {model_dir}")

    loaded = []
    for filename in (features_filename, item_mapping_filename, items_filename):
        artifact_file = model_path / filename
        if not artifact_file.exists():
            raise ModelNotFoundError(
                str(model_dir), details={"missing_file": str(artifact_file)}
            )
        loaded.append(joblib.load(artifact_file))
        logger.info(f"Loaded {artifact_file}")

    product_features, item_mapping, items = loaded

    model = SimilarItemsModel(
        product_features=product_features,
        item_index=BiMap(item_mapping),
        items=items,
    )

    logger.info(f"Number of items: {len(model.item_index)}")
    logger.info(f"Feature vectors: {len(model.product_features)}, rank: {model.rank}")

    return model


def get_model_paths(
    model_dir: str,
    features_filename: str = FEATURES_FILENAME,
    item_mapping_filename: str = ITEM_MAPPING_FILENAME,
    items_filename: str = ITEMS_FILENAME,
) -> Tuple[Path, Path, Path]:
    """Get file paths for model artifacts without loading them.

    Returns:
        Paths of the feature vectors, item mapping and item metadata files.
    """
    model_path = Path(model_dir)
    return (
        model_path / features_filename,
        model_path / item_mapping_filename,
        model_path / items_filename,
    )


def check_model_exists(model_dir: str) -> bool:
    """Check if all required model artifacts exist.

    Args:
        model_dir: Directory path where artifacts should be stored.

    Returns:
        True if all model files exist, False otherwise.
    """
    return all(path.exists() for path in get_model_paths(model_dir))
