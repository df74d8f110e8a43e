"""End-to-end tests for SimRec.

Tests the full flow from CSV files through ALS training and saved artifacts
to similar-item queries.
"""

import logging
import random
from pathlib import Path
from typing import Generator

import pandas as pd
import pytest

from src.simrec import Query, predict
from src.simrec.data import Diagnostics
from src.simrec.exceptions import ModelNotFoundError
from src.simrec.infer import recommend_similar_items
from src.simrec.train import TrainingConfig, train_with_config
from src.simrec.utils import check_model_exists

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)

NUM_USERS = 20
NUM_ITEMS = 40
CATEGORIES = ["music", "books", "sports"]


@pytest.fixture(scope="module")
def data_files(tmp_path_factory) -> Generator[tuple, None, None]:
    """Write fake view and catalog CSVs.

    Items i37-i40 never receive a view; every fifth item has no categories.
    """
    random.seed(42)
    data_dir = tmp_path_factory.mktemp("e2e_data")

    views = [
        {
            "user_id": f"u{random.randint(1, NUM_USERS)}",
            "item_id": f"i{random.randint(1, NUM_ITEMS - 4)}",
            "timestamp": "2024-01-01T00:00:00",
        }
        for _ in range(400)
    ]
    # a view of an item missing from the catalog
    views.append({"user_id": "u1", "item_id": "retired", "timestamp": "2024-01-02T00:00:00"})

    items = [
        {
            "item_id": f"i{n}",
            "categories": "" if n % 5 == 0 else CATEGORIES[n % 3],
        }
        for n in range(1, NUM_ITEMS + 1)
    ]

    events_csv = data_dir / "views.csv"
    items_csv = data_dir / "items.csv"
    pd.DataFrame(views).to_csv(events_csv, index=False)
    pd.DataFrame(items).to_csv(items_csv, index=False)

    yield str(events_csv), str(items_csv)


@pytest.fixture(scope="module")
def trained_model_dir(data_files, tmp_path_factory) -> Generator[Path, None, None]:
    """Train a model from the CSVs and save it."""
    events_csv, items_csv = data_files
    model_dir = tmp_path_factory.mktemp("e2e_model")

    config = TrainingConfig(
        events_csv=events_csv,
        items_csv=items_csv,
        output_dir=str(model_dir),
        rank=6,
        iterations=5,
        random_state=42,
    )
    train_with_config(config)

    yield model_dir


def test_e2e_training_writes_artifacts(trained_model_dir):
    """Test that training from CSV leaves a loadable model behind."""
    assert check_model_exists(str(trained_model_dir))


def test_e2e_recommend_similar_items(trained_model_dir):
    """Test a plain similar-items query against the saved model."""
    query = Query(items={"i1", "i2"}, num=5)

    result = recommend_similar_items(query, model_path=str(trained_model_dir))

    assert len(result) == 5
    assert not {"i1", "i2"} & set(result.items)
    assert len(set(result.items)) == 5
    scores = [item_score.score for item_score in result]
    assert scores == sorted(scores, reverse=True)
    # never-viewed items have no vectors and are never scored
    assert not {"i37", "i38", "i39", "i40"} & set(result.items)


def test_e2e_category_filter(data_files, trained_model_dir):
    """Test that category filtering holds on a trained model."""
    _, items_csv = data_files
    catalog = pd.read_csv(items_csv, dtype=str, keep_default_na=False)
    catalog = catalog.set_index("item_id")["categories"]

    result = recommend_similar_items(
        Query(items={"i3"}, num=50, categories={"music"}),
        model_path=str(trained_model_dir),
    )

    assert len(result) > 0
    assert all(catalog[item_id] == "music" for item_id in result.items)


def test_e2e_black_list_and_white_list(trained_model_dir):
    """Test allow and deny lists together on a trained model."""
    unfiltered = recommend_similar_items(
        Query(items={"i4"}, num=3), model_path=str(trained_model_dir)
    )
    best = unfiltered.items[0]

    result = recommend_similar_items(
        Query(
            items={"i4"},
            num=3,
            white_list={best, "i6", "i7", "i8"},
            black_list={best},
        ),
        model_path=str(trained_model_dir),
    )

    assert best not in result.items
    assert set(result.items) <= {"i6", "i7", "i8"}


def test_e2e_unknown_query_items(trained_model_dir):
    """Test that a query of unknown IDs returns an empty result."""
    diagnostics = Diagnostics()

    result = recommend_similar_items(
        Query(items={"retired", "ghost"}, num=3),
        model_path=str(trained_model_dir),
        diagnostics=diagnostics,
    )

    assert len(result) == 0
    assert diagnostics.count("empty_query") == 1


def test_e2e_missing_model_dir(tmp_path):
    """Test that querying without a trained model fails clearly."""
    with pytest.raises(ModelNotFoundError):
        recommend_similar_items(Query(items={"i1"}), model_path=str(tmp_path / "none"))


def test_e2e_training_without_saving(data_files):
    """Test that save=False trains in memory only."""
    events_csv, items_csv = data_files
    config = TrainingConfig(
        events_csv=events_csv,
        items_csv=items_csv,
        output_dir="should_not_exist",
        rank=4,
        iterations=2,
        save=False,
    )

    model = train_with_config(config)

    assert not Path("should_not_exist").exists()
    assert len(model.item_index) == NUM_ITEMS
    assert len(model.product_features) <= NUM_ITEMS - 4
    assert len(predict(model, Query(items={"i1"}, num=3))) == 3
