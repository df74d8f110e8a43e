"""Generate fake view events and an item catalog for testing and development.

This module creates synthetic CSV files for the similar-items recommender: a
log of user-item view events with timestamps, and an item catalog where each
item carries zero to two category labels.

Example:
    Run the script directly to generate default data:
        $ python scripts/generate_fake_data.py

    Or import and use programmatically:
        from scripts.generate_fake_data import generate_fake_views
        df = generate_fake_views(num_users=100, num_items=200)
"""

import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

import pandas as pd

# Default configuration constants
DEFAULT_NUM_USERS = 50
DEFAULT_NUM_ITEMS = 100
DEFAULT_NUM_VIEWS = 2000
DEFAULT_DAYS_BACK = 90
SECONDS_PER_DAY = 86400
DEFAULT_CATEGORIES = [
    "electronics", "clothing", "home", "sports", "toys",
    "books", "music", "beauty", "automotive", "garden",
]


def generate_fake_views(
    num_users: int = DEFAULT_NUM_USERS,
    num_items: int = DEFAULT_NUM_ITEMS,
    num_views: int = DEFAULT_NUM_VIEWS,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
) -> pd.DataFrame:
    """Generate synthetic view events.

    Args:
        num_users: Number of unique users to simulate. Must be positive.
        num_items: Number of unique items available. Must be positive.
        num_views: Total number of view records to generate. Must be positive.
        start_date: Start date for view timestamps. If None, defaults to
            90 days before end_date.
        end_date: End date for view timestamps. If None, defaults to now.

    Returns:
        A pandas DataFrame with columns user_id ("u1"...), item_id ("i1"...)
        and timestamp, sorted by timestamp.

    Raises:
        ValueError: If any numeric parameter is non-positive or if
            start_date is not before end_date.
    """
    if num_users <= 0 or num_items <= 0 or num_views <= 0:
        raise ValueError("num_users, num_items, and num_views must be positive")

    if end_date is None:
        end_date = datetime.now()
    if start_date is None:
        start_date = end_date - timedelta(days=DEFAULT_DAYS_BACK)

    if start_date >= end_date:
        raise ValueError("start_date must be before end_date")

    views = []
    days_range = max((end_date - start_date).days, 1)

    for _ in range(num_views):
        timestamp = start_date + timedelta(
            days=random.randrange(days_range),
            seconds=random.randrange(SECONDS_PER_DAY),
        )
        views.append({
            "user_id": f"u{random.randint(1, num_users)}",
            "item_id": f"i{random.randint(1, num_items)}",
            "timestamp": timestamp,
        })

    df = pd.DataFrame(views)
    df = df.sort_values("timestamp").reset_index(drop=True)

    return df


def generate_fake_items(
    num_items: int = DEFAULT_NUM_ITEMS,
    categories: Optional[List[str]] = None,
) -> pd.DataFrame:
    """Generate a synthetic item catalog.

    Each item gets zero, one or two category labels joined by "|". Items
    with no labels have an empty categories cell.

    Args:
        num_items: Number of items. Must be positive.
        categories: Labels to sample from.

    Returns:
        A pandas DataFrame with columns item_id and categories.
    """
    if num_items <= 0:
        raise ValueError("num_items must be positive")

    if categories is None:
        categories = DEFAULT_CATEGORIES

    rows = []
    for item_num in range(1, num_items + 1):
        n_categories = random.randint(0, 2)
        labels = random.sample(categories, n_categories)
        rows.append({"item_id": f"i{item_num}", "categories": "|".join(labels)})

    return pd.DataFrame(rows)


def main() -> None:
    """Generate default data and save it to data/fake_views.csv and data/fake_items.csv."""
    print(f"Generating {DEFAULT_NUM_VIEWS} fake views...")
    print(f"Users: {DEFAULT_NUM_USERS}, Items: {DEFAULT_NUM_ITEMS}")

    try:
        views = generate_fake_views()
        items = generate_fake_items()
    except ValueError as e:
        print(f"Error generating data: {e}")
        return

    data_dir = Path(__file__).parent.parent / "data"
    data_dir.mkdir(exist_ok=True)

    views_path = data_dir / "fake_views.csv"
    items_path = data_dir / "fake_items.csv"
    views.to_csv(views_path, index=False)
    items.to_csv(items_path, index=False)

    print(f"\nData generated successfully!")
    print(f"Saved to: {views_path} and {items_path}")
    print(f"\nData preview:")
    print(views.head(10))
    print(f"\nData summary:")
    print(f"  Total views: {len(views)}")
    print(f"  Unique users: {views['user_id'].nunique()}")
    print(f"  Unique items viewed: {views['item_id'].nunique()}")
    print(f"  Items without categories: {(items['categories'] == '').sum()}")


if __name__ == "__main__":
    main()
