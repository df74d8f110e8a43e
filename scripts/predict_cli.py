"""CLI script for getting similar-item recommendations.

Useful for testing and evaluation. Loads a saved model, ranks items similar
to the given query items and prints them to the console.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.simrec.data import DEFAULT_NUM, Diagnostics, PredictedResult, Query
from src.simrec.exceptions import ModelNotFoundError
from src.simrec.infer import recommend_similar_items

# Setup logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s"
)
logger = logging.getLogger(__name__)


def get_similar_items(
    items: List[str],
    model_dir: str = "models",
    num: int = DEFAULT_NUM,
    categories: Optional[List[str]] = None,
    white_list: Optional[List[str]] = None,
    black_list: Optional[List[str]] = None,
) -> tuple[PredictedResult, Diagnostics]:
    """Get items similar to the query items.

    Args:
        items: Query item IDs
        model_dir: Directory with model files
        num: Number of results to return
        categories: Optional required categories
        white_list: Optional allowed item IDs
        black_list: Optional excluded item IDs

    Returns:
        Tuple of (ranked result, diagnostics for dropped IDs)
    """
    query = Query(
        items=items,
        num=num,
        categories=categories,
        white_list=white_list,
        black_list=black_list,
    )
    diagnostics = Diagnostics()

    try:
        result = recommend_similar_items(query, model_path=model_dir, diagnostics=diagnostics)
    except ModelNotFoundError as e:
        print(f"Error: Model not found in {model_dir}", file=sys.stderr)
        print(f"  {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    return result, diagnostics


def main() -> None:
    """Main CLI function."""
    parser = argparse.ArgumentParser(
        description="Get items similar to a set of query items",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/predict_cli.py i1 i2
  python scripts/predict_cli.py i1 --num 5
  python scripts/predict_cli.py i1 --categories music sports
  python scripts/predict_cli.py i1 i2 --black-list i3 --explain
        """
    )

    parser.add_argument(
        "items",
        nargs="+",
        help="Query item IDs"
    )

    parser.add_argument(
        "--num",
        type=int,
        default=DEFAULT_NUM,
        help=f"Number of similar items to return (default: {DEFAULT_NUM})"
    )

    parser.add_argument(
        "--categories",
        nargs="+",
        default=None,
        help="Only return items in at least one of these categories"
    )

    parser.add_argument(
        "--white-list",
        nargs="+",
        default=None,
        help="Only return these item IDs"
    )

    parser.add_argument(
        "--black-list",
        nargs="+",
        default=None,
        help="Never return these item IDs"
    )

    parser.add_argument(
        "--model-dir",
        type=str,
        default="models",
        help="Directory containing model files (default: models)"
    )

    parser.add_argument(
        "--explain",
        action="store_true",
        help="Show scores and dropped IDs"
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    result, diagnostics = get_similar_items(
        items=args.items,
        model_dir=args.model_dir,
        num=args.num,
        categories=args.categories,
        white_list=args.white_list,
        black_list=args.black_list,
    )

    print(f"\nItems similar to {args.items}:")
    print(f"  Top {len(result)} items: {result.items}")

    if args.explain:
        print(f"\nScores:")
        for item_score in result:
            print(f"  {item_score.item}: {item_score.score:.4f}")
        if diagnostics.notes:
            print(f"\nNotes:")
            for note in diagnostics.notes:
                print(f"  {note}")

    print()


if __name__ == "__main__":
    main()
