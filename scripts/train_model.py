"""Command-line interface for training the similar-items model.

This script trains a SimRec model from a CSV of view events and a CSV item
catalog and saves the model artifacts.

Example:
    Train a model with default settings:
        $ python scripts/train_model.py data/fake_views.csv data/fake_items.csv

    Train with custom parameters:
        $ python scripts/train_model.py data/views.csv data/items.csv \\
            --output-dir models/production \\
            --rank 20 \\
            --iterations 30
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from src.simrec.logging_config import setup_logging
from src.simrec.train import (
    DEFAULT_ALPHA,
    DEFAULT_ITERATIONS,
    DEFAULT_RANDOM_STATE,
    DEFAULT_RANK,
    DEFAULT_REGULARIZATION,
    TrainingConfig,
    train_with_config,
)


def parse_arguments() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Namespace object containing parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Train a similar-items recommendation model from CSV data.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Train with default settings
  python scripts/train_model.py data/views.csv data/items.csv

  # Train with custom output directory and rank
  python scripts/train_model.py data/views.csv data/items.csv --output-dir models/prod --rank 20

  # Train with verbose logging
  python scripts/train_model.py data/views.csv data/items.csv --verbose
        """,
    )

    parser.add_argument(
        "events_csv",
        type=str,
        help="Path to CSV file containing view events with columns: user_id, item_id",
    )

    parser.add_argument(
        "items_csv",
        type=str,
        help="Path to CSV file containing the item catalog with columns: "
        "item_id, categories ('|'-separated, may be empty)",
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        default="models",
        help="Directory where model artifacts will be saved (default: models)",
    )

    parser.add_argument(
        "--rank",
        type=int,
        default=DEFAULT_RANK,
        help=f"Length of the learned feature vectors (default: {DEFAULT_RANK})",
    )

    parser.add_argument(
        "--iterations",
        type=int,
        default=DEFAULT_ITERATIONS,
        help=f"Number of ALS iterations (default: {DEFAULT_ITERATIONS})",
    )

    parser.add_argument(
        "--regularization",
        type=float,
        default=DEFAULT_REGULARIZATION,
        help=f"ALS L2 regularization (default: {DEFAULT_REGULARIZATION})",
    )

    parser.add_argument(
        "--alpha",
        type=float,
        default=DEFAULT_ALPHA,
        help=f"Confidence scaling of view counts (default: {DEFAULT_ALPHA})",
    )

    parser.add_argument(
        "--random-state",
        type=int,
        default=DEFAULT_RANDOM_STATE,
        help=f"Random seed for reproducibility (default: {DEFAULT_RANDOM_STATE})",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Emit structured JSON log lines",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )

    return parser.parse_args()


def validate_csv_path(csv_path: str) -> None:
    """Validate that the CSV file exists and is readable.

    Raises:
        FileNotFoundError: If CSV file does not exist.
        ValueError: If path is not a file.
    """
    path = Path(csv_path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {csv_path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {csv_path}")


def main() -> int:
    """Main entry point for the training script.

    Returns:
        Exit code: 0 on success, 1 on error.
    """
    try:
        args = parse_arguments()

        setup_logging("DEBUG" if args.verbose else "INFO", json_format=args.json_logs)
        logger = logging.getLogger(__name__)

        for csv_path in (args.events_csv, args.items_csv):
            logger.info(f"Validating CSV path: {csv_path}")
            validate_csv_path(csv_path)

        config = TrainingConfig(
            events_csv=args.events_csv,
            items_csv=args.items_csv,
            output_dir=args.output_dir,
            rank=args.rank,
            iterations=args.iterations,
            regularization=args.regularization,
            alpha=args.alpha,
            random_state=args.random_state,
        )

        logger.info("=" * 70)
        logger.info("Training Configuration")
        logger.info("=" * 70)
        logger.info(f"Events CSV:       {config.events_csv}")
        logger.info(f"Items CSV:        {config.items_csv}")
        logger.info(f"Output directory: {config.output_dir}")
        logger.info(f"Rank:             {config.rank}")
        logger.info(f"Iterations:       {config.iterations}")
        logger.info(f"Regularization:   {config.regularization}")
        logger.info(f"Alpha:            {config.alpha}")
        logger.info(f"Random state:     {config.random_state}")
        logger.info("=" * 70)

        model = train_with_config(config)

        logger.info("=" * 70)
        logger.info("Training Summary")
        logger.info("=" * 70)
        logger.info(f"Catalog items:    {len(model.item_index)}")
        logger.info(f"Trained items:    {len(model.product_features)}")
        logger.info(f"Feature length:   {model.rank}")
        logger.info(f"Model saved to:   {Path(config.output_dir).absolute()}")
        logger.info("=" * 70)

        return 0

    except FileNotFoundError as e:
        logging.error(f"File error: {e}")
        return 1
    except ValueError as e:
        logging.error(f"Validation error: {e}")
        return 1
    except KeyboardInterrupt:
        logging.warning("Training interrupted by user")
        return 130
    except Exception as e:
        logging.error(f"Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
