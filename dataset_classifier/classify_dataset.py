#!/usr/bin/env python3
"""
Dataset Classification Script.

Groups the patient records of a CSV file by the value(s) of one column
and writes a per-group summary listing every matching record.

Usage:
    # Classify by region (the default column)
    python -m dataset_classifier.classify_dataset results/by_region

    # Classify by symptom; multi-valued cells count under every symptom
    python -m dataset_classifier.classify_dataset results/by_symptom Symptoms

    # Use another input file and a config file
    python -m dataset_classifier.classify_dataset results/out Gender \\
        --input data/MedicalFiles.csv --config config.yaml

Exit status is 0 when the job completes and 1 when it fails.
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from dataset_classifier.core.config import reload_settings
from dataset_classifier.core.exceptions import ClassifierError
from dataset_classifier.engines.local_runner import LocalJobRunner

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Classify medical records by the values of one column",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python -m dataset_classifier.classify_dataset results/by_region
    python -m dataset_classifier.classify_dataset results/by_symptom Symptoms
        """
    )

    parser.add_argument("output", help="Output directory (must not exist)")
    parser.add_argument("target_column", nargs="?", help="Column to classify by (default: Region)")
    parser.add_argument("--input", "-i", dest="input_path", help="Input CSV file (default: MedicalFiles.csv)")
    parser.add_argument("--config", "-c", help="YAML config file")
    parser.add_argument("--workers", "-w", type=int, help="Max parallel workers")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    return parser


def classify_dataset(args: argparse.Namespace) -> int:
    """Run one classification job; return the process exit status."""
    try:
        settings = reload_settings(
            args.config,
            output_location=args.output,
            target_column=args.target_column,
            input_path=args.input_path,
            max_workers=args.workers,
        )
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1
    except ClassifierError as e:
        logger.error(f"Invalid configuration [{e.error_type}]: {e.message}")
        return 1

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))

    try:
        result = LocalJobRunner(settings).run()
    except ClassifierError as e:
        logger.error(f"Job failed [{e.error_type}]: {e.message}")
        return 1

    logger.info(f"{len(result.entries)} classification groups written to {result.output_path}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    args = build_parser().parse_args(argv)
    return classify_dataset(args)


if __name__ == "__main__":
    sys.exit(main())
