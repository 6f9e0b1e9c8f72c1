#!/usr/bin/env python3
"""
CLI tool for checking puzzle collections.

Usage:
    python tools/validate_puzzles.py data/puzzles.pgn \\
        --output-report data/puzzles_report.md

    python tools/validate_puzzles.py data/puzzles/ --max-puzzles 5000
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chess_study.puzzle.validator import PuzzleSetValidator


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def validate_puzzles(args) -> bool:
    """Load the collection, print the report and return whether it passed."""
    path = Path(args.path)

    if not path.exists():
        print(f"Error: Puzzle collection not found: {path}")
        sys.exit(1)

    validator = PuzzleSetValidator.from_path(path, max_puzzles=args.max_puzzles)

    output_path = None
    if args.output_report:
        output_path = Path(args.output_report)

    report = validator.generate_report(output_path=output_path)
    print(report)

    return validator.report.is_valid


def main():
    parser = argparse.ArgumentParser(
        description="Validate a PGN puzzle collection",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "path",
        help="PGN file or directory of PGN files",
    )
    parser.add_argument(
        "--output-report",
        type=str,
        default=None,
        help="Write the markdown report to this file",
    )
    parser.add_argument(
        "--max-puzzles",
        type=int,
        default=None,
        help="Maximum number of puzzles to check",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()
    setup_logging(verbose=args.verbose)

    try:
        valid = validate_puzzles(args)
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(1)

    sys.exit(0 if valid else 1)


if __name__ == "__main__":
    main()
