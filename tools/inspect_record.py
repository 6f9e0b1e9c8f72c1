#!/usr/bin/env python3
"""
Inspect a game record: import it into a variation tree and print what the
engine sees.

Usage:
    python tools/inspect_record.py games/annotated.pgn
    python tools/inspect_record.py games/annotated.pgn --main-line
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from chess_study.errors import ParseError
from chess_study.tree import VariationTree


def setup_logging(verbose: bool = False):
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def show_parse_error(text: str, error: ParseError):
    """Print the offending line with a caret under the error offset."""
    line_start = text.rfind("\n", 0, error.offset) + 1
    line_end = text.find("\n", error.offset)
    if line_end == -1:
        line_end = len(text)

    line_number = text.count("\n", 0, error.offset) + 1
    column = error.offset - line_start

    print(f"Parse error at line {line_number}, column {column + 1}: {error.message}")
    print(text[line_start:line_end])
    print(" " * column + "^")


def inspect_record(path: Path, main_line_only: bool = False) -> int:
    text = path.read_text(encoding="utf-8", errors="ignore")
    tree = VariationTree()

    try:
        tree.import_record(text)
    except ParseError as e:
        show_parse_error(text, e)
        return 1

    main_line = tree.main_line()

    print("=" * 60)
    print(f"Record: {path}")
    print("=" * 60)
    for name, value in tree.headers.items():
        print(f"  {name}: {value}")
    print(f"Nodes: {len(tree) - 1}")
    print(f"Main line: {len(main_line)} plies: {' '.join(tree.main_line_sans())}")
    print(f"Variations: {sum(max(0, len(node.children) - 1) for node in tree)}")
    print(f"Final position: {main_line[-1].fen if main_line else tree.root.fen}")
    print()
    print(tree.export_record(main_line_only=main_line_only))
    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Import a game record and print the resulting tree",
    )
    parser.add_argument("file", help="Game record (PGN subset)")
    parser.add_argument(
        "--main-line",
        action="store_true",
        help="Export only the main line",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()
    setup_logging(verbose=args.verbose)

    path = Path(args.file)
    if not path.exists():
        print(f"Error: File not found: {path}")
        sys.exit(1)

    sys.exit(inspect_record(path, main_line_only=args.main_line))


if __name__ == "__main__":
    main()
