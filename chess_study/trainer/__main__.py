"""
Main entry point for the interactive puzzle trainer.

Usage:
    python -m chess_study.trainer puzzles.pgn
    python -m chess_study.trainer puzzles/ --theme mate --difficulty beginner
"""

import argparse
import sys
from pathlib import Path

from chess_study.config import EngineConfig
from chess_study.puzzle import DIFFICULTIES, PuzzleLoader
from chess_study.trainer.interface import PuzzleTrainer


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Solve chess puzzles from a PGN file or directory"
    )
    parser.add_argument(
        "path",
        type=str,
        help="PGN file or directory of PGN files"
    )
    parser.add_argument(
        "--theme",
        action="append",
        default=None,
        help="Only puzzles with this theme (repeatable)"
    )
    parser.add_argument(
        "--difficulty",
        choices=DIFFICULTIES,
        default=None,
        help="Only puzzles of this difficulty"
    )
    parser.add_argument(
        "--max-puzzles",
        type=int,
        default=None,
        help="Maximum number of puzzles to play"
    )
    parser.add_argument(
        "--no-auto-advance",
        action="store_true",
        help="Do not auto-play the opponent's replies"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Log file (default: ~/.chess_study/trainer.log)"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log at DEBUG level"
    )

    args = parser.parse_args(argv)

    path = Path(args.path)
    if not path.exists():
        print(f"Error: not found: {path}", file=sys.stderr)
        return 1

    loader = PuzzleLoader(
        max_puzzles=args.max_puzzles,
        themes=args.theme,
        difficulty=args.difficulty,
    )
    puzzles = loader.load(path)

    if loader.errors:
        print(f"Skipped {len(loader.errors)} malformed games", file=sys.stderr)

    if not puzzles:
        print("Error: no puzzles matched", file=sys.stderr)
        return 1

    config = EngineConfig(auto_advance=not args.no_auto_advance)
    trainer = PuzzleTrainer(
        puzzles,
        config=config,
        log_file=Path(args.log_file) if args.log_file else None,
        debug=args.debug,
    )
    trainer.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
