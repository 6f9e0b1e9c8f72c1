"""
Interactive Puzzle Trainer

A line-oriented front end over StudyEngine. It reads one command per line
from stdin and answers on stdout.

Commands:
    - <move>: Play a move in SAN or UCI notation (e4, Nf3, e2e4)
    - undo: Step back one move
    - redo [n]: Step forward into the n-th continuation (main line by default)
    - hint: Show the next solution move (costs points)
    - retry: Return to the last correct position
    - solution: Show the remaining solution
    - next: Go to the next puzzle
    - board: Print the board
    - moves: Print the move list with variations
    - pgn: Print the explored tree as PGN
    - quit: Exit

Engine errors (illegal moves, nothing to undo) are reported and the loop
goes on. Any other exception is logged with its traceback and the current
puzzle is restarted, so one bad puzzle never ends the session.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import chess
import chess.pgn

from chess_study.config import EngineConfig
from chess_study.engine import StudyEngine
from chess_study.errors import StudyError
from chess_study.puzzle import Puzzle, PuzzleOutcome, PuzzleProgress
from chess_study.record.exporter import tree_to_game
from chess_study.tree import PositionNode, VariationTree

DEFAULT_LOG_FILE = Path.home() / ".chess_study" / "trainer.log"


def setup_logger(log_file: Optional[Path] = None, debug: bool = False) -> logging.Logger:
    """
    Setup file-based logger for the trainer.

    stdout belongs to the user, so everything goes to a log file.

    Args:
        log_file: Log destination (default: ~/.chess_study/trainer.log)
        debug: If True, log at DEBUG level; otherwise INFO level

    Returns:
        Configured package logger
    """
    log_file = Path(log_file) if log_file else DEFAULT_LOG_FILE
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("chess_study")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    logger.handlers.clear()

    handler = logging.FileHandler(log_file, mode='w')
    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


class PuzzleTrainer:
    """
    Command loop that walks a student through a list of puzzles.

    Attributes:
        engine: Engine holding the current puzzle and the explored tree
        puzzles: Puzzles in play order
        index: Position of the current puzzle
        finished: Progress of every puzzle left so far, by puzzle id
        running: False once quit is requested or puzzles run out
    """

    def __init__(
        self,
        puzzles: Iterable[Puzzle],
        config: Optional[EngineConfig] = None,
        log_file: Optional[Path] = None,
        debug: bool = False,
    ):
        self.puzzles: List[Puzzle] = list(puzzles)
        self.engine = StudyEngine(config=config)
        self.index = 0
        self.finished: Dict[str, PuzzleProgress] = {}
        self.running = False

        self.log_file = Path(log_file) if log_file else DEFAULT_LOG_FILE
        self.logger = setup_logger(self.log_file, debug=debug)
        self.logger.info("=== Puzzle Trainer Started ===")
        self.logger.info(f"Log file: {self.log_file}")

    @property
    def current(self) -> Optional[Puzzle]:
        if self.index < len(self.puzzles):
            return self.puzzles[self.index]
        return None

    def run(self):
        """
        Main command loop.

        Runs until 'quit', end of input, or the last puzzle is passed.
        """
        if not self.puzzles:
            print("No puzzles to solve.")
            return

        self.running = True
        self.start_puzzle()

        while self.running:
            try:
                command = input("> ").strip()

                if not command:
                    continue

                self.logger.debug(f">>> {command}")
                self.dispatch(command)

            except EOFError:
                self.logger.info("EOF received, shutting down")
                break
            except StudyError as e:
                print(f"Error: {e}")
            except Exception as e:
                self.logger.error(f"Command error: {e}", exc_info=True)
                print(f"Something went wrong ({e}); restarting the puzzle.")
                self.start_puzzle()

        self.print_summary()

    def dispatch(self, command: str):
        """Route one command line to its handler."""
        tokens = command.split()
        cmd = tokens[0].lower()

        if cmd == "undo":
            self.handle_undo()
        elif cmd == "redo":
            self.handle_redo(tokens)
        elif cmd == "hint":
            self.handle_hint()
        elif cmd == "retry":
            self.handle_retry()
        elif cmd == "solution":
            self.handle_solution()
        elif cmd == "next":
            self.handle_next()
        elif cmd == "board":
            self.handle_board()
        elif cmd == "moves":
            self.handle_moves()
        elif cmd == "pgn":
            self.handle_pgn()
        elif cmd in ("quit", "exit"):
            self.handle_quit()
        else:
            self.handle_move(tokens[0])

    # ------------------------------------------------------------------
    # Puzzle lifecycle
    # ------------------------------------------------------------------

    def start_puzzle(self):
        """(Re)load the current puzzle into the engine and show it."""
        puzzle = self.current
        self.engine.load_puzzle(puzzle)

        print()
        print(f"Puzzle {self.index + 1}/{len(self.puzzles)}: {puzzle.title}")
        if puzzle.description:
            print(puzzle.description)

        tree = self.engine.tree
        if tree.cursor is not tree.root:
            print(f"Opponent plays {self._describe(tree.cursor)}")

        side = "White" if puzzle.player_color == chess.WHITE else "Black"
        print(f"{side} to play.")
        self.handle_board()

    def _finish_current(self):
        session = self.engine.session
        if session is not None:
            self.finished[session.puzzle.id] = session.progress

    # ------------------------------------------------------------------
    # Command handlers
    # ------------------------------------------------------------------

    def handle_move(self, text: str):
        """Play a move and report how it fits the puzzle."""
        result = self.engine.submit_move(text)
        evaluation = result.puzzle

        if evaluation is None:
            print(f"Played {self._describe(result.node)}")
            return

        if evaluation.outcome is PuzzleOutcome.INCORRECT:
            self.logger.info(f"Incorrect move {evaluation.node.san} in {self.current.id}")
            print(f"{evaluation.node.san} is not the solution. Type 'retry' or 'hint'.")
            return

        message = "Correct!" if not evaluation.alternate else "Correct, but there is a stronger move."
        print(message)

        if evaluation.reply is not None:
            print(f"Opponent plays {self._describe(evaluation.reply)}")

        if evaluation.outcome is PuzzleOutcome.SOLVED:
            progress = self.engine.session.progress
            print(f"Puzzle solved! Score: {progress.score:.2f} ({progress.accuracy:.0%} accuracy)")
            print("Type 'next' for the next puzzle.")

    def handle_undo(self):
        node = self.engine.undo()
        print(f"Back to {self._describe(node)}")

    def handle_redo(self, tokens: List[str]):
        """Handle 'redo [n]', n counting continuations from 1."""
        child_index = 0
        if len(tokens) > 1:
            try:
                child_index = int(tokens[1]) - 1
            except ValueError:
                print(f"Not a number: {tokens[1]}")
                return

        node = self.engine.redo(child_index)
        print(f"Forward to {self._describe(node)}")

    def handle_hint(self):
        hint = self.engine.hint()
        if hint is None:
            print("No hint available.")
            return

        print(f"Try {hint.san}")
        if hint.comment:
            print(hint.comment)

    def handle_retry(self):
        node = self.engine.reset_to_last_correct()
        print(f"Back to {self._describe(node)}")

    def handle_solution(self):
        moves = self.engine.solution_moves()
        if not moves:
            print("Nothing left to play.")
            return
        print(f"Solution: {' '.join(moves)}")

    def handle_next(self):
        self._finish_current()
        self.index += 1

        if self.current is None:
            print("That was the last puzzle.")
            self.running = False
            return

        self.start_puzzle()

    def handle_board(self):
        board = chess.Board(self.engine.cursor.fen)
        print(board)

        status = self.engine.tree.game_status()
        if status.is_terminal:
            print(f"Game over: {status.value}")

    def handle_moves(self):
        print(format_move_list(self.engine.tree))
        print(f"Current: {self._describe(self.engine.cursor)}")

    def handle_pgn(self):
        print(self.engine.export_record())

    def handle_quit(self):
        self.logger.info("Quit requested")
        self.running = False

    # ------------------------------------------------------------------

    def print_summary(self):
        self._finish_current()

        solved = sum(1 for progress in self.finished.values() if progress.solved)
        score = sum(progress.score for progress in self.finished.values())
        hints = sum(progress.hints_used for progress in self.finished.values())

        print()
        print(f"Solved {solved}/{len(self.finished)} puzzles, score {score:.2f}, hints used {hints}")
        self.logger.info(f"Session finished: solved={solved}, attempted={len(self.finished)}, score={score:.2f}")

    @staticmethod
    def _describe(node: PositionNode) -> str:
        if node.is_root:
            return "the start position"
        return f"{VariationTree.move_label(node)} {node.san}"


def format_move_list(tree: VariationTree) -> str:
    """Render the tree as a move list with variations in parentheses."""
    game = tree_to_game(tree.root, result=tree.result)
    exporter = chess.pgn.StringExporter(headers=False, variations=True, comments=False)
    return game.accept(exporter)
