"""
Engine configuration.
"""

from dataclasses import dataclass


@dataclass
class EngineConfig:
    """Configuration for the study engine and puzzle evaluation.

    All engine behaviour switches live here so a UI can build one config
    per session and hand it to `StudyEngine`.
    """

    # Puzzle mode
    auto_advance: bool = True
    """Play the opponent's solution reply automatically after a correct move"""

    alternate_credit: float = 0.5
    """Score earned by a correct move that is not the main solution move"""

    hint_penalty: float = 0.25
    """Score deducted for every hint requested"""

    # Records
    export_main_line_only: bool = False
    """Default for export_record(): drop side lines when True"""

    max_import_plies: int = 2000
    """Largest number of moves accepted in a single imported record"""

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not 0.0 <= self.alternate_credit <= 1.0:
            raise ValueError(
                f"alternate_credit must be between 0 and 1, got {self.alternate_credit}"
            )

        if self.hint_penalty < 0:
            raise ValueError(f"hint_penalty must be non-negative, got {self.hint_penalty}")

        if self.max_import_plies <= 0:
            raise ValueError(
                f"max_import_plies must be positive, got {self.max_import_plies}"
            )

    def __repr__(self) -> str:
        return (
            f"EngineConfig(auto_advance={self.auto_advance}, "
            f"alternate_credit={self.alternate_credit}, "
            f"hint_penalty={self.hint_penalty}, "
            f"export_main_line_only={self.export_main_line_only}, "
            f"max_import_plies={self.max_import_plies})"
        )
