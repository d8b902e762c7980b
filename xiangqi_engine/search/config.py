"""
Search configuration and difficulty presets.
"""

from dataclasses import dataclass
from enum import Enum


class Difficulty(Enum):
    """Named strength presets."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @staticmethod
    def from_name(name: str) -> "Difficulty":
        """
        Parse a preset name, case-insensitively.

        Raises:
            ValueError: If the name is not a known preset
        """
        try:
            return Difficulty(name.strip().lower())
        except ValueError:
            valid = ", ".join(d.value for d in Difficulty)
            raise ValueError(f"Unknown difficulty {name!r} (expected one of: {valid})") from None


@dataclass
class SearchConfig:
    """Configuration for one search engine.

    Groups the depth limit, time budget and cache size a search runs under,
    plus the two tunable policy constants (quiescence depth cap and the
    random substitution probability).
    """

    difficulty: Difficulty = Difficulty.MEDIUM
    """Preset this configuration was derived from"""

    max_depth: int = 4
    """Deepest iterative-deepening pass, in plies"""

    time_limit_ms: int = 3000
    """Wall-clock budget per search call"""

    tt_size_mb: int = 32
    """Transposition table memory budget"""

    quiescence_depth: int = 4
    """Maximum capture-only plies searched beyond the horizon"""

    random_move_probability: float = 0.0
    """Chance of replacing the best move with a uniformly random legal move"""

    use_opening_book: bool = False
    """Carried for callers that consult a book; the search itself never does"""

    def __post_init__(self):
        """Validate configuration after initialization."""
        if not isinstance(self.difficulty, Difficulty):
            raise ValueError(f"difficulty must be a Difficulty, got {self.difficulty!r}")

        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")

        if self.max_depth > 64:
            raise ValueError(f"max_depth must be <= 64, got {self.max_depth}")

        if self.time_limit_ms <= 0:
            raise ValueError(f"time_limit_ms must be positive, got {self.time_limit_ms}")

        if self.tt_size_mb <= 0:
            raise ValueError(f"tt_size_mb must be positive, got {self.tt_size_mb}")

        if self.quiescence_depth < 0:
            raise ValueError(f"quiescence_depth must be >= 0, got {self.quiescence_depth}")

        if not 0.0 <= self.random_move_probability <= 1.0:
            raise ValueError(
                f"random_move_probability must be in [0, 1], got {self.random_move_probability}"
            )

    @classmethod
    def from_difficulty(cls, difficulty: Difficulty) -> "SearchConfig":
        """
        Build the preset configuration for a difficulty.

        Easy:   depth 3, 1000 ms, 16 MB, 30% random moves
        Medium: depth 4, 3000 ms, 32 MB
        Hard:   depth 6, 5000 ms, 64 MB, opening book flag set
        """
        if difficulty is Difficulty.EASY:
            return cls(
                difficulty=difficulty,
                max_depth=3,
                time_limit_ms=1000,
                tt_size_mb=16,
                random_move_probability=0.3,
            )
        if difficulty is Difficulty.MEDIUM:
            return cls(
                difficulty=difficulty,
                max_depth=4,
                time_limit_ms=3000,
                tt_size_mb=32,
            )
        return cls(
            difficulty=Difficulty.HARD,
            max_depth=6,
            time_limit_ms=5000,
            tt_size_mb=64,
            use_opening_book=True,
        )
