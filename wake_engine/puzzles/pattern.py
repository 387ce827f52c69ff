"""Pattern memory puzzle: repeat a sequence of highlighted grid cells."""

import random
from enum import Enum

# difficulty level -> pattern length
PATTERN_LENGTHS = {1: 3, 2: 4, 3: 5, 4: 6}


class TapResult(Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    COMPLETE = "complete"


class PatternPuzzle:
    """Pattern of cells on a square grid; a wrong tap restarts the input."""

    def __init__(self, level: int, grid_size: int = 3, rng: random.Random | None = None):
        self.level = level
        self.grid_size = grid_size
        self._rng = rng or random.Random()
        self.pattern = self._generate(PATTERN_LENGTHS.get(level, 4))
        self.errors = 0
        self._position = 0

    @property
    def cells(self) -> int:
        return self.grid_size * self.grid_size

    @property
    def solved(self) -> bool:
        return self._position == len(self.pattern)

    def _generate(self, length: int) -> list[int]:
        pattern: list[int] = []
        while len(pattern) < length:
            cell = self._rng.randrange(self.cells)
            # the same cell twice in a row is indistinguishable when shown
            if pattern and pattern[-1] == cell:
                continue
            pattern.append(cell)
        return pattern

    def miss(self) -> None:
        """Count a failed attempt and start input over."""
        self.errors += 1
        self._position = 0

    def tap(self, cell: int) -> TapResult:
        if self.solved:
            return TapResult.COMPLETE
        if cell != self.pattern[self._position]:
            self.miss()
            return TapResult.WRONG
        self._position += 1
        return TapResult.COMPLETE if self.solved else TapResult.CORRECT
