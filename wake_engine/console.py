"""Terminal adapters for the puzzle, recall and camera-sample collaborators."""

import asyncio
import time
from collections.abc import AsyncIterator

import numpy as np

from wake_engine.alarms.base import PuzzleResult, PuzzleSubsystem, RecallResult, RecallSubsystem
from wake_engine.alarms.types import RecallItem
from wake_engine.puzzles.pattern import PatternPuzzle, TapResult
from wake_engine.recall.quiz import RecallQuiz


async def _ask(prompt: str) -> str:
    return await asyncio.to_thread(input, prompt)


class ConsolePuzzle(PuzzleSubsystem):
    """Pattern puzzle over stdin: memorize the cells, then type them back."""

    def __init__(self, grid_size: int = 3, show_seconds: float = 3.0):
        self.grid_size = grid_size
        self.show_seconds = show_seconds

    async def present(self, level: int) -> PuzzleResult:
        puzzle = PatternPuzzle(level, grid_size=self.grid_size)
        started = time.monotonic()

        while not puzzle.solved:
            print(f"Memorize ({'*' * level}{'.' * (4 - level)}): "
                  + " ".join(str(c) for c in puzzle.pattern))
            await asyncio.sleep(self.show_seconds)
            print("\n" * 40)

            reply = await _ask(f"Repeat the {len(puzzle.pattern)} cells (0-{puzzle.cells - 1}): ")
            cells = [int(t) for t in reply.split() if t.isdigit()]
            for cell in cells:
                if puzzle.tap(cell) != TapResult.CORRECT:
                    break
            else:
                # ran out of input before finishing
                puzzle.miss()
            if not puzzle.solved:
                print("Wrong, watch again.")

        elapsed_ms = int((time.monotonic() - started) * 1000)
        return PuzzleResult(errors=puzzle.errors, time_ms=elapsed_ms)


class ConsoleRecall(RecallSubsystem):
    async def present(self, items: list[RecallItem]) -> RecallResult:
        quiz = RecallQuiz(items)
        while True:
            reply = await _ask(f"{quiz.current.question}\n> ")
            if quiz.answer(reply):
                return RecallResult(correct=quiz.first_try)
            if not reply.strip():
                continue
            print(f"Correct answer: {quiz.current.answer}")
            again = await _ask("Try another question? [y/N] ")
            if again.strip().lower().startswith("y"):
                quiz.next_item()


async def replay_samples(path: str, sample_rate: float = 30.0) -> AsyncIterator[tuple[float, float]]:
    """Yield (intensity, timestamp_ms) rows of a CSV file at capture cadence."""
    rows = np.loadtxt(path, delimiter=",", ndmin=2)
    for intensity, timestamp_ms in rows[:, :2]:
        yield float(intensity), float(timestamp_ms)
        await asyncio.sleep(1.0 / sample_rate)
