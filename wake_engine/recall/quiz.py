"""Recall quiz: answer a stored question to prove memory is working."""

import random
import re

from wake_engine.alarms.types import RecallItem

_STRIP_RE = re.compile(r"[^a-z0-9\s]")


def normalize_answer(answer: str) -> str:
    return _STRIP_RE.sub("", answer.lower().strip())


class RecallQuiz:
    """Pick items at random without repeats until all have been shown.

    The quiz counts as correct only if the current item was answered right
    on the first attempt. A wrong answer lets the user move on to another
    item with next_item().
    """

    def __init__(self, items: list[RecallItem], rng: random.Random | None = None):
        if not items:
            raise ValueError("RecallQuiz needs at least one item")
        self.items = list(items)
        self._rng = rng or random.Random()
        self._used: set[str] = set()
        self.attempts = 0
        self.current = self._pick()

    def _pick(self) -> RecallItem:
        available = [i for i in self.items if i.id not in self._used]
        if not available:
            self._used.clear()
            available = self.items
        item = self._rng.choice(available)
        self._used.add(item.id)
        return item

    def answer(self, text: str) -> bool:
        """Check an answer for the current item. Blank answers are ignored."""
        if not text.strip():
            return False
        if normalize_answer(text) == normalize_answer(self.current.answer):
            return True
        self.attempts += 1
        return False

    @property
    def first_try(self) -> bool:
        return self.attempts == 0

    def next_item(self) -> RecallItem:
        self.current = self._pick()
        self.attempts = 0
        return self.current
