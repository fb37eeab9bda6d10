"""Progress tracking model."""
from typing import Callable, Optional


class Progress:
    """Integer percentage in [0, 100] that never decreases within a run."""

    def __init__(self, listener: Optional[Callable[[int], None]] = None):
        self.percent = 0
        self.listener = listener

    def reset(self) -> None:
        self.percent = 0
        self._notify()

    def update(self, done: int, total: int) -> int:
        """Record `done` of `total` units complete and return the percentage."""
        if total <= 0:
            return self.percent
        # half-up rounding, so 12.5 reports as 13
        percent = int(done * 100 / total + 0.5)
        percent = max(0, min(100, percent))
        if percent > self.percent:
            self.percent = percent
            self._notify()
        return self.percent

    def _notify(self) -> None:
        if self.listener:
            self.listener(self.percent)
