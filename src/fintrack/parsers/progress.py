"""Progress reporting shared by the format parsers."""

import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class ProgressReporter:
    """Calls ``callback(processed, total)`` at each 10% of ``total``.

    With fewer rows than steps the stride is one row, so every row is reported.

    Failures inside the callback are logged and never reach the parse loop.
    """

    def __init__(self, total: int, callback: Optional[ProgressCallback] = None, steps: int = 10):
        self.total = total
        self.callback = callback
        self.stride = max(1, total // steps) if total else 1
        self.last_reported: Optional[int] = None

    def update(self, processed: int) -> None:
        if self.callback is None or processed % self.stride != 0:
            return
        self._emit(processed)

    def finish(self) -> None:
        if self.callback is not None and self.last_reported != self.total:
            self._emit(self.total)

    def _emit(self, processed: int) -> None:
        self.last_reported = processed
        try:
            self.callback(processed, self.total)
        except Exception:
            logger.warning("Progress callback failed at %d/%d", processed, self.total, exc_info=True)
