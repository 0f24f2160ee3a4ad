"""Progress reporting for conversions.

A conversion reports once per output sample with the completion percentage
``round(100 * produced / total)``. The reporter guarantees the sequence is
non-decreasing and that a successful run ends at 100.
"""

from __future__ import annotations

from typing import Callable

from loguru import logger

ProgressSink = Callable[[int], None]


def percent_complete(produced: int, total: int) -> int:
    """Completion percentage rounded half up (100 when there is nothing to do)."""
    if total <= 0:
        return 100
    return (200 * produced + total) // (2 * total)


class ProgressReporter:
    """Feeds completion percentages to an optional sink.

    Args:
        total: Number of output samples the conversion will produce.
        sink: Callable receiving an int in [0, 100]; None disables reporting.
    """

    def __init__(self, total: int, sink: ProgressSink | None = None) -> None:
        self.total = total
        self._sink = sink
        self._last = 0
        self._calls = 0
        self._closed = False

    def advance(self, produced: int) -> int:
        """Report that ``produced`` output samples are done; returns the percent."""
        if self._closed:
            raise RuntimeError("Progress reporter already closed")
        percent = max(self._last, min(100, percent_complete(produced, self.total)))
        self._last = percent
        self._calls += 1
        if self._sink is not None:
            self._sink(percent)
        return percent

    def complete(self) -> None:
        """Close the reporter after a successful run.

        A run with no output samples never called :meth:`advance`, so it gets a
        single 100 here.
        """
        if self._calls == 0:
            self.advance(0)
        self._closed = True

    def abort(self) -> None:
        """Close the reporter after a failure; no further values are emitted."""
        if not self._closed:
            logger.debug(f"Progress aborted at {self._last}%")
        self._closed = True

    @property
    def last(self) -> int:
        return self._last

    @property
    def closed(self) -> bool:
        return self._closed
