"""Cumulative forecast accuracy."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .models import AccuracyCounters, Verdict


def accuracy_percent(win: int, total: int) -> int:
    """win/total as a whole percent, halves rounded up. 0 when total is 0."""
    if total <= 0:
        return 0
    pct = Decimal(win * 100) / Decimal(total)
    return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class AccuracyTracker:
    """Scores forecasts and keeps win/lose totals.

    No windowing and no reset: counters cover the whole process lifetime.
    """

    def __init__(self) -> None:
        self._win = 0
        self._lose = 0

    def score(self, actual: float, predicted: float) -> Verdict:
        """WIN when the round reached the predicted multiplier."""
        if actual >= predicted:
            self._win += 1
            return Verdict.WIN
        self._lose += 1
        return Verdict.LOSE

    @property
    def counters(self) -> AccuracyCounters:
        total = self._win + self._lose
        return AccuracyCounters(
            total=total,
            win=self._win,
            lose=self._lose,
            accuracy_pct=accuracy_percent(self._win, total),
        )
