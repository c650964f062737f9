"""
Heuristic next-round forecaster.

This is a small rule table, not a statistical model. Rules are checked in
order against the newest result:

1. fewer than 2 results      -> 1.8x @ 20
2. newest multiplier > 5.0   -> 1.3x @ 65
3. low streak >= 2           -> 2.0x @ 55 (streak reset)
4. mean of last 5 < 2.0      -> 1.6x @ 45, otherwise 1.4x @ 45

The engine carries one piece of memory between calls: the number of
consecutive results below CRASH_THRESHOLD. It is updated after every
forecast from the newest result, so forecast() is not pure across calls.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from itertools import islice

from .models import Forecast, Outcome, format_multiplier

logger = logging.getLogger(__name__)

CRASH_THRESHOLD = 1.5
HIGH_MULTIPLIER = 5.0
STREAK_TRIGGER = 2
MEAN_WINDOW = 5
LOW_MEAN = 2.0
MIN_HISTORY = 2


@dataclass(frozen=True)
class Rule:
    prediction: float
    confidence: int


INSUFFICIENT_DATA = Rule(1.8, 20)
AFTER_HIGH = Rule(1.3, 65)
AFTER_STREAK = Rule(2.0, 55)
LOW_AVERAGE = Rule(1.6, 45)
HIGH_AVERAGE = Rule(1.4, 45)


class PredictionEngine:
    """Rule-based forecaster with a carried low-streak counter."""

    def __init__(self) -> None:
        self._streak = 0
        self._forecasts_issued = 0
        self._last_multiplier: float | None = None

    @property
    def streak(self) -> int:
        """Consecutive results below CRASH_THRESHOLD seen so far."""
        return self._streak

    def forecast(self, history: Sequence[Outcome]) -> Forecast:
        """Forecast the next round from newest-first ``history``."""
        latest = history[0].multiplier if len(history) else None

        if len(history) < MIN_HISTORY:
            rule = INSUFFICIENT_DATA
            rationale = "Cần thêm dữ liệu để phân tích"
        elif latest > HIGH_MULTIPLIER:
            rule = AFTER_HIGH
            rationale = (
                f"Sau multiplier cao {format_multiplier(latest)}x, "
                f"an toàn với {format_multiplier(rule.prediction)}x"
            )
        elif self._streak >= STREAK_TRIGGER:
            rule = AFTER_STREAK
            rationale = f"Sau {self._streak} crash, dự đoán {rule.prediction:.1f}x"
            self._streak = 0
        else:
            recent = [outcome.multiplier for outcome in islice(history, MEAN_WINDOW)]
            mean = sum(recent) / len(recent)
            if mean < LOW_MEAN:
                rule = LOW_AVERAGE
                rationale = (
                    f"Trung bình thấp ({mean:.1f}x), "
                    f"dự đoán {format_multiplier(rule.prediction)}x"
                )
            else:
                rule = HIGH_AVERAGE
                rationale = (
                    "Trung bình cao, dự đoán thận trọng "
                    f"{format_multiplier(rule.prediction)}x"
                )

        if latest is not None:
            self._update_streak(latest)

        self._forecasts_issued += 1
        return Forecast(
            predicted_multiplier=round(rule.prediction, 2),
            confidence=rule.confidence,
            rationale=rationale,
        )

    def _update_streak(self, multiplier: float) -> None:
        if multiplier < CRASH_THRESHOLD:
            self._streak += 1
        else:
            self._streak = 0
        self._last_multiplier = multiplier

    def get_stats(self) -> dict:
        return {
            "forecasts_issued": self._forecasts_issued,
            "streak": self._streak,
            "last_multiplier": self._last_multiplier,
        }
