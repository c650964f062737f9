"""Tests for forecast accuracy tracking."""

from aviator_feed.models import Verdict
from aviator_feed.tracker import AccuracyTracker, accuracy_percent


class TestScore:
    """WIN/LOSE scoring."""

    def test_win_when_reaching_prediction(self):
        """Reaching or beating the prediction is a win."""
        tracker = AccuracyTracker()
        assert tracker.score(1.6, 1.6) == Verdict.WIN
        assert tracker.score(3.0, 1.6) == Verdict.WIN

    def test_lose_below_prediction(self):
        """Crashing below the prediction is a loss."""
        tracker = AccuracyTracker()
        assert tracker.score(1.59, 1.6) == Verdict.LOSE

    def test_counters(self):
        """Counters accumulate and accuracy is recomputed."""
        tracker = AccuracyTracker()
        tracker.score(2.0, 1.5)
        tracker.score(1.0, 1.5)
        tracker.score(1.5, 1.5)

        counters = tracker.counters
        assert counters.total == 3
        assert counters.win == 2
        assert counters.lose == 1
        assert counters.accuracy_pct == 67


class TestAccuracyPercent:
    """Whole-percent accuracy."""

    def test_zero_total(self):
        """No scored forecasts means 0%."""
        assert AccuracyTracker().counters.accuracy_pct == 0
        assert accuracy_percent(0, 0) == 0

    def test_half_rounds_up(self):
        """Exact halves round up (12.5 -> 13, 62.5 -> 63)."""
        assert accuracy_percent(1, 8) == 13
        assert accuracy_percent(5, 8) == 63

    def test_exact(self):
        """Exact ratios need no rounding."""
        assert accuracy_percent(1, 2) == 50
        assert accuracy_percent(3, 3) == 100
