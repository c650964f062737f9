"""
Per-result transaction: score, record, forecast, publish.

Each call to ``on_outcome`` runs to completion without awaiting, so two
results never interleave on the event loop. The published Snapshot is
replaced in one assignment at the end, which means readers see either the
previous state or the new one and never a half-updated mix.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .engine import PredictionEngine
from .history import RECORD_CAPACITY, ResultHistory, RollingWindow
from .models import Forecast, Outcome, PredictionRecord, Snapshot
from .tracker import AccuracyTracker

logger = logging.getLogger(__name__)


@dataclass
class SessionState:
    """Mutable state owned by one coordinator."""

    history: ResultHistory = field(default_factory=ResultHistory)
    records: RollingWindow[PredictionRecord] = field(
        default_factory=lambda: RollingWindow(RECORD_CAPACITY)
    )
    current: Outcome | None = None
    pending: Forecast | None = None
    outcomes_processed: int = 0


class SessionCoordinator:
    """Glues history, engine and tracker together for each inbound result."""

    def __init__(
        self,
        engine: PredictionEngine | None = None,
        tracker: AccuracyTracker | None = None,
        state: SessionState | None = None,
    ) -> None:
        self._engine = engine or PredictionEngine()
        self._tracker = tracker or AccuracyTracker()
        self._state = state or SessionState()
        self._snapshot = Snapshot()

    @property
    def engine(self) -> PredictionEngine:
        return self._engine

    @property
    def tracker(self) -> AccuracyTracker:
        return self._tracker

    @property
    def snapshot(self) -> Snapshot:
        """Latest published state. Safe to hold on to; never mutated."""
        return self._snapshot

    def on_outcome(self, outcome: Outcome) -> Snapshot:
        """Process one round result and publish the new snapshot."""
        state = self._state
        logger.info(f"Session {outcome.session_id}: {outcome.multiplier}x")

        # Records are keyed by the round the forecast was issued after.
        if state.pending is not None and state.current is not None:
            predicted = state.pending.predicted_multiplier
            verdict = self._tracker.score(outcome.multiplier, predicted)
            state.records.append(
                PredictionRecord(
                    session_id=state.current.session_id,
                    predicted_multiplier=predicted,
                    actual_multiplier=outcome.multiplier,
                    verdict=verdict,
                )
            )
            logger.info(
                f"Forecast {predicted}x vs actual {outcome.multiplier}x: {verdict.value}"
            )

        state.current = outcome
        state.history.append(outcome)
        state.pending = self._engine.forecast(state.history)
        state.outcomes_processed += 1

        counters = self._tracker.counters
        logger.info(
            f"Next forecast: {state.pending.predicted_multiplier}x "
            f"(confidence {state.pending.confidence}%) - {state.pending.rationale}"
        )
        logger.info(
            f"Win/lose: {counters.win}/{counters.lose} ({counters.accuracy_pct}%)"
        )

        self._snapshot = Snapshot(
            current=state.current,
            forecast=state.pending,
            counters=counters,
            history=state.history.snapshot(),
            records=state.records.snapshot(),
        )
        return self._snapshot

    def get_stats(self) -> dict:
        counters = self._snapshot.counters
        return {
            "outcomes_processed": self._state.outcomes_processed,
            "history_size": len(self._state.history),
            "records_size": len(self._state.records),
            "current_session": self._snapshot.session_id,
            "total": counters.total,
            "win": counters.win,
            "lose": counters.lose,
            "accuracy_pct": counters.accuracy_pct,
        }
