"""Aviator result feed: ingestion, heuristic forecast and accuracy tracking."""

from .client import FeedConnection
from .coordinator import SessionCoordinator, SessionState
from .engine import PredictionEngine
from .history import ResultHistory, RollingWindow
from .models import (
    AccuracyCounters,
    ConnectionState,
    Forecast,
    Outcome,
    PredictionRecord,
    Snapshot,
    Verdict,
)
from .tracker import AccuracyTracker

__all__ = [
    "AccuracyCounters",
    "AccuracyTracker",
    "ConnectionState",
    "FeedConnection",
    "Forecast",
    "Outcome",
    "PredictionEngine",
    "PredictionRecord",
    "ResultHistory",
    "RollingWindow",
    "SessionCoordinator",
    "SessionState",
    "Snapshot",
    "Verdict",
]
