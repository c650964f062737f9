"""
FastAPI query layer for the aviator feed service.

Endpoints:
- /api          Current round, next round, pending forecast
- /api/history  Recent results (newest first)
- /api/check    Win/lose statistics and recent resolved forecasts
- /health       Health check
- /stats        Feed, engine and coordinator statistics

Handlers only read the coordinator's published Snapshot.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fastapi import FastAPI

from .models import Forecast, PredictionRecord, Snapshot, format_multiplier

if TYPE_CHECKING:
    from .client import FeedConnection
    from .coordinator import SessionCoordinator


SERVICE_NAME = "aviator-feed"
VERSION = "1.0.0"

DEFAULT_HISTORY_LIMIT = 20
RECENT_RECORDS = 15
GOOD_ACCURACY_PCT = 50
ANALYZING = "Đang phân tích..."
STATUS_GOOD = "🔥 ĐANG ĂN NGON"
STATUS_CAREFUL = "💸 CẨN THẬN"


def current_view(snapshot: Snapshot) -> dict:
    forecast = snapshot.forecast
    return {
        "phien": snapshot.session_id,
        "ket_qua": snapshot.multiplier,
        "phien_hien_tai": snapshot.next_session_id,
        "du_doan": forecast.predicted_multiplier if forecast else None,
        "li_do": forecast.rationale if forecast else ANALYZING,
    }


def history_view(snapshot: Snapshot, limit: int = DEFAULT_HISTORY_LIMIT) -> list[dict]:
    if limit <= 0:
        limit = DEFAULT_HISTORY_LIMIT
    return [
        {"phien": outcome.session_id, "ket_qua": outcome.multiplier}
        for outcome in snapshot.history[:limit]
    ]


def _record_view(record: PredictionRecord) -> dict:
    return {
        "phien": record.session_id,
        "du_doan": record.predicted_multiplier,
        "ket_qua": record.actual_multiplier,
        "trang_thai": record.verdict.label,
        "thoi_gian": record.recorded_at.isoformat(),
    }


def _forecast_view(forecast: Forecast | None) -> dict | None:
    if forecast is None:
        return None
    return {
        "du_doan": f"{format_multiplier(forecast.predicted_multiplier)}x",
        "do_tin_cay": f"{forecast.confidence}%",
        "ly_do": forecast.rationale,
    }


def check_view(snapshot: Snapshot) -> dict:
    counters = snapshot.counters
    return {
        "thong_ke": {
            "tong_so_tay": counters.total,
            "an_duoc": counters.win,
            "bu_tay": counters.lose,
            "ti_le_an": f"{counters.accuracy_pct}%",
            "trang_thai": (
                STATUS_GOOD if counters.accuracy_pct >= GOOD_ACCURACY_PCT else STATUS_CAREFUL
            ),
        },
        "lich_su_gan_day": [_record_view(r) for r in snapshot.records[:RECENT_RECORDS]],
        "du_doan_hien_tai": _forecast_view(snapshot.forecast),
    }


def create_app(
    coordinator: SessionCoordinator,
    feed: FeedConnection | None = None,
) -> FastAPI:
    """Create FastAPI application.

    Components are passed in so tests can drive the coordinator directly.
    """
    start_time = datetime.now(UTC)

    app = FastAPI(
        title="Aviator Feed Service",
        description="Live aviator results, heuristic forecast and accuracy",
        version=VERSION,
    )

    @app.get("/api")
    async def current():
        """Current round and pending forecast."""
        return current_view(coordinator.snapshot)

    @app.get("/api/history")
    async def history(limit: int = DEFAULT_HISTORY_LIMIT):
        """Recent results, newest first."""
        return history_view(coordinator.snapshot, limit)

    @app.get("/api/check")
    async def check():
        """Forecast accuracy so far."""
        return check_view(coordinator.snapshot)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION,
            "uptime_seconds": (datetime.now(UTC) - start_time).total_seconds(),
            "feed": feed.get_stats() if feed else None,
        }

    @app.get("/stats")
    async def stats():
        """Detailed statistics."""
        return {
            "feed": feed.get_stats() if feed else {},
            "engine": coordinator.engine.get_stats(),
            "coordinator": coordinator.get_stats(),
        }

    return app
