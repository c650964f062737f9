"""
Pydantic models for the aviator result feed.

Everything here is immutable once built. The coordinator creates new
instances on each result and the query layer only reads them.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


def format_multiplier(value: float) -> str:
    """Plain decimal text without exponent or trailing zeros (2.0 -> "2")."""
    return f"{value:f}".rstrip("0").rstrip(".")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ConnectionState(StrEnum):
    """Upstream feed connection state.

    DISCONNECTED -> CONNECTING -> AUTHENTICATING -> SUBSCRIBED
    Any state falls back to DISCONNECTED when the socket closes.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    SUBSCRIBED = "subscribed"


class Verdict(StrEnum):
    """Outcome of scoring a forecast against the actual multiplier."""

    WIN = "WIN"
    LOSE = "LOSE"

    @property
    def label(self) -> str:
        """Display label used by the query API."""
        return "ĂN" if self is Verdict.WIN else "BÚ"


# ---------------------------------------------------------------------------
# Domain records
# ---------------------------------------------------------------------------


class Outcome(BaseModel):
    """Result of one round."""

    model_config = ConfigDict(frozen=True)

    session_id: str = Field(description="Round identifier (sid on the wire)")
    multiplier: float = Field(
        gt=0,
        allow_inf_nan=False,
        description="Crash multiplier (odd on the wire)",
    )

    @property
    def next_session_id(self) -> str | None:
        """Display guess for the following round id (current + 1)."""
        try:
            return str(int(self.session_id) + 1)
        except ValueError:
            return None


class Forecast(BaseModel):
    """Predicted multiplier for the next round."""

    model_config = ConfigDict(frozen=True)

    predicted_multiplier: float = Field(description="Rounded to 2 decimals")
    confidence: int = Field(ge=0, le=100)
    rationale: str = Field(default="")


class PredictionRecord(BaseModel):
    """A resolved forecast: what was predicted vs. what happened."""

    model_config = ConfigDict(frozen=True)

    session_id: str
    predicted_multiplier: float
    actual_multiplier: float
    verdict: Verdict
    recorded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class AccuracyCounters(BaseModel):
    """Cumulative win/lose counters since process start."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    win: int = 0
    lose: int = 0
    accuracy_pct: int = 0


class Snapshot(BaseModel):
    """Read-only view published at the end of every coordinator transaction."""

    model_config = ConfigDict(frozen=True)

    current: Outcome | None = None
    forecast: Forecast | None = None
    counters: AccuracyCounters = Field(default_factory=AccuracyCounters)
    history: tuple[Outcome, ...] = ()
    records: tuple[PredictionRecord, ...] = ()

    @property
    def session_id(self) -> str | None:
        return self.current.session_id if self.current else None

    @property
    def multiplier(self) -> float | None:
        return self.current.multiplier if self.current else None

    @property
    def next_session_id(self) -> str | None:
        return self.current.next_session_id if self.current else None
