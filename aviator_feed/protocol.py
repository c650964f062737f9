"""
Wire protocol for the MiniGame aviator plugin.

Every frame is a JSON array. Outbound frames:

    [1, "MiniGame", "", "", {agentId, accessToken, reconnect}]   auth
    ["6", "MiniGame", "aviatorPlugin", {"cmd": 100000, "f": true}]  subscribe
    ["6", "MiniGame", "aviatorPlugin", {"cmd": 100016}]            game data
    ["6", "MiniGame", "aviatorPlugin", {"cmd": 100007}]            latest result

Inbound push frames look like ``[5, {"cmd": <code>, ...}]``. Only the
result event (cmd 100007 with truthy ``sid`` and ``odd``) carries data
the service acts on.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from pydantic import ValidationError

from .models import Outcome

logger = logging.getLogger(__name__)

ZONE = "MiniGame"
PLUGIN = "aviatorPlugin"

AUTH_FRAME = 1
PLUGIN_FRAME = "6"
PUSH_FRAME = 5


class Command(IntEnum):
    """aviatorPlugin command codes."""

    SUBSCRIBE = 100000
    RESULT = 100007
    GAME_DATA = 100016


@dataclass(frozen=True)
class Envelope:
    """A decoded push frame: frame kind, command code and its payload."""

    kind: int
    command: int | None
    payload: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Outbound
# ---------------------------------------------------------------------------


def auth_message(agent_id: str, access_token: str) -> list:
    return [
        AUTH_FRAME,
        ZONE,
        "",
        "",
        {"agentId": agent_id, "accessToken": access_token, "reconnect": False},
    ]


def subscribe_message() -> list:
    return [PLUGIN_FRAME, ZONE, PLUGIN, {"cmd": int(Command.SUBSCRIBE), "f": True}]


def request_message(command: Command) -> list:
    """Plain plugin request carrying only a command code."""
    return [PLUGIN_FRAME, ZONE, PLUGIN, {"cmd": int(command)}]


def encode(message: list) -> str:
    return json.dumps(message, ensure_ascii=False, separators=(",", ":"))


# ---------------------------------------------------------------------------
# Inbound
# ---------------------------------------------------------------------------


def decode_envelope(raw: str | bytes) -> Envelope | None:
    """Parse a raw frame into an Envelope.

    Returns None for anything that is not valid JSON or not shaped like
    ``[<int kind>, {<payload>}, ...]``.
    """
    try:
        message = json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError, TypeError):
        return None

    if not isinstance(message, list) or len(message) < 2:
        return None

    kind, payload = message[0], message[1]
    if isinstance(kind, bool) or not isinstance(kind, int):
        return None
    if not isinstance(payload, dict):
        return None

    command = payload.get("cmd")
    if isinstance(command, bool) or not isinstance(command, int):
        command = None

    return Envelope(kind=kind, command=command, payload=payload)


def parse_result(envelope: Envelope) -> Outcome | None:
    """Extract an Outcome from a result event, or None if sid/odd are unusable."""
    if envelope.kind != PUSH_FRAME or envelope.command != Command.RESULT:
        return None

    sid = envelope.payload.get("sid")
    odd = envelope.payload.get("odd")
    if not sid or not odd or isinstance(odd, bool):
        return None

    try:
        return Outcome(session_id=str(sid), multiplier=float(odd))
    except (TypeError, ValueError, ValidationError):
        logger.debug(f"Rejected result event sid={sid!r} odd={odd!r}")
        return None
