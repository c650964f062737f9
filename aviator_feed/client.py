"""
FeedConnection - WebSocket client for the MiniGame aviator feed.

Lifecycle per connection:
- open socket (CONNECTING)
- send auth immediately (AUTHENTICATING)
- subscribe after 1s (SUBSCRIBED)
- request game data + latest result after 2s
- dispatch inbound frames until the socket closes (DISCONNECTED)

A single run loop owns reconnection with a fixed delay and no attempt cap.
Every connection gets a new generation number; timers and frames belonging
to an older generation are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

import websockets
import websockets.exceptions

from . import protocol
from .models import ConnectionState, Outcome
from .protocol import Command, Envelope

logger = logging.getLogger(__name__)

DEFAULT_FEED_URL = "wss://minybordergs.weskb5gams.net/websocket"
DEFAULT_ORIGIN = "https://v.b52.club"
USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/142.0.0.0 Safari/537.36"
)
EXTRA_HEADERS = {
    "Accept-Language": "vi-VN,vi;q=0.9,en-US;q=0.6,en;q=0.5",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

OPEN_STATES = (ConnectionState.AUTHENTICATING, ConnectionState.SUBSCRIBED)

OutcomeCallback = Callable[[Outcome], object]


class FeedStats:
    """Counters for the feed connection."""

    def __init__(self) -> None:
        self.connections: int = 0
        self.disconnections: int = 0
        self.messages_received: int = 0
        self.parse_errors: int = 0
        self.ignored_messages: int = 0
        self.invalid_results: int = 0
        self.results_received: int = 0
        self.callback_errors: int = 0
        self.send_errors: int = 0
        self.polls_sent: int = 0


class FeedConnection:
    """Persistent connection to the aviator result feed.

    Accepted results are handed to ``on_outcome`` one at a time.
    """

    def __init__(
        self,
        url: str = DEFAULT_FEED_URL,
        on_outcome: OutcomeCallback | None = None,
        agent_id: str = "1",
        access_token: str = "",
        origin: str = DEFAULT_ORIGIN,
        reconnect_delay: float = 5.0,
        subscribe_delay: float = 1.0,
        state_request_delay: float = 2.0,
        poll_interval: float = 3.0,
        poll_grace: float = 5.0,
    ) -> None:
        self._url = url
        self._on_outcome = on_outcome
        self._agent_id = agent_id
        self._access_token = access_token
        self._origin = origin
        self._reconnect_delay = reconnect_delay
        self._subscribe_delay = subscribe_delay
        self._state_request_delay = state_request_delay
        self._poll_interval = poll_interval
        self._poll_grace = poll_grace

        self._state = ConnectionState.DISCONNECTED
        self._ws = None
        self._generation = 0
        self._running = False
        self._stats = FeedStats()
        self._handlers: dict[int, Callable[[Envelope], Awaitable[None]]] = {}
        self._register_handlers()

    @property
    def url(self) -> str:
        return self._url

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and self._state in OPEN_STATES

    def _register_handlers(self) -> None:
        """Command code -> handler for push frames."""
        self._handlers = {
            Command.RESULT: self._handle_result,
        }

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Connect and keep reconnecting until disconnect() is called.

        Also owns the polling task, which starts after the grace delay.
        """
        self._running = True
        poll_task = asyncio.create_task(self._poll_loop())
        try:
            while self._running:
                await self.connect()
                if not self._running:
                    break
                logger.info(f"Reconnecting in {self._reconnect_delay:.1f}s...")
                await asyncio.sleep(self._reconnect_delay)
        finally:
            poll_task.cancel()
            try:
                await poll_task
            except asyncio.CancelledError:
                pass

    async def connect(self) -> None:
        """Run one connection from open to close.

        Transport failures are logged and end the attempt; they never
        propagate to the caller.
        """
        self._generation += 1
        generation = self._generation
        self._state = ConnectionState.CONNECTING
        logger.info(f"Connecting to feed: {self._url}")

        handshake: asyncio.Task | None = None
        try:
            async with websockets.connect(
                self._url,
                origin=self._origin,
                additional_headers=EXTRA_HEADERS,
                user_agent_header=USER_AGENT,
                close_timeout=5,
            ) as ws:
                if generation != self._generation:
                    return
                self._ws = ws
                self._state = ConnectionState.AUTHENTICATING
                self._stats.connections += 1
                logger.info(f"Connected to feed: {self._url}")

                await self._send(
                    generation,
                    protocol.auth_message(self._agent_id, self._access_token),
                )
                handshake = asyncio.create_task(self._handshake(generation))

                await self._receive_loop(ws, generation)

        except websockets.exceptions.ConnectionClosed as e:
            logger.warning(f"Feed connection closed: {e}")
        except ConnectionRefusedError:
            logger.warning(f"Feed refused connection: {self._url}")
        except OSError as e:
            logger.warning(f"Feed connection error: {e}")
        except Exception as e:
            logger.error(f"Unexpected feed error: {e}")
        finally:
            if handshake is not None:
                handshake.cancel()
            if generation == self._generation:
                self._ws = None
                self._state = ConnectionState.DISCONNECTED
            self._stats.disconnections += 1
            logger.warning("Disconnected from feed")

    async def disconnect(self) -> None:
        """Stop reconnecting and close the current socket."""
        self._running = False
        self._generation += 1
        ws = self._ws
        self._ws = None
        self._state = ConnectionState.DISCONNECTED
        if ws is not None:
            await ws.close()

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def _handshake(self, generation: int) -> None:
        """Subscribe, then ask for the current game state.

        Both delays are measured from socket open.
        """
        await asyncio.sleep(self._subscribe_delay)
        if await self._send(generation, protocol.subscribe_message()):
            self._state = ConnectionState.SUBSCRIBED
            logger.info("Subscribed to aviatorPlugin")

        await asyncio.sleep(max(self._state_request_delay - self._subscribe_delay, 0))
        await self._send(generation, protocol.request_message(Command.GAME_DATA))
        await self._send(generation, protocol.request_message(Command.RESULT))

    async def _poll_loop(self) -> None:
        """Ask for the latest result on a fixed interval while connected."""
        await asyncio.sleep(self._poll_grace)
        while self._running:
            if self.is_connected:
                if await self._send(
                    self._generation, protocol.request_message(Command.RESULT)
                ):
                    self._stats.polls_sent += 1
            await asyncio.sleep(self._poll_interval)

    async def _send(self, generation: int, message: list) -> bool:
        """Send a frame on the connection of ``generation``.

        Returns False without sending if that connection is gone.
        """
        if generation != self._generation or self._ws is None:
            return False
        try:
            await self._ws.send(protocol.encode(message))
            return True
        except websockets.exceptions.ConnectionClosed:
            logger.debug("Send on closed connection dropped")
        except Exception as e:
            self._stats.send_errors += 1
            logger.error(f"Send failed: {e}")
        return False

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    async def _receive_loop(self, ws, generation: int) -> None:
        async for message in ws:
            await self.dispatch(message, generation)

    async def dispatch(self, raw: str | bytes, generation: int | None = None) -> None:
        """Decode one inbound frame and route it by command code."""
        if generation is not None and generation != self._generation:
            return
        self._stats.messages_received += 1

        envelope = protocol.decode_envelope(raw)
        if envelope is None:
            self._stats.parse_errors += 1
            logger.debug("Discarded unparseable frame")
            return

        handler = None
        if envelope.kind == protocol.PUSH_FRAME and envelope.command is not None:
            handler = self._handlers.get(envelope.command)
        if handler is None:
            self._stats.ignored_messages += 1
            return

        await handler(envelope)

    async def _handle_result(self, envelope: Envelope) -> None:
        outcome = protocol.parse_result(envelope)
        if outcome is None:
            self._stats.invalid_results += 1
            return

        self._stats.results_received += 1
        if self._on_outcome:
            try:
                self._on_outcome(outcome)
            except Exception as e:
                self._stats.callback_errors += 1
                logger.error(f"Outcome callback error: {e}")

    def get_stats(self) -> dict:
        return {
            "state": self._state.value,
            "url": self._url,
            "generation": self._generation,
            "connections": self._stats.connections,
            "disconnections": self._stats.disconnections,
            "messages_received": self._stats.messages_received,
            "parse_errors": self._stats.parse_errors,
            "ignored_messages": self._stats.ignored_messages,
            "invalid_results": self._stats.invalid_results,
            "results_received": self._stats.results_received,
            "callback_errors": self._stats.callback_errors,
            "send_errors": self._stats.send_errors,
            "polls_sent": self._stats.polls_sent,
        }
