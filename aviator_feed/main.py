"""
Aviator Feed Service Main Entry Point

Starts:
- WebSocket connection to the MiniGame aviator feed
- Session coordinator (history, forecast, accuracy)
- FastAPI server for querying current state

Usage:
    python -m aviator_feed.main
"""

from __future__ import annotations

import asyncio
import logging
import signal

import uvicorn

from .api import create_app
from .client import FeedConnection
from .config import load_config
from .coordinator import SessionCoordinator

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler()],
)
logger = logging.getLogger(__name__)


def build_feed(config: dict, coordinator: SessionCoordinator) -> FeedConnection:
    """Wire a FeedConnection to the coordinator from config values."""
    return FeedConnection(
        url=config["feed_url"],
        on_outcome=coordinator.on_outcome,
        agent_id=config["agent_id"],
        access_token=config["access_token"],
        origin=config["origin"],
        reconnect_delay=config["reconnect_delay_seconds"],
        subscribe_delay=config["subscribe_delay_seconds"],
        state_request_delay=config["state_request_delay_seconds"],
        poll_interval=config["poll_interval_seconds"],
        poll_grace=config["poll_grace_seconds"],
    )


async def run_service():
    """Run the Aviator Feed Service."""
    config = load_config()
    logging.getLogger().setLevel(config["log_level"])

    logger.info("=" * 60)
    logger.info("Aviator Feed Service Starting")
    logger.info("=" * 60)
    logger.info(f"Feed URL: {config['feed_url']}")
    logger.info(f"API: http://{config['host']}:{config['port']}")
    logger.info("Endpoints: /api, /api/history, /api/check, /health, /stats")

    coordinator = SessionCoordinator()
    feed = build_feed(config, coordinator)
    app = create_app(coordinator=coordinator, feed=feed)

    shutdown_event = asyncio.Event()

    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}, shutting down...")
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    uvicorn_config = uvicorn.Config(
        app,
        host=config["host"],
        port=config["port"],
        log_level="info",
    )
    server = uvicorn.Server(uvicorn_config)

    async def run_api():
        await server.serve()

    async def periodic_stats():
        while not shutdown_event.is_set():
            try:
                await asyncio.wait_for(
                    shutdown_event.wait(), timeout=config["stats_interval_seconds"]
                )
            except TimeoutError:
                pass
            try:
                f_stats = feed.get_stats()
                c_stats = coordinator.get_stats()
                logger.info(
                    f"Stats: {c_stats['outcomes_processed']} results, "
                    f"{c_stats['win']}/{c_stats['lose']} win/lose "
                    f"({c_stats['accuracy_pct']}%), "
                    f"{f_stats['connections']} connections, "
                    f"feed={f_stats['state']}"
                )
            except Exception as e:
                logger.error(f"Stats error: {e}")

    async def watch_shutdown():
        await shutdown_event.wait()
        server.should_exit = True
        await feed.disconnect()

    try:
        await asyncio.gather(
            run_api(),
            feed.run(),
            periodic_stats(),
            watch_shutdown(),
        )
    except asyncio.CancelledError:
        logger.info("Service tasks cancelled")
    finally:
        logger.info("Cleaning up...")
        await feed.disconnect()
        logger.info("Aviator Feed Service stopped")


def main() -> None:
    asyncio.run(run_service())


if __name__ == "__main__":
    main()
