"""
Service configuration.

Precedence: built-in defaults < config/config.yaml < environment variables.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import yaml

from .client import DEFAULT_FEED_URL, DEFAULT_ORIGIN

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "config.yaml"

DEFAULTS = {
    "feed_url": DEFAULT_FEED_URL,
    "origin": DEFAULT_ORIGIN,
    "agent_id": "1",
    "access_token": "",
    "host": "0.0.0.0",
    "port": 3000,
    "log_level": "INFO",
    "reconnect_delay_seconds": 5.0,
    "poll_interval_seconds": 3.0,
    "poll_grace_seconds": 5.0,
    "subscribe_delay_seconds": 1.0,
    "state_request_delay_seconds": 2.0,
    "stats_interval_seconds": 300.0,
}

ENV_MAPPINGS = {
    "FEED_URL": "feed_url",
    "FEED_ORIGIN": "origin",
    "AGENT_ID": "agent_id",
    "ACCESS_TOKEN": "access_token",
    "HOST": "host",
    "PORT": "port",
    "LOG_LEVEL": "log_level",
    "RECONNECT_DELAY_SECONDS": "reconnect_delay_seconds",
    "POLL_INTERVAL_SECONDS": "poll_interval_seconds",
    "POLL_GRACE_SECONDS": "poll_grace_seconds",
    "SUBSCRIBE_DELAY_SECONDS": "subscribe_delay_seconds",
    "STATE_REQUEST_DELAY_SECONDS": "state_request_delay_seconds",
    "STATS_INTERVAL_SECONDS": "stats_interval_seconds",
}

INT_KEYS = {"port"}
FLOAT_KEYS = {
    "reconnect_delay_seconds",
    "poll_interval_seconds",
    "poll_grace_seconds",
    "subscribe_delay_seconds",
    "state_request_delay_seconds",
    "stats_interval_seconds",
}


class ConfigError(Exception):
    """Configuration validation error"""

    pass


def _coerce(key: str, value):
    try:
        if key in INT_KEYS:
            return int(value)
        if key in FLOAT_KEYS:
            return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {key}: {value!r}") from e
    return str(value)


def load_config(config_path: Path | None = None, environ: dict | None = None) -> dict:
    """Load configuration from file and environment."""
    config_path = config_path or DEFAULT_CONFIG_PATH
    environ = os.environ if environ is None else environ

    config = dict(DEFAULTS)

    if config_path.exists():
        try:
            with open(config_path) as f:
                file_config = yaml.safe_load(f) or {}
            config.update({k: v for k, v in file_config.items() if k in DEFAULTS})
        except Exception as e:
            logger.warning(f"Failed to load config: {e}")

    for env_key, config_key in ENV_MAPPINGS.items():
        value = environ.get(env_key)
        if value:
            config[config_key] = value

    config = {key: _coerce(key, value) for key, value in config.items()}
    _validate(config)
    return config


def _validate(config: dict) -> None:
    if not 0 < config["port"] < 65536:
        raise ConfigError(f"port out of range: {config['port']}")

    for key in FLOAT_KEYS - {"poll_grace_seconds"}:
        if config[key] <= 0:
            raise ConfigError(f"{key} must be positive, got {config[key]}")
    if config["poll_grace_seconds"] < 0:
        raise ConfigError("poll_grace_seconds must not be negative")
    if config["state_request_delay_seconds"] < config["subscribe_delay_seconds"]:
        raise ConfigError("state_request_delay_seconds must not precede the subscribe delay")
