"""Runtime configuration for taskcadence.

Values come from the environment (optionally a local `.env` file).
The engine itself is pure; configuration only covers logging and the API server.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_API_PORT = 8000

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


@dataclass(frozen=True)
class EngineSettings:
    """Resolved settings snapshot."""

    log_level: str
    api_host: str
    api_port: int


def _int_from_env(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def get_settings() -> EngineSettings:
    """Read settings from the environment.

    Evaluated on every call so tests can monkeypatch the environment.
    """
    level = (os.getenv("LOG_LEVEL") or DEFAULT_LOG_LEVEL).strip().upper()
    if level not in _LOG_LEVELS:
        level = DEFAULT_LOG_LEVEL
    return EngineSettings(
        log_level=level,
        api_host=os.getenv("API_HOST", DEFAULT_API_HOST),
        api_port=_int_from_env("API_PORT", DEFAULT_API_PORT),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts and the API server."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
