"""Centralised settings for epublifier.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/115.0.0.0 Safari/537.36"
)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("EPUBLIFIER_REQUEST_TIMEOUT", "30.0"))
    )
    render_timeout: float = field(
        default_factory=lambda: float(os.environ.get("EPUBLIFIER_RENDER_TIMEOUT", "60.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get("EPUBLIFIER_USER_AGENT", _DESKTOP_USER_AGENT)
    )

    # ------------------------------------------------------------------
    # Book metadata
    # ------------------------------------------------------------------
    language: str = field(
        default_factory=lambda: os.environ.get("EPUBLIFIER_LANGUAGE", "en")
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("EPUBLIFIER_LOG_LEVEL", "WARNING")
    )


# Module-level singleton — import this everywhere:
#   from epublifier.config import settings
settings = Settings()
