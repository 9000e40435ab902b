# artifind/config.py
"""
Runtime settings.

Values come from the environment (optionally a ``.env`` file next to
the working directory). Nothing here is required for local
development; every setting has a sensible default.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "catalog" / "data"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class Settings:
    """Typed view over the environment."""

    log_level: str = field(
        default_factory=lambda: os.getenv("ARTIFIND_LOG_LEVEL", "INFO").upper()
    )
    # Origin allowed by CORS (the SPA dev server by default)
    frontend_url: str = field(
        default_factory=lambda: os.getenv("FRONTEND_URL", "http://localhost:5173")
    )
    data_dir: Path = field(
        default_factory=lambda: Path(os.getenv("ARTIFIND_DATA_DIR", str(DEFAULT_DATA_DIR)))
    )
    port: int = field(default_factory=lambda: _int_env("PORT", 3001))
    chat_history_limit: int = field(
        default_factory=lambda: _int_env("CHAT_HISTORY_LIMIT", 20)
    )
    chat_session_limit: int = field(
        default_factory=lambda: _int_env("CHAT_SESSION_LIMIT", 1000)
    )


settings = Settings()
