"""Centralised settings for the Spidey crawler.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).

Only the outer layers (API lifespan, CLI) read :data:`settings`; the crawl
pipeline itself receives everything it needs at construction time.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("SPIDEY_WORKSPACE", Path.home() / ".spidey_data")
        )
    )
    database_path: str = field(
        default_factory=lambda: os.environ.get("DATABASE_PATH", "")
    )

    @property
    def db_path(self) -> Path:
        """Absolute path to the SQLite database file."""
        if self.database_path:
            return Path(self.database_path)
        return self.workspace_dir / "spidey.db"

    @property
    def schema_path(self) -> Path:
        """Absolute path to the schema SQL file bundled with the package."""
        return Path(__file__).resolve().parent / "db" / "schema.sql"

    # ------------------------------------------------------------------
    # Classification service
    # ------------------------------------------------------------------
    model_api_url: str = field(
        default_factory=lambda: os.environ.get("MODEL_API_URL", "http://localhost:8000")
    )
    target_label: str = field(
        default_factory=lambda: os.environ.get("TARGET_LABEL", "PERSONAL_BLOG").upper()
    )

    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    request_timeout: float = field(
        default_factory=lambda: float(os.environ.get("REQUEST_TIMEOUT", "30.0"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "USER_AGENT", "Spidey-Crawler/1.0 (+python-httpx)"
        )
    )

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO").upper()
    )
    log_format: str = field(
        default_factory=lambda: os.environ.get(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
    )

    # ------------------------------------------------------------------
    # API server
    # ------------------------------------------------------------------
    api_host: str = field(
        default_factory=lambda: os.environ.get("API_HOST", "127.0.0.1")
    )
    api_port: int = field(
        default_factory=lambda: int(os.environ.get("API_PORT", "8080"))
    )
    shutdown_grace: float = field(
        default_factory=lambda: float(os.environ.get("SHUTDOWN_GRACE", "10.0"))
    )


# Module-level singleton, imported by the outer layers:
#   from spidey.config import settings
settings = Settings()
