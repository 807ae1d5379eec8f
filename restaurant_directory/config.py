from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

logger = logging.getLogger(__name__)

DEFAULT_JWT_SECRET = "dev_secret_123"

_DURATION_RE = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {"": "seconds", "s": "seconds", "m": "minutes", "h": "hours", "d": "days"}


def parse_duration(text: str) -> timedelta:
    """Parse ``"24h"``, ``"30m"``, ``"7d"``, ``"90s"`` or a bare number of seconds."""
    match = _DURATION_RE.match(str(text))
    if not match:
        raise ValueError(f"Unrecognised duration: {text!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


@dataclass(frozen=True)
class Settings:
    mongodb_uri: str = os.getenv("MONGODB_URI", "mongodb://localhost:27017")
    mongodb_db: str = os.getenv("MONGODB_DB", "restaurant_directory")
    jwt_secret: str = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
    jwt_expires_in: str = os.getenv("JWT_EXPIRES_IN", "24h")
    port: int = int(os.getenv("PORT", "8000"))
    app_env: str = os.getenv("APP_ENV", "development")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def token_lifetime(self) -> timedelta:
        return parse_duration(self.jwt_expires_in)


DEFAULT_SETTINGS = Settings()


def setup_logging(settings: Settings = DEFAULT_SETTINGS) -> None:
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from the driver
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET not set - using the development secret")
