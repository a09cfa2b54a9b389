"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when a configuration value cannot be used."""


@dataclass(frozen=True)
class Settings:
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    directory_path: Optional[str] = None
    nearest_limit: int = 10
    price_unit: str = "per strip of 15"
    search_latency_seconds: float = 0.0
    server_port: int = 8080


def _get_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        value = cast(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be numeric, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    gemini_api_key = os.getenv("GEMINI_API_KEY", "")
    gemini_model = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    directory_path = os.getenv("PHARMACY_DIRECTORY_PATH") or None
    nearest_limit = _get_number("NEAREST_LIMIT", "10", int)
    price_unit = os.getenv("PRICE_UNIT", "per strip of 15").strip() or "per strip of 15"
    search_latency_seconds = _get_number("SEARCH_LATENCY_SECONDS", "0", float)
    server_port = _get_number("PORT", os.getenv("SERVER_PORT", "8080"), int)

    if not gemini_api_key:
        logger.warning("GEMINI_API_KEY is not configured; medicine name lookups use offline answers.")
    if not directory_path:
        logger.info("PHARMACY_DIRECTORY_PATH is not set; using the built-in pharmacy catalog.")

    return Settings(
        gemini_api_key=gemini_api_key,
        gemini_model=gemini_model,
        directory_path=directory_path,
        nearest_limit=nearest_limit,
        price_unit=price_unit,
        search_latency_seconds=search_latency_seconds,
        server_port=server_port,
    )
