"""Runtime settings for the studio, read from the environment and ``.env``."""
from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_env_file(env_path: Path | None = None) -> None:
    """Populate os.environ from a .env file without overriding existing variables."""
    load_dotenv(env_path or PROJECT_ROOT / ".env", override=False)


load_env_file()


def get_env_str(key: str, default: str = "") -> str:
    value = os.environ.get(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def get_env_int(key: str, default: int, *, minimum: int = 1) -> int:
    """Fetch a positive integer, falling back to ``default`` when malformed."""
    raw = get_env_str(key)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logging.getLogger(__name__).warning(
            "Ignoring %s=%r: not an integer, using %d.", key, raw, default
        )
        return default
    return max(minimum, value)


def _default_workers() -> int:
    return max(1, min(4, os.cpu_count() or 1))


LOG_LEVEL = get_env_str("STUDIO_LOG_LEVEL", "INFO").upper()
WORKERS = get_env_int("STUDIO_WORKERS", _default_workers())
CHUNK_ROWS = get_env_int("STUDIO_CHUNK_ROWS", 256)
PARALLEL_MIN_ROWS = get_env_int("STUDIO_PARALLEL_MIN_ROWS", 512)
DOWNLOAD_NAME = get_env_str("STUDIO_DOWNLOAD_NAME", "ai-processed-image.png")
DEFAULT_PROMPT = get_env_str(
    "STUDIO_DEFAULT_PROMPT", "Elevate the image with AI-assisted enhancements."
)


def configure_logging(level: str | None = None) -> None:
    logging.basicConfig(
        level=getattr(logging, level or LOG_LEVEL, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


__all__ = [
    "CHUNK_ROWS",
    "DEFAULT_PROMPT",
    "DOWNLOAD_NAME",
    "LOG_LEVEL",
    "PARALLEL_MIN_ROWS",
    "WORKERS",
    "configure_logging",
    "get_env_int",
    "get_env_str",
    "load_env_file",
]
