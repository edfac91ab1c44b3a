from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from platformdirs import user_cache_dir
from rich.console import Console
from rich.logging import RichHandler

from gitnr.errors import ConfigError

APP_NAME = "gitnr"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class AppConfig:
    refresh: bool
    cache_dir: Path
    http_timeout: float | None
    github_token: str
    log_level: str


def default_cache_dir() -> Path:
    return Path(user_cache_dir(APP_NAME))


def parse_timeout(raw: str) -> float | None:
    if not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"GITNR_HTTP_TIMEOUT must be a number of seconds, got '{raw}'") from exc
    if value <= 0:
        raise ConfigError("GITNR_HTTP_TIMEOUT must be > 0")
    return value


def parse_log_level(raw: str, verbose: bool) -> str:
    if verbose:
        return "DEBUG"
    level = (raw or "WARNING").strip().upper()
    if level not in LOG_LEVELS:
        valid = ", ".join(LOG_LEVELS)
        raise ConfigError(f"Unknown log level '{raw}'. Valid levels: {valid}")
    return level


def load_config(refresh: bool = False, verbose: bool = False) -> AppConfig:
    load_dotenv()
    raw_cache_dir = os.getenv("GITNR_CACHE_DIR", "").strip()
    cache_dir = Path(raw_cache_dir).expanduser() if raw_cache_dir else default_cache_dir()
    return AppConfig(
        refresh=refresh,
        cache_dir=cache_dir,
        http_timeout=parse_timeout(os.getenv("GITNR_HTTP_TIMEOUT", "")),
        github_token=os.getenv("GITHUB_TOKEN", "").strip(),
        log_level=parse_log_level(os.getenv("GITNR_LOG_LEVEL", ""), verbose),
    )


def configure_logging(level: str) -> None:
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
