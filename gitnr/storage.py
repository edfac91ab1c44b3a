from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from dateutil import parser as date_parser

from gitnr.errors import CacheError

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def encode_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def decode_timestamp(raw: Any) -> datetime:
    # Unreadable timestamps count as infinitely old so the entry gets refreshed.
    if not raw:
        return EPOCH
    try:
        parsed = date_parser.parse(str(raw))
    except (TypeError, ValueError, OverflowError):
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def age_seconds(updated: datetime, now: datetime) -> float:
    return (now - updated).total_seconds()


def cache_filepath(cache_dir: Path, name: str) -> Path:
    return cache_dir.joinpath(*name.split("/"))


def read_json_file(path: Path) -> Any:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CacheError(f"Failed to read JSON file: {path}") from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CacheError(f"Failed to parse JSON from file: {path}") from exc


def write_json_file(path: Path, data: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise CacheError(f"Failed to write JSON data to file: {path}") from exc
    logger.debug("Wrote cache file %s", path)


class RefreshTracker:
    def __init__(self, enabled: bool) -> None:
        self.enabled = enabled
        self._rechecked: set[str] = set()

    def should_revalidate(self, key: str) -> bool:
        if not self.enabled or key in self._rechecked:
            return False
        self._rechecked.add(key)
        return True
