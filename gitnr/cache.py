from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable

from gitnr.errors import CacheError
from gitnr.storage import (
    RefreshTracker,
    age_seconds,
    decode_timestamp,
    encode_timestamp,
    now_utc,
    read_json_file,
    write_json_file,
)

logger = logging.getLogger(__name__)

CACHE_TTL_SECONDS = 60 * 60
CONTENT_CACHE_FILENAME = "template-content.json"


def is_expired(updated: datetime, now: datetime) -> bool:
    return age_seconds(updated, now) >= CACHE_TTL_SECONDS


@dataclass
class ContentCacheEntry:
    updated: datetime
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"updated": encode_timestamp(self.updated), "content": self.content}

    @classmethod
    def from_dict(cls, payload: Any) -> ContentCacheEntry:
        if not isinstance(payload, dict) or not isinstance(payload.get("content"), str):
            raise ValueError("cache entry must be an object with a string 'content'")
        return cls(updated=decode_timestamp(payload.get("updated")), content=payload["content"])


class ContentCache:
    def __init__(
        self,
        path: Path,
        refresh: RefreshTracker,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self.path = path
        self.refresh = refresh
        self.clock = clock
        self.entries: dict[str, ContentCacheEntry] = self._load()

    def _load(self) -> dict[str, ContentCacheEntry]:
        if not self.path.is_file():
            return {}
        payload = read_json_file(self.path)
        if not isinstance(payload, dict):
            raise CacheError(f"Template cache file is not a JSON object: {self.path}")
        entries: dict[str, ContentCacheEntry] = {}
        for key, raw_entry in payload.items():
            try:
                entries[key] = ContentCacheEntry.from_dict(raw_entry)
            except ValueError as exc:
                raise CacheError(
                    f"Invalid entry '{key}' in template cache file: {self.path}"
                ) from exc
        logger.debug("Loaded %d cached templates from %s", len(entries), self.path)
        return entries

    def get(self, key: str) -> str | None:
        forced = self.refresh.should_revalidate(key)
        entry = self.entries.get(key)
        if entry is None:
            logger.debug("Template cache miss: %s", key)
            return None
        if forced:
            logger.debug("Template cache revalidation forced by refresh: %s", key)
            return None
        if is_expired(entry.updated, self.clock()):
            logger.debug("Template cache entry expired: %s", key)
            return None
        logger.debug("Template cache hit: %s", key)
        return entry.content

    def set(self, key: str, content: str) -> None:
        self.entries[key] = ContentCacheEntry(updated=self.clock(), content=content)
        self.save()

    def save(self) -> None:
        payload = {key: entry.to_dict() for key, entry in self.entries.items()}
        write_json_file(self.path, payload)
