from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Generic, TypeVar

import pyperclip

from gitnr.cache import CONTENT_CACHE_FILENAME, ContentCache
from gitnr.catalog import CollectionKind, GitHubCatalog, TopTalCatalog
from gitnr.config import AppConfig
from gitnr.errors import ClipboardError
from gitnr.net import build_session
from gitnr.storage import RefreshTracker, cache_filepath, now_utc
from gitnr.templates import TemplateIdentifier

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LazyResult(Generic[T]):
    """Builds a value on first use and replays the same result, or the same
    exception, to every later caller."""

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._done = False
        self._value: T | None = None
        self._error: BaseException | None = None

    def get(self) -> T:
        if not self._done:
            try:
                self._value = self._factory()
            except Exception as exc:
                self._error = exc
            self._done = True
        if self._error is not None:
            raise self._error
        return self._value


def copy_to_clipboard(content: str) -> None:
    try:
        pyperclip.copy(content)
    except pyperclip.PyperclipException as exc:
        raise ClipboardError("Failed to set clipboard content") from exc


@dataclass
class AppContext:
    config: AppConfig
    session: Any
    refresh: RefreshTracker
    content_cache: ContentCache
    clock: Callable[[], datetime] = now_utc
    clipboard: Callable[[str], None] = copy_to_clipboard
    github: LazyResult[GitHubCatalog] = field(init=False)
    toptal: LazyResult[TopTalCatalog] = field(init=False)

    def __post_init__(self) -> None:
        self.github = LazyResult(lambda: GitHubCatalog.load(self))
        self.toptal = LazyResult(lambda: TopTalCatalog.load(self))

    def collection(self, kind: CollectionKind) -> list[TemplateIdentifier]:
        if kind is CollectionKind.TOPTAL:
            return list(self.toptal.get().templates)
        github = self.github.get()
        if kind is CollectionKind.GITHUB:
            return list(github.root)
        if kind is CollectionKind.GITHUB_GLOBAL:
            return list(github.global_)
        return list(github.community)


def build_context(
    config: AppConfig,
    session: Any = None,
    clock: Callable[[], datetime] = now_utc,
    clipboard: Callable[[str], None] = copy_to_clipboard,
) -> AppContext:
    refresh = RefreshTracker(config.refresh)
    content_cache = ContentCache(
        cache_filepath(config.cache_dir, CONTENT_CACHE_FILENAME),
        refresh,
        clock=clock,
    )
    logger.debug("Using cache directory %s", config.cache_dir)
    return AppContext(
        config=config,
        session=session if session is not None else build_session(),
        refresh=refresh,
        content_cache=content_cache,
        clock=clock,
        clipboard=clipboard,
    )
