"""Per-provider catalogs of available templates, cached on disk for an hour."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

from gitnr.cache import is_expired
from gitnr.errors import CacheError, CatalogError
from gitnr.net import http_get
from gitnr.storage import (
    EPOCH,
    cache_filepath,
    decode_timestamp,
    encode_timestamp,
    read_json_file,
    write_json_file,
)
from gitnr.templates import TOPTAL_API, TemplateIdentifier

if TYPE_CHECKING:
    from gitnr.context import AppContext

logger = logging.getLogger(__name__)

GITHUB_API_ENDPOINT = "https://api.github.com"
GITHUB_API_ACCEPT = "application/vnd.github+json"
GITHUB_CACHE_PATH = "collections/github.json"
TOPTAL_CACHE_PATH = "collections/toptal.json"


class CollectionKind(Enum):
    TOPTAL = "TopTal"
    GITHUB = "GitHub"
    GITHUB_GLOBAL = "GitHub Global"
    GITHUB_COMMUNITY = "GitHub Community"

    @property
    def display_name(self) -> str:
        return self.value


TAB_ORDER = (
    CollectionKind.TOPTAL,
    CollectionKind.GITHUB,
    CollectionKind.GITHUB_GLOBAL,
    CollectionKind.GITHUB_COMMUNITY,
)


def _decode_identifiers(payload: Any, field_name: str, path: Path) -> list[TemplateIdentifier]:
    raw_items = payload.get(field_name)
    if not isinstance(raw_items, list):
        raise CacheError(f"Catalog cache file is missing '{field_name}': {path}")
    try:
        return [TemplateIdentifier.from_dict(item) for item in raw_items]
    except (KeyError, TypeError, ValueError) as exc:
        raise CacheError(f"Invalid '{field_name}' entries in catalog cache file: {path}") from exc


def _encode_identifiers(items: list[TemplateIdentifier]) -> list[dict[str, str]]:
    return [item.to_dict() for item in items]


def _read_catalog_file(context: AppContext, path: Path) -> dict[str, Any] | None:
    if context.refresh.should_revalidate(str(path)):
        logger.debug("Catalog revalidation forced by refresh: %s", path)
        return None
    if not path.is_file():
        return None
    payload = read_json_file(path)
    if not isinstance(payload, dict):
        raise CacheError(f"Catalog cache file is not a JSON object: {path}")
    return payload


def fetch_github_tree(context: AppContext, owner: str, repo: str, branch: str) -> list[dict[str, Any]]:
    url = f"{GITHUB_API_ENDPOINT}/repos/{owner}/{repo}/git/trees/{branch}?recursive=true"
    headers = {"Accept": GITHUB_API_ACCEPT}
    if context.config.github_token:
        headers["Authorization"] = f"Bearer {context.config.github_token}"
    response = http_get(
        context.session,
        url,
        timeout=context.config.http_timeout,
        headers=headers,
        failure_message="GitHub API error when fetching repo tree",
    )
    try:
        payload = response.json()
    except ValueError as exc:
        raise CatalogError(f"Failed to parse GitHub API response to JSON\n{url}") from exc
    tree = payload.get("tree") if isinstance(payload, dict) else None
    if not isinstance(tree, list):
        raise CatalogError(f"GitHub API response has no 'tree' listing\n{url}")
    if payload.get("truncated"):
        logger.warning("GitHub tree listing was truncated; some templates may be missing")
    return tree


@dataclass
class GitHubCatalog:
    updated: datetime = EPOCH
    root: list[TemplateIdentifier] = field(default_factory=list)
    global_: list[TemplateIdentifier] = field(default_factory=list)
    community: list[TemplateIdentifier] = field(default_factory=list)

    @classmethod
    def load(cls, context: AppContext) -> GitHubCatalog:
        path = cache_filepath(context.config.cache_dir, GITHUB_CACHE_PATH)
        payload = _read_catalog_file(context, path)
        if payload is not None:
            catalog = cls(
                updated=decode_timestamp(payload.get("updated")),
                root=_decode_identifiers(payload, "root", path),
                global_=_decode_identifiers(payload, "global", path),
                community=_decode_identifiers(payload, "community", path),
            )
            if not is_expired(catalog.updated, context.clock()):
                logger.debug("Loaded GitHub catalog from %s", path)
                return catalog

        catalog = cls.fetch(context)
        write_json_file(path, catalog.to_dict())
        return catalog

    @classmethod
    def fetch(cls, context: AppContext) -> GitHubCatalog:
        logger.debug("Refreshing GitHub catalog")
        catalog = cls(updated=context.clock())
        for item in fetch_github_tree(context, "github", "gitignore", "main"):
            if item.get("type") == "tree":
                continue
            path = str(item.get("path", ""))
            if not path.endswith(".gitignore"):
                continue
            path = path[: -len(".gitignore")]
            if "/" not in path:
                catalog.root.append(TemplateIdentifier.parse(f"gh:{path}"))
            elif path.startswith("Global/"):
                catalog.global_.append(TemplateIdentifier.parse(f"ghg:{path[len('Global/'):]}"))
            elif path.startswith("community/"):
                catalog.community.append(
                    TemplateIdentifier.parse(f"ghc:{path[len('community/'):]}")
                )
        logger.debug(
            "GitHub catalog: %d root, %d global, %d community",
            len(catalog.root),
            len(catalog.global_),
            len(catalog.community),
        )
        return catalog

    def to_dict(self) -> dict[str, Any]:
        return {
            "updated": encode_timestamp(self.updated),
            "root": _encode_identifiers(self.root),
            "global": _encode_identifiers(self.global_),
            "community": _encode_identifiers(self.community),
        }


@dataclass
class TopTalCatalog:
    updated: datetime = EPOCH
    templates: list[TemplateIdentifier] = field(default_factory=list)

    @classmethod
    def load(cls, context: AppContext) -> TopTalCatalog:
        path = cache_filepath(context.config.cache_dir, TOPTAL_CACHE_PATH)
        payload = _read_catalog_file(context, path)
        if payload is not None:
            catalog = cls(
                updated=decode_timestamp(payload.get("updated")),
                templates=_decode_identifiers(payload, "templates", path),
            )
            if not is_expired(catalog.updated, context.clock()):
                logger.debug("Loaded TopTal catalog from %s", path)
                return catalog

        catalog = cls.fetch(context)
        write_json_file(path, catalog.to_dict())
        return catalog

    @classmethod
    def fetch(cls, context: AppContext) -> TopTalCatalog:
        logger.debug("Refreshing TopTal catalog")
        response = http_get(
            context.session,
            f"{TOPTAL_API}/list?format=lines",
            timeout=context.config.http_timeout,
            failure_message="Failed to fetch template list from TopTal",
        )
        templates = [
            TemplateIdentifier.parse(f"tt:{line.strip()}")
            for line in response.text.splitlines()
            if line.strip()
        ]
        logger.debug("TopTal catalog: %d templates", len(templates))
        return cls(updated=context.clock(), templates=templates)

    def to_dict(self) -> dict[str, Any]:
        return {
            "updated": encode_timestamp(self.updated),
            "templates": _encode_identifiers(self.templates),
        }
