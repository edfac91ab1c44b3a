"""Template identifiers: parse a raw argument into a provider variant and
derive the locator its body is fetched from.

Resolution walks ``RESOLUTION_RULES`` in order and the first matching rule
wins. Explicit prefixes come first so they always beat the heuristics.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable
from urllib.parse import urlparse

from gitnr.errors import TemplateFileError, TemplateParseError
from gitnr.net import http_get

if TYPE_CHECKING:
    from gitnr.context import AppContext

logger = logging.getLogger(__name__)

GITHUB_RAW = "https://raw.githubusercontent.com"
GITHUB_GITIGNORE_RAW = f"{GITHUB_RAW}/github/gitignore/main"
TOPTAL_API = "https://www.toptal.com/developers/gitignore/api"


class Provider(Enum):
    GITHUB = "github"
    GITHUB_GLOBAL = "github_global"
    GITHUB_COMMUNITY = "github_community"
    GITHUB_REPO = "github_repo"
    TOPTAL = "toptal"
    URL = "url"
    FILE = "file"


def is_absolute_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme)


def strip_first_prefix(value: str, prefixes: tuple[str, ...]) -> str:
    lowered = value.lower()
    for prefix in prefixes:
        if lowered.startswith(prefix.lower()):
            return value[len(prefix):]
    return value


def strip_first_suffix(value: str, suffixes: tuple[str, ...]) -> str:
    for suffix in suffixes:
        if value.endswith(suffix):
            return value[: -len(suffix)]
    return value


def _github_locator(folder: str) -> Callable[[str], str]:
    base = f"{GITHUB_GITIGNORE_RAW}/{folder}" if folder else GITHUB_GITIGNORE_RAW

    def build(name: str) -> str:
        return f"{base}/{name}.gitignore"

    return build


def _url_locator(name: str) -> str:
    if not is_absolute_url(name):
        raise TemplateParseError(f"[Ignore Template] Invalid URL: {name}")
    return name


def _file_locator(name: str) -> str:
    if not os.path.exists(name):
        raise TemplateFileError(f"[Ignore Template] Invalid or non-existent file path: {name}")
    return name


@dataclass(frozen=True)
class ProviderSpec:
    prefix: str
    title: str
    name_prefixes: tuple[str, ...]
    name_suffixes: tuple[str, ...]
    locator: Callable[[str], str]

    def extract_name(self, raw: str) -> str:
        name = strip_first_prefix(raw, self.name_prefixes)
        return strip_first_suffix(name, self.name_suffixes)


PROVIDER_SPECS: dict[Provider, ProviderSpec] = {
    Provider.GITHUB: ProviderSpec(
        prefix="gh:",
        title="GitHub",
        name_prefixes=("gh:",),
        name_suffixes=(".gitignore",),
        locator=_github_locator(""),
    ),
    Provider.GITHUB_GLOBAL: ProviderSpec(
        prefix="ghg:",
        title="GitHub Global",
        name_prefixes=("ghg:", "global/"),
        name_suffixes=(".gitignore",),
        locator=_github_locator("Global"),
    ),
    Provider.GITHUB_COMMUNITY: ProviderSpec(
        prefix="ghc:",
        title="GitHub Community",
        name_prefixes=("ghc:", "community/"),
        name_suffixes=(".gitignore",),
        locator=_github_locator("community"),
    ),
    Provider.TOPTAL: ProviderSpec(
        prefix="tt:",
        title="TopTal",
        name_prefixes=("tt:",),
        name_suffixes=(".gitignore", ".patch", ".stack"),
        locator=lambda name: f"{TOPTAL_API}/{name}",
    ),
    Provider.GITHUB_REPO: ProviderSpec(
        prefix="repo:",
        title="Repo",
        name_prefixes=("repo:",),
        name_suffixes=(),
        locator=lambda name: f"{GITHUB_RAW}/{name}",
    ),
    Provider.URL: ProviderSpec(
        prefix="url:",
        title="URL",
        name_prefixes=("url:",),
        name_suffixes=(),
        locator=_url_locator,
    ),
    Provider.FILE: ProviderSpec(
        prefix="file:",
        title="File",
        name_prefixes=("file:",),
        name_suffixes=(),
        locator=_file_locator,
    ),
}


@dataclass(frozen=True)
class ResolutionRule:
    provider: Provider
    matches: Callable[[str], bool]
    description: str


def _has_prefix(prefix: str) -> Callable[[str], bool]:
    return lambda raw: raw.startswith(prefix)


RESOLUTION_RULES: tuple[ResolutionRule, ...] = (
    ResolutionRule(Provider.GITHUB, _has_prefix("gh:"), "prefix gh:"),
    ResolutionRule(Provider.GITHUB_GLOBAL, _has_prefix("ghg:"), "prefix ghg:"),
    ResolutionRule(Provider.GITHUB_COMMUNITY, _has_prefix("ghc:"), "prefix ghc:"),
    ResolutionRule(Provider.TOPTAL, _has_prefix("tt:"), "prefix tt:"),
    ResolutionRule(Provider.GITHUB_REPO, _has_prefix("repo:"), "prefix repo:"),
    ResolutionRule(Provider.URL, _has_prefix("url:"), "prefix url:"),
    ResolutionRule(Provider.FILE, _has_prefix("file:"), "prefix file:"),
    ResolutionRule(Provider.URL, is_absolute_url, "absolute URL"),
    ResolutionRule(Provider.FILE, lambda raw: os.path.exists(raw), "existing path"),
    ResolutionRule(Provider.GITHUB_REPO, lambda raw: raw.count("/") >= 3, "owner/repo/branch/path"),
    ResolutionRule(
        Provider.GITHUB_COMMUNITY,
        lambda raw: raw.lower().startswith("community/"),
        "community/ folder",
    ),
    ResolutionRule(
        Provider.GITHUB_GLOBAL,
        lambda raw: raw.lower().startswith("global/"),
        "global/ folder",
    ),
)


def resolve_provider(raw: str) -> Provider:
    for rule in RESOLUTION_RULES:
        if rule.matches(raw):
            return rule.provider
    return Provider.GITHUB


@dataclass(frozen=True)
class TemplateIdentifier:
    raw_input: str
    provider: Provider

    @classmethod
    def parse(cls, raw: str) -> TemplateIdentifier:
        return cls(raw_input=raw, provider=resolve_provider(raw))

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> TemplateIdentifier:
        return cls(raw_input=str(payload["input"]), provider=Provider(payload["provider"]))

    def to_dict(self) -> dict[str, str]:
        return {"input": self.raw_input, "provider": self.provider.value}

    @property
    def spec(self) -> ProviderSpec:
        return PROVIDER_SPECS[self.provider]

    @property
    def prefix(self) -> str:
        return self.spec.prefix

    @property
    def name(self) -> str:
        return self.spec.extract_name(self.raw_input)

    @property
    def title(self) -> str:
        return f"{self.spec.title}: {self.name}"

    @property
    def command_arg(self) -> str:
        return f"{self.prefix}{self.name}"

    def locator(self) -> str:
        return self.spec.locator(self.name)

    def banner(self) -> str:
        title = f"### {self.title} ###"
        rule = f"###{'-' * max(len(title) - 6, 0)}###"
        return f"{rule}\n{title}\n{rule}\n"

    def fetch_body(self, context: AppContext) -> str:
        if self.provider is Provider.FILE:
            path = self.locator()
            try:
                return Path(path).read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                raise TemplateFileError(
                    f"Failed to read ignore file template at path\n{path}"
                ) from exc

        url = self.locator()
        cached = context.content_cache.get(url)
        if cached is not None:
            return cached

        response = http_get(
            context.session,
            url,
            timeout=context.config.http_timeout,
            failure_message=(
                "Failed to fetch ignore template at URL. The template might not exist..."
            ),
        )
        body = response.text.strip()
        context.content_cache.set(url, body)
        return body

    def content(self, context: AppContext, body: str | None = None) -> str:
        if body is None:
            body = self.fetch_body(context)
        return f"{self.banner()}{body}".strip()
