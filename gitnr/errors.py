from __future__ import annotations


class GitnrError(Exception):
    pass


class ConfigError(GitnrError):
    pass


class TemplateParseError(GitnrError):
    pass


class TemplateFileError(GitnrError):
    pass


class FetchError(GitnrError):
    pass


class CatalogError(GitnrError):
    pass


class CacheError(GitnrError):
    pass


class ClipboardError(GitnrError):
    pass


class UIStateError(GitnrError):
    pass


def describe_error(exc: BaseException) -> str:
    lines = [str(exc) or exc.__class__.__name__]
    cause = exc.__cause__
    while cause is not None:
        lines.append(f"Caused by: {cause}")
        cause = cause.__cause__
    return "\n".join(lines)
