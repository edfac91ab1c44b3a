from __future__ import annotations

import pytest

from gitnr.errors import FetchError
from gitnr.merge import TemplateList, collapse_blank_lines, trim_duplicate_lines
from gitnr.templates import GITHUB_GITIGNORE_RAW, TOPTAL_API, TemplateIdentifier

RUST_URL = f"{GITHUB_GITIGNORE_RAW}/Rust.gitignore"
JETBRAINS_URL = f"{TOPTAL_API}/JetBrains+all"


def test_collapse_blank_lines():
    assert collapse_blank_lines("a\n\n\n\nb\n\nc") == "a\n\nb\n\nc\n"
    assert collapse_blank_lines("") == ""


def test_trim_duplicate_lines_keeps_first_occurrence():
    bodies = ["*.log\nbuild/\n", "build/\n*.tmp\n*.log\n"]
    assert trim_duplicate_lines(bodies) == ["*.log\nbuild/\n", "*.tmp\n"]


def test_trim_duplicate_lines_dedups_within_a_body():
    assert trim_duplicate_lines(["a\nb\na\n", "b\nc"]) == ["a\nb\n", "c\n"]


def test_trim_duplicate_lines_collapses_blank_runs_left_by_removal():
    bodies = ["x\n", "y\n\nx\n\nz"]
    assert trim_duplicate_lines(bodies) == ["x\n", "y\n\nz\n"]


def test_parse_splits_commas_and_drops_empty_pieces():
    templates = TemplateList.parse(["gh:Rust,,tt:go", ",", "ghg:Linux"])
    assert [t.command_arg for t in templates] == ["gh:Rust", "tt:go", "ghg:Linux"]


def test_command():
    templates = TemplateList.parse(["Rust", "tt:go.gitignore", "ghc:Linux/Snap"])
    assert templates.command() == "gitnr create gh:Rust tt:go ghc:Linux/Snap"
    assert TemplateList().command() == "gitnr create"


def test_empty_list_has_no_content(context):
    assert TemplateList().content(context) == ""


def test_single_template_is_verbatim(context, session):
    session.routes[RUST_URL] = "target/\ntarget/\n\n\n\n*.rs.bk\n"
    rust = TemplateIdentifier.parse("gh:Rust")

    content = TemplateList([rust]).content(context)
    assert content == f"{rust.banner()}target/\ntarget/\n\n\n\n*.rs.bk"


def test_multiple_templates_are_merged_in_order(context, session):
    session.routes[RUST_URL] = "# Generated\ntarget/\n\n\n*.rs.bk\n.idea/\n"
    session.routes[JETBRAINS_URL] = "\n# Generated\n.idea/\nout/\n"
    templates = TemplateList.parse(["gh:Rust", "tt:JetBrains+all"])
    rust, jetbrains = templates

    content = templates.content(context)

    assert content == (
        f"{rust.banner()}# Generated\ntarget/\n\n*.rs.bk\n.idea/"
        "\n\n"
        f"{jetbrains.banner()}out/"
    )
    assert session.calls == [RUST_URL, JETBRAINS_URL]


def test_merged_body_lines_are_unique(context, session):
    session.routes[RUST_URL] = "a\nb\nc"
    session.routes[JETBRAINS_URL] = "c\nb\nd"
    templates = TemplateList.parse(["gh:Rust", "tt:JetBrains+all"])

    content = templates.content(context)
    body_lines = [line for line in content.splitlines() if line and not line.startswith("###")]
    assert body_lines == ["a", "b", "c", "d"]


def test_first_failure_aborts_the_merge(context, session):
    session.routes[JETBRAINS_URL] = "out/"
    templates = TemplateList.parse(["gh:DoesNotExist", "tt:JetBrains+all"])

    with pytest.raises(FetchError):
        templates.content(context)
    assert session.calls == [f"{GITHUB_GITIGNORE_RAW}/DoesNotExist.gitignore"]


def test_repeated_merge_uses_the_content_cache(context, session):
    session.routes[RUST_URL] = "target/"
    session.routes[JETBRAINS_URL] = "out/"
    templates = TemplateList.parse(["gh:Rust", "tt:JetBrains+all"])

    first = templates.content(context)
    second = templates.content(context)
    assert first == second
    assert session.calls == [RUST_URL, JETBRAINS_URL]
