from __future__ import annotations

import io
import json

import pytest
from rich.console import Console

import gitnr.search as search
from gitnr.catalog import GITHUB_API_ENDPOINT
from gitnr.templates import TOPTAL_API
from gitnr.terminal import TICK, TICK_SECONDS, InputEvent


class ScriptedTerminal:
    def __init__(self, script, log) -> None:
        self.script = list(script)
        self.log = log
        self.timeouts: list[float] = []

    def __enter__(self):
        self.log.append("enter")
        return self

    def __exit__(self, *exc_info) -> None:
        self.log.append("exit")

    def next_event(self, timeout: float):
        self.log.append("wait")
        self.timeouts.append(timeout)
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


class RecordingLive:
    def __init__(self, renderable, **kwargs) -> None:
        self.kwargs = kwargs
        self.updates = 0

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        pass

    def update(self, renderable, refresh: bool = False) -> None:
        assert refresh
        self.updates += 1


@pytest.fixture
def catalogs(session):
    tree_url = f"{GITHUB_API_ENDPOINT}/repos/github/gitignore/git/trees/main?recursive=true"
    session.routes[tree_url] = json.dumps({"tree": [{"path": "Rust.gitignore", "type": "blob"}]})
    session.routes[f"{TOPTAL_API}/list?format=lines"] = "go\nnode\npython\n"
    return session


@pytest.fixture
def loop(monkeypatch, catalogs, context):
    log: list[str] = []
    cursors: list[int] = []
    created: dict[str, object] = {}

    def fake_render(state, width, height):
        log.append("render")
        cursors.append(state.pane().cursor)
        return ""

    def start(script) -> int:
        def make_terminal(stdout=None):
            created["terminal"] = ScriptedTerminal(script, log)
            return created["terminal"]

        def make_live(renderable, **kwargs):
            created["live"] = RecordingLive(renderable, **kwargs)
            return created["live"]

        monkeypatch.setattr(search, "TerminalInput", make_terminal)
        monkeypatch.setattr(search, "Live", make_live)
        monkeypatch.setattr(search, "render", fake_render)
        return search.run_search(context, Console(file=io.StringIO(), width=80, height=24))

    return start, log, cursors, created


def test_loop_renders_before_every_wait(loop):
    start, log, cursors, created = loop
    script = [InputEvent("key", "DOWN"), TICK, InputEvent("key", "CTRL_C", ctrl=True)]

    assert start(script) == 0

    assert log == ["enter", "render"] + ["render", "wait"] * 3 + ["exit"]
    assert created["terminal"].timeouts == [TICK_SECONDS] * 3
    assert created["live"].updates == 3
    assert cursors[-1] == 1


def test_tick_keeps_the_loop_running(loop):
    start, log, cursors, created = loop
    script = [TICK, TICK, TICK, InputEvent("key", "CTRL_C", ctrl=True)]

    assert start(script) == 0
    assert log.count("wait") == 4
    assert set(cursors) == {0}


def test_keyboard_interrupt_stops_the_loop(loop):
    start, log, cursors, created = loop
    script = [InputEvent("key", "DOWN"), KeyboardInterrupt()]

    assert start(script) == 0
    assert created["terminal"].script == []
    assert log[-1] == "exit"


def test_live_uses_alternate_screen(loop):
    start, log, cursors, created = loop
    start([InputEvent("key", "CTRL_C", ctrl=True)])
    assert created["live"].kwargs["screen"] is True
    assert created["live"].kwargs["auto_refresh"] is False
