from __future__ import annotations

import io
import os
import threading

import pytest

from gitnr.errors import GitnrError
from gitnr.terminal import TICK, InputEvent, TerminalInput, parse_input, read_input


def values(data: str) -> list[str]:
    return [event.value for event in parse_input(data)]


def test_arrow_keys():
    assert values("\x1b[A\x1b[B\x1b[C\x1b[D") == ["UP", "DOWN", "RIGHT", "LEFT"]
    assert values("\x1bOA\x1bOB") == ["UP", "DOWN"]


def test_shift_arrow_reports_modifier():
    (event,) = parse_input("\x1b[1;2B")
    assert event == InputEvent("key", "DOWN", shift=True)
    (event,) = parse_input("\x1b[1;3A")
    assert event == InputEvent("key", "UP", alt=True)


@pytest.mark.parametrize("sequence", ["\x1b[H", "\x1b[1~", "\x1b[7~", "\x1bOH"])
def test_home_variants(sequence):
    assert values(sequence) == ["HOME"]


@pytest.mark.parametrize("sequence", ["\x1b[F", "\x1b[4~", "\x1b[8~", "\x1bOF"])
def test_end_variants(sequence):
    assert values(sequence) == ["END"]


def test_page_keys():
    assert values("\x1b[5~\x1b[6~") == ["PGUP", "PGDN"]


def test_control_characters():
    assert values("\r\n\x7f\b") == ["ENTER", "ENTER", "BACKSPACE", "BACKSPACE"]
    (event,) = parse_input("\x03")
    assert event.value == "CTRL_C"
    assert event.ctrl


def test_lone_escape():
    assert values("\x1b") == ["ESC"]
    assert values("\x1bq") == ["ESC", "q"]


def test_uppercase_letters_carry_shift():
    lower, upper, digit = parse_input("cC1")
    assert (lower.value, lower.shift) == ("c", False)
    assert (upper.value, upper.shift) == ("C", True)
    assert (digit.value, digit.shift) == ("1", False)


def test_mouse_wheel():
    up, down = parse_input("\x1b[<64;10;5M\x1b[<65;10;5M")
    assert up == InputEvent("mouse", "SCROLL_UP")
    assert down == InputEvent("mouse", "SCROLL_DOWN")


def test_mouse_wheel_modifiers():
    (event,) = parse_input("\x1b[<69;1;1M")
    assert event == InputEvent("mouse", "SCROLL_DOWN", shift=True)
    (event,) = parse_input("\x1b[<72;1;1M")
    assert event == InputEvent("mouse", "SCROLL_UP", alt=True)


def test_mouse_clicks():
    assert values("\x1b[<0;3;4M") == ["LEFT_CLICK"]
    assert values("\x1b[<0;3;4m") == []
    assert values("\x1b[<2;3;4M") == []
    assert values("\x1b[<32;3;4M") == []


def test_mixed_stream():
    assert values("g\x1b[<64;1;1Mo\x1b[B") == ["g", "SCROLL_UP", "o", "DOWN"]


def test_requires_interactive_terminal():
    terminal = TerminalInput(stdin=io.StringIO(), stdout=io.StringIO())
    with pytest.raises(GitnrError):
        terminal.__enter__()


@pytest.fixture
def pipe():
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    os.close(read_fd)
    os.close(write_fd)


def write_later(fd: int, data: bytes, delay: float = 0.005) -> threading.Timer:
    timer = threading.Timer(delay, os.write, args=(fd, data))
    timer.start()
    return timer


def test_read_input_times_out_empty(pipe):
    read_fd, _ = pipe
    assert read_input(read_fd, 0.01) == ""


def test_read_input_completes_split_escape_sequence(pipe):
    read_fd, write_fd = pipe
    os.write(write_fd, b"\x1b")
    timer = write_later(write_fd, b"[A")
    data = read_input(read_fd, 0.5)
    timer.join()
    assert parse_input(data) == [InputEvent("key", "UP")]


def test_read_input_completes_split_mouse_report(pipe):
    read_fd, write_fd = pipe
    os.write(write_fd, b"\x1b[<64;1")
    timer = write_later(write_fd, b"0;5M")
    data = read_input(read_fd, 0.5)
    timer.join()
    assert parse_input(data) == [InputEvent("mouse", "SCROLL_UP")]


def test_read_input_lone_escape_is_returned(pipe):
    read_fd, write_fd = pipe
    os.write(write_fd, b"\x1b")
    assert parse_input(read_input(read_fd, 0.5)) == [InputEvent("key", "ESC")]


def test_next_event_joins_split_sequence(pipe):
    read_fd, write_fd = pipe
    terminal = TerminalInput(stdin=io.StringIO(), stdout=io.StringIO())
    terminal._fd = read_fd
    os.write(write_fd, b"\x1b")
    timer = write_later(write_fd, b"[A")
    assert terminal.next_event(0.5) == InputEvent("key", "UP")
    timer.join()
    assert terminal.next_event(0.01) == TICK
