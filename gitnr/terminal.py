from __future__ import annotations

import os
import re
import select
import shutil
import sys
import termios
import tty
from collections import deque
from dataclasses import dataclass
from typing import TextIO

from gitnr.errors import GitnrError

TICK_SECONDS = 0.25
ESCAPE_WAIT_SECONDS = 0.05

MOUSE_ON = "\x1b[?1000h\x1b[?1006h"
MOUSE_OFF = "\x1b[?1006l\x1b[?1000l"

SGR_MOUSE_RE = re.compile(r"\x1b\[<(\d+);(\d+);(\d+)([Mm])")
CSI_RE = re.compile(r"\x1b\[([0-9;]*)([A-Za-z~])")
SS3_RE = re.compile(r"\x1bO([A-Za-z])")
INCOMPLETE_ESCAPE_RE = re.compile(r"\x1b(?:\[<?[0-9;]*|O)?\Z")

CSI_FINAL_KEYS = {
    "A": "UP",
    "B": "DOWN",
    "C": "RIGHT",
    "D": "LEFT",
    "H": "HOME",
    "F": "END",
    "Z": "SHTAB",
}
CSI_TILDE_KEYS = {
    "1": "HOME",
    "7": "HOME",
    "4": "END",
    "8": "END",
    "3": "DELETE",
    "5": "PGUP",
    "6": "PGDN",
}
SINGLE_KEYS = {
    "\r": "ENTER",
    "\n": "ENTER",
    "\t": "TAB",
    "\x7f": "BACKSPACE",
    "\b": "BACKSPACE",
    "\x03": "CTRL_C",
}


@dataclass(frozen=True)
class InputEvent:
    kind: str
    value: str = ""
    shift: bool = False
    alt: bool = False
    ctrl: bool = False


TICK = InputEvent("tick")
RESIZE = InputEvent("resize")


def _modifiers(param: str) -> tuple[bool, bool, bool]:
    # xterm encodes modifiers as 1 + (shift=1 | alt=2 | ctrl=4).
    try:
        bits = int(param) - 1
    except ValueError:
        return False, False, False
    return bool(bits & 1), bool(bits & 2), bool(bits & 4)


def _parse_csi(params: str, final: str) -> InputEvent:
    parts = params.split(";") if params else []
    shift = alt = ctrl = False
    if len(parts) >= 2:
        shift, alt, ctrl = _modifiers(parts[1])
    if final == "~":
        value = CSI_TILDE_KEYS.get(parts[0] if parts else "", "ESC")
        return InputEvent("key", value, shift=shift, alt=alt, ctrl=ctrl)
    if final == "Z":
        return InputEvent("key", "SHTAB", shift=True)
    value = CSI_FINAL_KEYS.get(final, "ESC")
    return InputEvent("key", value, shift=shift, alt=alt, ctrl=ctrl)


def _parse_mouse(button: int, pressed: bool) -> InputEvent | None:
    shift = bool(button & 4)
    alt = bool(button & 8)
    ctrl = bool(button & 16)
    if button & 64:
        value = "SCROLL_DOWN" if button & 1 else "SCROLL_UP"
        return InputEvent("mouse", value, shift=shift, alt=alt, ctrl=ctrl)
    if button & 32:
        return None
    if pressed and button & 3 == 0:
        return InputEvent("mouse", "LEFT_CLICK", shift=shift, alt=alt, ctrl=ctrl)
    return None


def parse_input(data: str) -> list[InputEvent]:
    events: list[InputEvent] = []
    index = 0
    while index < len(data):
        char = data[index]
        if char == "\x1b":
            rest = data[index:]
            match = SGR_MOUSE_RE.match(rest)
            if match:
                event = _parse_mouse(int(match.group(1)), match.group(4) == "M")
                if event is not None:
                    events.append(event)
                index += match.end()
                continue
            match = CSI_RE.match(rest)
            if match:
                events.append(_parse_csi(match.group(1), match.group(2)))
                index += match.end()
                continue
            match = SS3_RE.match(rest)
            if match:
                value = CSI_FINAL_KEYS.get(match.group(1), "ESC")
                events.append(InputEvent("key", value))
                index += match.end()
                continue
            events.append(InputEvent("key", "ESC"))
            index += 1
            continue
        if char in SINGLE_KEYS:
            value = SINGLE_KEYS[char]
            events.append(InputEvent("key", value, ctrl=value == "CTRL_C"))
        elif char.isprintable():
            events.append(InputEvent("key", char, shift=char.isalpha() and char.isupper()))
        index += 1
    return events


def _drain(fd: int) -> bytes:
    chunks: list[bytes] = []
    while select.select([fd], [], [], 0)[0]:
        data = os.read(fd, 1024)
        if not data:
            break
        chunks.append(data)
    return b"".join(chunks)


def read_input(fd: int, timeout: float) -> str:
    """Wait up to ``timeout`` for input and return everything available.

    A buffer that stops inside an escape sequence waits briefly for the rest
    of it, so a sequence split across reads is parsed as one key.
    """
    if not select.select([fd], [], [], timeout)[0]:
        return ""
    data = _drain(fd)
    while INCOMPLETE_ESCAPE_RE.search(data.decode("utf-8", errors="ignore")):
        if not select.select([fd], [], [], ESCAPE_WAIT_SECONDS)[0]:
            break
        more = _drain(fd)
        if not more:
            break
        data += more
    return data.decode("utf-8", errors="ignore")


class TerminalInput:
    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stderr
        self.pending: deque[InputEvent] = deque()
        self._fd = -1
        self._old_settings: list | None = None
        self._size = shutil.get_terminal_size()

    def __enter__(self) -> TerminalInput:
        if not self.stdin.isatty():
            raise GitnrError("The search command requires an interactive terminal")
        self._fd = self.stdin.fileno()
        self._old_settings = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        self.stdout.write(MOUSE_ON)
        self.stdout.flush()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stdout.write(MOUSE_OFF)
        self.stdout.flush()
        if self._old_settings is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._old_settings)
            self._old_settings = None

    def next_event(self, timeout: float = TICK_SECONDS) -> InputEvent:
        if self.pending:
            return self.pending.popleft()
        size = shutil.get_terminal_size()
        if size != self._size:
            self._size = size
            return RESIZE
        self.pending.extend(parse_input(read_input(self._fd, timeout)))
        if not self.pending:
            return TICK
        return self.pending.popleft()
