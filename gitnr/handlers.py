from __future__ import annotations

import time
from typing import TYPE_CHECKING

from gitnr.state import FAST_STEP, PAGE_STEP, PreviewMode, UIState
from gitnr.terminal import InputEvent

if TYPE_CHECKING:
    from gitnr.context import AppContext

SCROLL_DEBOUNCE_SECONDS = 0.015


def _step(event: InputEvent) -> int:
    return FAST_STEP if event.shift else 1


def handle_event(event: InputEvent, state: UIState, context: AppContext) -> None:
    if event.kind == "key":
        handle_key_event(event, state, context)
    elif event.kind == "mouse":
        handle_mouse_event(event, state)


def _handle_shift_key(event: InputEvent, state: UIState, context: AppContext) -> bool:
    lowered = event.value.lower()
    if state.preview is None:
        if lowered == "s":
            state.preview_selection(context)
            return True
        if lowered == "c":
            state.preview_highlighted(context)
            return True
        return False
    if lowered == "c":
        state.preview.copy_content(context)
    elif lowered == "x":
        state.preview.copy_command(context)
    return False


def _handle_home_key(event: InputEvent, state: UIState) -> None:
    value = event.value
    if value == "RIGHT":
        state.tab_next()
    elif value == "LEFT":
        state.tab_previous()
    elif value == "ENTER":
        state.toggle_highlighted()
    elif value == "UP":
        state.list_previous(_step(event))
    elif value == "DOWN":
        state.list_next(_step(event))
    elif value == "HOME":
        state.pane().first()
    elif value == "END":
        state.pane().last()
    elif value == "BACKSPACE":
        state.filter_pop()
    elif value == " ":
        if state.is_filtering():
            state.filter_push(value)
    elif len(value) == 1 and value.isprintable():
        state.filter_push(value)


def _handle_preview_key(event: InputEvent, state: UIState) -> None:
    preview = state.require_preview()
    value = event.value
    lowered = value.lower() if len(value) == 1 else ""

    if preview.mode is PreviewMode.DEFAULT:
        if value == "ESC":
            state.back_home()
        elif value == "UP":
            preview.scroll_up()
        elif value == "DOWN":
            preview.scroll_down()
        elif value == "PGUP":
            preview.scroll_up(PAGE_STEP)
        elif value == "PGDN":
            preview.scroll_down(PAGE_STEP)
        elif value == "HOME":
            preview.scroll_to_top()
        elif value == "END":
            preview.scroll_to_bottom()
        return

    # The key that triggered the copy must not dismiss its own banner.
    if preview.mode is PreviewMode.COPIED_CONTENT and lowered == "c":
        return
    if preview.mode is PreviewMode.COPIED_COMMAND and lowered == "x":
        return
    preview.copy_done()


def handle_key_event(event: InputEvent, state: UIState, context: AppContext) -> None:
    if event.value == "CTRL_C" or (event.ctrl and event.value.lower() == "c"):
        state.quit()
        return

    if event.shift and len(event.value) == 1:
        if _handle_shift_key(event, state, context):
            return

    if state.preview is None:
        _handle_home_key(event, state)
    else:
        _handle_preview_key(event, state)


def handle_mouse_event(event: InputEvent, state: UIState, now: float | None = None) -> None:
    now = time.monotonic() if now is None else now
    fast = event.shift or event.alt

    if state.preview is None:
        if event.value == "LEFT_CLICK":
            state.toggle_highlighted()
        elif event.value in {"SCROLL_UP", "SCROLL_DOWN"}:
            if now - state.last_scroll_time <= SCROLL_DEBOUNCE_SECONDS:
                return
            step = FAST_STEP if fast else 1
            if event.value == "SCROLL_UP":
                state.list_previous(step)
            else:
                state.list_next(step)
            state.last_scroll_time = now
        return

    preview = state.preview
    if preview.mode is PreviewMode.DEFAULT:
        if event.value == "SCROLL_UP":
            preview.scroll_up()
        elif event.value == "SCROLL_DOWN":
            preview.scroll_down()
    elif event.value == "LEFT_CLICK":
        preview.copy_done()
