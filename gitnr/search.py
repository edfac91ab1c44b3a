from __future__ import annotations

import logging

from rich.console import Console
from rich.live import Live

from gitnr.context import AppContext
from gitnr.handlers import handle_event
from gitnr.state import UIState
from gitnr.terminal import TICK_SECONDS, TerminalInput
from gitnr.views import render

logger = logging.getLogger(__name__)


def run_search(context: AppContext, console: Console) -> int:
    state = UIState.build(context)
    logger.debug(
        "Loaded collections: %s",
        ", ".join(f"{pane.kind.display_name}={len(pane.items)}" for pane in state.collections),
    )

    with TerminalInput(stdout=console.file) as terminal, Live(
        render(state, console.size.width, console.size.height),
        console=console,
        auto_refresh=False,
        screen=True,
        transient=True,
        vertical_overflow="crop",
    ) as live:
        while state.running:
            live.update(render(state, console.size.width, console.size.height), refresh=True)
            try:
                event = terminal.next_event(TICK_SECONDS)
            except KeyboardInterrupt:
                state.quit()
                continue
            handle_event(event, state, context)
    return 0
