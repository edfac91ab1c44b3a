from __future__ import annotations

from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from gitnr.state import CollectionPane, PreviewMode, PreviewState, UIState

HEADER_HEIGHT = 3
FOOTER_HEIGHT = 4
FILTER_HEIGHT = 3
SIDE_WIDTH = 40
POPUP_NOTE = "Note: You may need to paste the copied content before exiting"

HOME_HELP = (
    ("App", ("Quit: Ctrl + C",)),
    ("Templates", ("Tabs: ← →", "List: ↑ ↓ or M. Wheel (+Shift=fast)")),
    ("", ("Select: Enter", "Filter: Start typing")),
    ("Preview & Generate", ("Current:   Shift + C", "Selection: Shift + S")),
)
PREVIEW_HELP = (
    ("App", ("Back: Esc", "Quit: Ctrl + C")),
    ("Scrolling", ("Keyboard: ↑ ↓ PgUp PgDn", "Mouse:    Wheel")),
    ("Output", ("Copy Template: Shift + C", "Copy Command:  Shift + X")),
)


def truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    if width <= 1:
        return value[:width]
    return f"{value[: width - 1]}…"


def visible_window(cursor: int, total: int, rows: int) -> tuple[int, int]:
    if total <= 0 or rows <= 0:
        return 0, 0
    if total <= rows:
        return 0, total
    start = min(max(cursor - rows // 2, 0), total - rows)
    return start, start + rows


def render_help(sections: tuple[tuple[str, tuple[str, ...]], ...]) -> Table:
    table = Table.grid(expand=True, padding=(0, 2))
    for _ in sections:
        table.add_column(style="bright_black")
    headers = [Text(title, style="bold underline bright_black") for title, _ in sections]
    table.add_row(*headers)
    depth = max(len(lines) for _, lines in sections)
    for row in range(depth):
        table.add_row(*[lines[row] if row < len(lines) else "" for _, lines in sections])
    return table


def render_tabs(state: UIState) -> Panel:
    text = Text()
    for index, title in enumerate(state.tab_titles()):
        if index:
            text.append(" · ", style="bright_black")
        style = "bold black on bright_yellow" if index == state.active_tab else "bold white"
        text.append(f" {title} ", style=style)
    grid = Table.grid(expand=True)
    grid.add_column(ratio=1)
    grid.add_column(justify="right", width=8)
    grid.add_row(text, Text("gitnr", style="bold italic bright_yellow"))
    return Panel(grid, border_style="bright_black", padding=(0, 1))


def render_list(state: UIState, pane: CollectionPane, rows: int, width: int) -> Panel:
    total = len(pane.values)
    start, end = visible_window(pane.cursor, total, rows)
    table = Table.grid(expand=True)
    table.add_column(width=2)
    table.add_column(no_wrap=True, overflow="ellipsis")
    for index in range(start, end):
        template = pane.values[index]
        marker = "▷" if index == pane.cursor else ""
        style = ""
        if state.is_selected(template):
            style = "bold on grey23"
        if index == pane.cursor:
            style = f"{style} bold".strip()
        table.add_row(marker, Text(truncate(template.name, max(width - 8, 8))), style=style)
    if not total:
        message = "No templates match the filter" if state.is_filtering() else "No templates"
        table.add_row("", Text(message, style="bright_black"))
    position = pane.cursor + 1 if total else 0
    return Panel(
        table,
        title=f" List ({position}/{total}) ",
        title_align="left",
        border_style="white",
        padding=(0, 1),
    )


def render_filter(state: UIState) -> Panel:
    body = Text(state.filter_text)
    if state.is_filtering():
        body.append("▏", style="bright_yellow")
    return Panel(
        body,
        title=" Filter ",
        title_align="left",
        border_style="bright_yellow" if state.is_filtering() else "white",
        padding=(0, 1),
    )


def render_selection(state: UIState) -> Panel:
    lines = [
        Text(f"{selection.kind.display_name} - {selection.template.name}", no_wrap=True, overflow="ellipsis")
        for selection in state.selection
    ]
    body: RenderableType = Group(*lines) if lines else Text("Nothing selected", style="bright_black")
    return Panel(
        body,
        title=f" Selection ({len(state.selection)}) ",
        title_align="left",
        border_style="white",
        padding=(0, 1),
    )


def build_home(state: UIState, width: int, height: int) -> Layout:
    body_height = max(height - HEADER_HEIGHT - FOOTER_HEIGHT, 3)
    list_rows = max(body_height - 2, 1)
    list_width = max(width - SIDE_WIDTH - 2, 20)

    side = Layout(name="side", size=SIDE_WIDTH)
    side.split_column(
        Layout(render_filter(state), name="filter", size=FILTER_HEIGHT),
        Layout(render_selection(state), name="selection"),
    )
    main = Layout(name="main", size=body_height)
    main.split_row(
        Layout(render_list(state, state.pane(), list_rows, list_width), name="list"),
        side,
    )
    root = Layout(name="root")
    root.split_column(
        Layout(render_tabs(state), name="header", size=HEADER_HEIGHT),
        main,
        Layout(render_help(HOME_HELP), name="footer", size=FOOTER_HEIGHT),
    )
    return root


def render_copy_popup(preview: PreviewState) -> Panel:
    lines: list[Text] = []
    if preview.mode is PreviewMode.COPIED_CONTENT:
        lines.append(Text("Template copied to clipboard"))
        lines.append(Text(POPUP_NOTE, style="italic bright_black"))
    else:
        lines.append(Text("CLI command copied to clipboard"))
        lines.append(Text(POPUP_NOTE, style="italic bright_black"))
        lines.append(Text(""))
        lines.append(Text(f" {preview.command} ", style="bold black on bright_green"))
    return Panel(
        Group(*lines),
        title="─ Success ─",
        border_style="bright_green",
        padding=(0, 2),
    )


def render_preview_content(preview: PreviewState, rows: int) -> Panel:
    visible = preview.lines[preview.scroll_position : preview.scroll_position + rows]
    copied = preview.mode is not PreviewMode.DEFAULT
    text = Text("\n".join(visible), style="bright_black" if copied else "", no_wrap=True, overflow="ellipsis")
    return Panel(
        text,
        title=Text(preview.title, style="bright_black" if copied else "bold white"),
        title_align="left",
        subtitle=f" {preview.scroll_position + 1}/{preview.line_count} ",
        subtitle_align="right",
        border_style="bright_black" if copied else "bright_yellow",
        padding=(0, 2),
    )


def build_preview(state: UIState, width: int, height: int) -> Layout:
    preview = state.require_preview()
    popup_height = 0
    if preview.mode is PreviewMode.COPIED_CONTENT:
        popup_height = 4
    elif preview.mode is PreviewMode.COPIED_COMMAND:
        popup_height = 6
    content_height = max(height - FOOTER_HEIGHT - popup_height, 3)
    content_rows = max(content_height - 2, 1)

    root = Layout(name="root")
    parts = [Layout(render_preview_content(preview, content_rows), name="content", size=content_height)]
    if popup_height:
        parts.append(Layout(render_copy_popup(preview), name="popup", size=popup_height))
    parts.append(Layout(render_help(PREVIEW_HELP), name="footer", size=FOOTER_HEIGHT))
    root.split_column(*parts)
    return root


def render(state: UIState, width: int, height: int) -> Layout:
    if state.preview is None:
        return build_home(state, width, height)
    return build_preview(state, width, height)
