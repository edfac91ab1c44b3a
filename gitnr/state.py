from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from gitnr.catalog import TAB_ORDER, CollectionKind
from gitnr.errors import UIStateError
from gitnr.merge import TemplateList
from gitnr.templates import TemplateIdentifier

if TYPE_CHECKING:
    from gitnr.context import AppContext

logger = logging.getLogger(__name__)

FAST_STEP = 10
PAGE_STEP = 10


def filter_templates(items: list[TemplateIdentifier], query: str) -> list[TemplateIdentifier]:
    if not query:
        return list(items)
    lowered = query.lower()
    return [item for item in items if lowered in item.name.lower()]


@dataclass
class CollectionPane:
    kind: CollectionKind
    items: list[TemplateIdentifier]
    values: list[TemplateIdentifier] = field(default_factory=list)
    cursor: int = 0

    def __post_init__(self) -> None:
        if not self.values:
            self.values = list(self.items)

    def next(self, step: int = 1) -> None:
        length = len(self.values)
        if length == 0:
            return
        step = min(step, length)
        self.cursor = (self.cursor + step) % length

    def previous(self, step: int = 1) -> None:
        length = len(self.values)
        if length == 0:
            return
        step = min(step, length)
        self.cursor = (self.cursor + length - step) % length

    def first(self) -> None:
        self.cursor = 0

    def last(self) -> None:
        self.cursor = max(len(self.values) - 1, 0)

    def highlighted(self) -> TemplateIdentifier | None:
        if 0 <= self.cursor < len(self.values):
            return self.values[self.cursor]
        return None

    def apply_filter(self, query: str) -> None:
        self.values = filter_templates(self.items, query)
        if self.cursor >= len(self.values):
            self.cursor = max(len(self.values) - 1, 0)


@dataclass(frozen=True)
class Selection:
    kind: CollectionKind
    template: TemplateIdentifier


class PreviewMode(Enum):
    DEFAULT = "default"
    COPIED_CONTENT = "copied_content"
    COPIED_COMMAND = "copied_command"


@dataclass
class PreviewState:
    templates: TemplateList
    content: str
    line_count: int
    command: str
    title: str
    scroll_position: int = 0
    mode: PreviewMode = PreviewMode.DEFAULT

    @classmethod
    def build(cls, templates: TemplateList, context: AppContext) -> PreviewState:
        content = templates.content(context)
        if len(templates) == 1:
            title = f" Preview: {templates[0].name} "
        else:
            title = f" Preview: Selected ({len(templates)}) "
        return cls(
            templates=templates,
            content=content,
            line_count=content.count("\n") + 1,
            command=templates.command(),
            title=title,
        )

    @property
    def lines(self) -> list[str]:
        return self.content.split("\n")

    def scroll_up(self, step: int = 1) -> None:
        self.scroll_position = max(self.scroll_position - step, 0)

    def scroll_down(self, step: int = 1) -> None:
        self.scroll_position = min(self.scroll_position + step, max(self.line_count - 1, 0))

    def scroll_to_top(self) -> None:
        self.scroll_position = 0

    def scroll_to_bottom(self) -> None:
        self.scroll_position = max(self.line_count - 1, 0)

    def copy_content(self, context: AppContext) -> None:
        context.clipboard(self.content)
        self.mode = PreviewMode.COPIED_CONTENT

    def copy_command(self, context: AppContext) -> None:
        context.clipboard(self.command)
        self.mode = PreviewMode.COPIED_COMMAND

    def copy_done(self) -> None:
        self.mode = PreviewMode.DEFAULT


@dataclass
class UIState:
    collections: list[CollectionPane]
    preview: PreviewState | None = None
    active_tab: int = 0
    filter_text: str = ""
    selection: list[Selection] = field(default_factory=list)
    last_scroll_time: float = 0.0
    running: bool = True

    @classmethod
    def build(cls, context: AppContext) -> UIState:
        panes = [CollectionPane(kind, context.collection(kind)) for kind in TAB_ORDER]
        return cls(collections=panes)

    @property
    def view(self) -> str:
        return "home" if self.preview is None else "preview"

    def quit(self) -> None:
        self.running = False

    def tab_titles(self) -> list[str]:
        return [pane.kind.display_name for pane in self.collections]

    def pane(self) -> CollectionPane:
        return self.collections[self.active_tab]

    def tab_next(self) -> None:
        self.active_tab = (self.active_tab + 1) % len(self.collections)
        self.apply_filter()

    def tab_previous(self) -> None:
        self.active_tab = (self.active_tab + len(self.collections) - 1) % len(self.collections)
        self.apply_filter()

    def list_next(self, step: int = 1) -> None:
        self.pane().next(step)

    def list_previous(self, step: int = 1) -> None:
        self.pane().previous(step)

    def apply_filter(self) -> None:
        self.pane().apply_filter(self.filter_text)

    def filter_push(self, char: str) -> None:
        self.filter_text += char
        self.apply_filter()

    def filter_pop(self) -> None:
        if not self.filter_text:
            return
        self.filter_text = self.filter_text[:-1]
        self.apply_filter()

    def is_filtering(self) -> bool:
        return bool(self.filter_text)

    def is_selected(self, template: TemplateIdentifier) -> bool:
        return any(selection.template == template for selection in self.selection)

    def toggle(self, selection: Selection) -> None:
        if selection in self.selection:
            self.selection.remove(selection)
        else:
            self.selection.append(selection)

    def toggle_highlighted(self) -> None:
        pane = self.pane()
        template = pane.highlighted()
        if template is None:
            return
        self.toggle(Selection(kind=pane.kind, template=template))

    def selected_templates(self) -> TemplateList:
        return TemplateList(selection.template for selection in self.selection)

    def preview_selection(self, context: AppContext) -> None:
        templates = self.selected_templates()
        if not templates:
            return
        logger.debug("Previewing %d selected templates", len(templates))
        self.preview = PreviewState.build(templates, context)

    def preview_highlighted(self, context: AppContext) -> None:
        template = self.pane().highlighted()
        if template is None:
            return
        logger.debug("Previewing highlighted template %s", template.command_arg)
        self.preview = PreviewState.build(TemplateList([template]), context)

    def back_home(self) -> None:
        self.preview = None

    def require_preview(self) -> PreviewState:
        if self.preview is None:
            raise UIStateError(
                "Invalid UI State: attempting to use the preview when not currently in that view"
            )
        return self.preview
