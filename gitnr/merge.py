from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import TYPE_CHECKING

from gitnr.templates import TemplateIdentifier

if TYPE_CHECKING:
    from gitnr.context import AppContext

logger = logging.getLogger(__name__)

PROGRAM_NAME = "gitnr"


def collapse_blank_lines(text: str) -> str:
    result: list[str] = []
    previous_blank = False
    for line in text.splitlines():
        if line.strip():
            result.append(f"{line}\n")
            previous_blank = False
        elif not previous_blank:
            result.append("\n")
            previous_blank = True
    return "".join(result)


def trim_duplicate_lines(bodies: Iterable[str]) -> list[str]:
    # First occurrence of a non-blank line wins across every body, in list order.
    seen: set[str] = set()
    result: list[str] = []
    for body in bodies:
        kept: list[str] = []
        for line in body.splitlines():
            if not line.strip():
                kept.append(line)
                continue
            if line in seen:
                continue
            seen.add(line)
            kept.append(line)
        result.append(collapse_blank_lines("\n".join(kept)))
    return result


class TemplateList(Sequence[TemplateIdentifier]):
    def __init__(self, items: Iterable[TemplateIdentifier] = ()) -> None:
        self.items: list[TemplateIdentifier] = list(items)

    @classmethod
    def parse(cls, arguments: Iterable[str]) -> TemplateList:
        pieces = [
            piece.strip()
            for argument in arguments
            for piece in argument.split(",")
            if piece.strip()
        ]
        return cls(TemplateIdentifier.parse(piece) for piece in pieces)

    def __getitem__(self, index):
        return self.items[index]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[TemplateIdentifier]:
        return iter(self.items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TemplateList):
            return self.items == other.items
        return NotImplemented

    def __repr__(self) -> str:
        return f"TemplateList({self.items!r})"

    def content(self, context: AppContext) -> str:
        if not self.items:
            return ""
        if len(self.items) == 1:
            return self.items[0].content(context)

        bodies = [template.fetch_body(context) for template in self.items]
        logger.debug("Merging %d templates", len(bodies))
        deduped = trim_duplicate_lines(bodies)
        sections = [
            template.content(context, body)
            for template, body in zip(self.items, deduped)
        ]
        return "\n\n".join(sections)

    def command(self, program: str = PROGRAM_NAME) -> str:
        arguments = " ".join(template.command_arg for template in self.items)
        return f"{program} create {arguments}".strip()
