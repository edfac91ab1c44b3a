from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console

from gitnr.context import AppContext
from gitnr.errors import GitnrError
from gitnr.merge import TemplateList

logger = logging.getLogger(__name__)

NO_TEMPLATES_MESSAGE = """No template arguments provided

Provide templates to the create command using the following syntax:
 gitnr create [TEMPLATE]...

For more information, see the help:
 gitnr create --help"""


def resolve_output_path(save: bool, out_file: str | None) -> Path | None:
    if save:
        return Path.cwd() / ".gitignore"
    if out_file:
        path = Path(out_file).expanduser().resolve()
        if path.is_dir():
            raise GitnrError(
                "The output path provided is a directory.\n"
                "Provide a file path to write the template to a file.\n"
                f"Path: {path}"
            )
        return path
    return None


def write_output(path: Path, output: str) -> None:
    try:
        path.write_text(output + "\n", encoding="utf-8")
    except OSError as exc:
        raise GitnrError(f"Failed to write template to file at path\n{path}") from exc


def success_message(console: Console, path: Path) -> None:
    console.print(
        f"\n[bold white on green] Success [/bold white on green] Template written to path: {path}\n"
    )


def run_create(
    context: AppContext,
    arguments: list[str],
    console: Console,
    save: bool = False,
    out_file: str | None = None,
) -> int:
    templates = TemplateList.parse(arguments)
    if not templates:
        raise GitnrError(NO_TEMPLATES_MESSAGE)

    output_path = resolve_output_path(save, out_file)
    output = templates.content(context)

    if output_path is None:
        print(output)
        return 0

    write_output(output_path, output)
    logger.debug("Wrote %d templates to %s", len(templates), output_path)
    success_message(console, output_path)
    return 0
