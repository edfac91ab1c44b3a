from __future__ import annotations

import argparse
import sys

from rich.console import Console
from rich.markup import escape

from gitnr import __version__
from gitnr.config import configure_logging, load_config
from gitnr.context import build_context
from gitnr.create import run_create
from gitnr.errors import ConfigError, GitnrError, describe_error
from gitnr.search import run_search

DESCRIPTION = """Generate a '.gitignore' file using one or more templates from
the GitHub & TopTal collections along with your own templates
from local files or remote URLs.

You can also browse the available templates at the GitHub &
TopTal collections using the `search` command."""

TEMPLATES_HELP = """Space or comma separated list of templates to use. Templates can be
prefixed with the provider name to avoid any ambiguity.

Providers:
 - "gh:"    GitHub templates
 - "ghc:"   GitHub community templates
 - "ghg:"   GitHub global templates
 - "tt:"    TopTal templates
 - "url:"   Remote URL to text file template
 - "file:"  Local file path to a .gitignore file
 - "repo:"  File from any public GitHub repo

If no prefix is specified, the provider is guessed where possible and
otherwise defaults to a GitHub template. Template names are case-sensitive.
The order of the templates is the order of the output content.

Examples:
 - gitnr create Rust
 - gitnr create gh:Rust
 - gitnr create gh:Rust tt:jetbrains+all"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitnr",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-r",
        "--refresh",
        action="store_true",
        help="Refresh the cache (templates are cached for 1h)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    create = subparsers.add_parser(
        "create",
        help="Create a .gitignore file from one or more templates",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    create.add_argument(
        "-s",
        "--save",
        action="store_true",
        help="Write template to .gitignore file in current directory",
    )
    create.add_argument("-f", "--file", dest="out_file", help="Write template to the specified file path")
    create.add_argument("templates", nargs="*", help=TEMPLATES_HELP)

    subparsers.add_parser(
        "search",
        help="Choose templates interactively from the GitHub & TopTal collections",
    )
    return parser


def print_error(console: Console, exc: BaseException) -> None:
    console.print(
        f"\n[bold white on red] Error [/bold white on red] {escape(describe_error(exc))}\n"
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv if argv is not None else sys.argv[1:])
    err_console = Console(stderr=True)

    try:
        config = load_config(refresh=args.refresh, verbose=args.verbose)
    except ConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        return 2
    configure_logging(config.log_level)

    if args.command is None:
        print_error(err_console, GitnrError("No command specified"))
        parser.print_help(sys.stderr)
        return 1

    try:
        context = build_context(config)
        if args.command == "create":
            return run_create(
                context,
                args.templates,
                Console(),
                save=args.save,
                out_file=args.out_file,
            )
        return run_search(context, err_console)
    except GitnrError as exc:
        print_error(err_console, exc)
        return 1
    except KeyboardInterrupt:
        err_console.print("\n[bold]Stopped.[/bold]")
        return 0


if __name__ == "__main__":
    raise SystemExit(main())
