from __future__ import annotations

import argparse
import logging
from pathlib import Path

from rich.console import Console

from ailibrary.cli.commands import (
    check_columns_cmd,
    export_cmd,
    import_cmd,
    resources_cmd,
    web_cmd,
)
from ailibrary.cli.context import CLIContext
from ailibrary.core.config import load_settings
from ailibrary.core.errors import ImportCancelled, LibraryError
from ailibrary.core.logging import configure_logging

logger = logging.getLogger(__name__)

EXIT_CANCELLED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ailib",
        description="AI Training Library CLI",
    )
    parser.add_argument(
        "--project-root",
        type=Path,
        default=Path.cwd(),
        help="Directory holding .env.local (default: current working directory)",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)

    subparsers = parser.add_subparsers(dest="command", required=True)
    import_cmd.register(subparsers)
    check_columns_cmd.register(subparsers)
    resources_cmd.register(subparsers)
    export_cmd.register(subparsers)
    web_cmd.register(subparsers)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    settings = load_settings(args.project_root)
    ctx = CLIContext(settings=settings, console=console)

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 2

    try:
        return handler(args, ctx)
    except ImportCancelled as exc:
        console.print(f"[yellow]{exc}[/yellow]")
        return EXIT_CANCELLED
    except LibraryError as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
