from __future__ import annotations

import argparse
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ailibrary.application.services.spreadsheet_import_service import (
    DEFAULT_WORKBOOK,
    SpreadsheetImportService,
)
from ailibrary.cli.context import CLIContext


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("check-columns", help="Show the sheets, columns and first row of a workbook")
    parser.add_argument("file_path", nargs="?", default=str(DEFAULT_WORKBOOK))
    parser.add_argument("--skip-rows", type=int, default=0, help="Rows above the header row to skip")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    report = SpreadsheetImportService().inspect_columns(Path(args.file_path), skip_rows=args.skip_rows)

    ctx.console.print(
        Panel.fit(
            "\n".join(
                [
                    f"File: {escape(str(report.source_path))}",
                    f"Sheets: {escape(', '.join(report.sheet_names))}",
                    f"Rows: {report.row_count}",
                ]
            ),
            title="Workbook",
        )
    )

    table = Table(title=f"Columns ({len(report.columns)})")
    table.add_column("#")
    table.add_column("Column")
    table.add_column("First row value", overflow="fold")
    first_row = report.first_row or {}
    for idx, name in enumerate(report.columns, start=1):
        table.add_row(str(idx), escape(name), escape(first_row.get(name, "")))
    ctx.console.print(table)
    return 0
