from __future__ import annotations

import argparse
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ailibrary.application.services.batch_import_service import BatchImportReport, BatchOutcome
from ailibrary.application.services.spreadsheet_import_service import (
    DEFAULT_WORKBOOK,
    HEADER_MODE,
    POSITION_MODE,
    PreparedImport,
    SpreadsheetImportService,
)
from ailibrary.cli.context import CLIContext
from ailibrary.infrastructure.db.store import open_store


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    by_header = subparsers.add_parser("import", help="Import resources from an Excel workbook by header names")
    by_header.add_argument("file_path", nargs="?", default=str(DEFAULT_WORKBOOK))
    by_header.add_argument(
        "--skip-rows",
        type=int,
        default=1,
        help="Rows above the header row to skip (default: 1)",
    )
    _add_common_options(by_header)
    by_header.set_defaults(handler=run_by_header)

    by_position = subparsers.add_parser(
        "import-by-position",
        help="Import resources from an Excel workbook by fixed column position (A-J)",
    )
    by_position.add_argument("file_path", nargs="?", default=str(DEFAULT_WORKBOOK))
    _add_common_options(by_position)
    by_position.set_defaults(handler=run_by_position)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--batch-size", type=int, help="Resources per insert call (default: 10)")
    parser.add_argument("--delay", type=float, help="Seconds to wait for Ctrl+C before importing (default: 5)")
    parser.add_argument("--dry-run", action="store_true", help="Normalize and preview without importing")


def run_by_header(args: argparse.Namespace, ctx: CLIContext) -> int:
    return _run(args, ctx, mode=HEADER_MODE, skip_rows=args.skip_rows)


def run_by_position(args: argparse.Namespace, ctx: CLIContext) -> int:
    return _run(args, ctx, mode=POSITION_MODE, skip_rows=0)


def _run(args: argparse.Namespace, ctx: CLIContext, *, mode: str, skip_rows: int) -> int:
    settings = ctx.settings
    title = "AI Training Library - Resource Importer"
    if mode == POSITION_MODE:
        title += " (By Position)"
    ctx.console.rule(title)

    store = None if args.dry_run else open_store(settings)
    service = SpreadsheetImportService(
        store,
        batch_size=args.batch_size or settings.import_batch_size,
        delay_seconds=settings.import_delay_seconds if args.delay is None else args.delay,
    )

    ctx.console.print("Reading Excel file...")
    prepared = service.prepare(Path(args.file_path), mode=mode, skip_rows=skip_rows)
    _print_summary(ctx, prepared)

    if not prepared.resources:
        ctx.console.print("[red]No valid resources to import[/red]")
        return 0

    ctx.console.print("\nPreview of first resource:")
    ctx.console.print_json(data=prepared.first_resource.to_record())

    if args.dry_run:
        ctx.console.print(f"[yellow]Dry run:[/yellow] {len(prepared.resources)} resources not imported")
        return 0

    ctx.console.print(f"\n[yellow]Ready to import {len(prepared.resources)} resources[/yellow]")
    if service.delay_seconds > 0:
        ctx.console.print(f"Press Ctrl+C to cancel, or wait {service.delay_seconds:g} seconds to continue...")

    def on_batch(outcome: BatchOutcome) -> None:
        if outcome.ok:
            ctx.console.print(f"[green]Imported batch {outcome.batch_number}[/green] ({outcome.size} resources)")
        else:
            ctx.console.print(f"[red]Error importing batch {outcome.batch_number}:[/red] {escape(outcome.error or '')}")

    report = service.commit(prepared, on_batch=on_batch)
    _print_report(ctx, report)
    return 0 if report.succeeded == report.total else 1


def _print_summary(ctx: CLIContext, prepared: PreparedImport) -> None:
    lines = [
        f"File: {escape(str(prepared.source_path))}",
        f"Sheets: {escape(', '.join(prepared.sheet_names))}",
        f"Rows found: {prepared.rows_seen}",
        f"Valid resources: {len(prepared.resources)}",
    ]
    if prepared.columns:
        lines.append(f"Columns: {escape(', '.join(prepared.columns))}")
    ctx.console.print(Panel.fit("\n".join(lines), title=f"Sheet: {escape(prepared.sheet_name)}"))

    if prepared.sample_rows and prepared.mode == POSITION_MODE:
        table = Table(title="First rows")
        for label in ("Row", "A", "B", "C", "D", "E"):
            table.add_column(label, overflow="fold")
        for idx, row in enumerate(prepared.sample_rows):
            cells = [escape(str(v)) for v in list(row)[:5]]
            cells += [""] * (5 - len(cells))
            table.add_row(str(idx), *cells)
        ctx.console.print(table)


def _print_report(ctx: CLIContext, report: BatchImportReport) -> None:
    ctx.console.print(
        Panel.fit(
            "\n".join(
                [
                    f"Attempted: {report.total}",
                    f"Imported: {report.succeeded}",
                    f"Failed: {report.failed}",
                    f"Failed batches: {', '.join(str(b.batch_number) for b in report.failed_batches) or 'none'}",
                ]
            ),
            title="Import complete",
        )
    )
