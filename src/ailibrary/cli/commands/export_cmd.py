from __future__ import annotations

import argparse
from pathlib import Path

from ailibrary.application.services.catalog_service import CatalogService
from ailibrary.cli.context import CLIContext
from ailibrary.infrastructure.db.store import open_store
from ailibrary.infrastructure.importers.csv_resource_importer import EXPORT_FILENAME, TEMPLATE_FILENAME


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    export_parser = subparsers.add_parser("export", help="Export every resource to CSV")
    export_parser.add_argument("--out", type=Path, default=Path(EXPORT_FILENAME))
    export_parser.set_defaults(handler=run_export)

    template_parser = subparsers.add_parser("template", help="Write a CSV import template")
    template_parser.add_argument("--out", type=Path, default=Path(TEMPLATE_FILENAME))
    template_parser.set_defaults(handler=run_template)


def run_export(args: argparse.Namespace, ctx: CLIContext) -> int:
    catalog = CatalogService(open_store(ctx.settings))
    resources = catalog.load()
    out_path = args.out.expanduser().resolve()
    out_path.write_text(catalog.export_csv(), encoding="utf-8")
    ctx.console.print(f"[green]Exported[/green] {len(resources)} resources to {out_path}")
    return 0


def run_template(args: argparse.Namespace, ctx: CLIContext) -> int:
    out_path = args.out.expanduser().resolve()
    out_path.write_text(CatalogService.template_csv(), encoding="utf-8")
    ctx.console.print(f"[green]Template written[/green] to {out_path}")
    return 0
