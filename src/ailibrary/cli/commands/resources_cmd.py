from __future__ import annotations

import argparse

from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ailibrary.application.services.catalog_service import CatalogService, ResourceFilter
from ailibrary.cli.context import CLIContext
from ailibrary.infrastructure.db.store import open_store


def register(subparsers: argparse._SubParsersAction[argparse.ArgumentParser]) -> None:
    parser = subparsers.add_parser("resources", help="List resources in the library")
    parser.add_argument("--search", default="", help="Match title, notes or use-case tags")
    parser.add_argument("--content-type", default="")
    parser.add_argument("--topic", default="")
    parser.add_argument("--skill-level", default="")
    parser.add_argument("--week", default="")
    parser.add_argument("--status", default="")
    parser.add_argument("--limit", type=int, default=50)
    parser.add_argument("--stats", action="store_true", help="Print summary statistics")
    parser.set_defaults(handler=run)


def run(args: argparse.Namespace, ctx: CLIContext) -> int:
    catalog = CatalogService(open_store(ctx.settings))
    catalog.load()

    criteria = ResourceFilter(
        search=args.search,
        content_type=args.content_type,
        primary_topic=args.topic,
        skill_level=args.skill_level,
        week_suggested=args.week,
        status_priority=args.status,
    )
    matched = catalog.filter(criteria)
    shown = matched[: args.limit] if args.limit > 0 else matched

    table = Table(title=f"Resources ({len(shown)} of {len(matched)})")
    table.add_column("ID")
    table.add_column("Title", overflow="fold")
    table.add_column("Type")
    table.add_column("Topic")
    table.add_column("Level")
    table.add_column("Week")
    table.add_column("Status")
    table.add_column("Quality")

    for r in shown:
        table.add_row(
            str(r.id),
            escape(r.title),
            escape(r.content_type or ""),
            escape(r.primary_topic or ""),
            escape(r.skill_level or ""),
            escape(r.week_suggested or ""),
            escape(r.status_priority or ""),
            "" if r.quality_rating is None else str(r.quality_rating),
        )
    ctx.console.print(table)

    if args.stats:
        stats = catalog.stats()
        ctx.console.print(
            Panel.fit(
                "\n".join(
                    [
                        f"Total: {stats.total}",
                        f"Core: {stats.core}",
                        f"To review: {stats.to_review}",
                        f"Avg quality: {stats.avg_quality}",
                        f"Avg relevance: {stats.avg_relevance}",
                    ]
                ),
                title="Library stats",
            )
        )
    return 0
