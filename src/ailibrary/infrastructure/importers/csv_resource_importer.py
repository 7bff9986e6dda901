from __future__ import annotations

import csv
import io
import logging
from typing import Iterable

from ailibrary.core.classifiers import parse_score
from ailibrary.core.errors import EmptyCsvError, NoValidRowsError
from ailibrary.core.taxonomy import ENUM_OPTIONS
from ailibrary.domain.models.resource import INTEGER_FIELDS, RESOURCE_FIELDS, Resource

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "ai-training-library.csv"
TEMPLATE_FILENAME = "import-template.csv"

TEMPLATE_EXAMPLE_ROW = {
    "title": "Example: AI Fundamentals Guide",
    "link": "https://example.com",
    "content_type": "Article",
    "primary_topic": "AI Fundamentals",
    "skill_level": "Beginner",
    "tools_covered": "Claude, GPT-4",
    "learning_modality": "Read/Watch",
    "time_investment": "30min",
    "quality_rating": "5",
    "relevance_score": "5",
    "status_priority": "Core",
    "use_case_tags": "Learning, Understanding",
    "your_notes": "Great introduction to AI concepts",
    "week_suggested": "Week 1",
}


def _read_records(text: str) -> list[list[str]]:
    reader = csv.reader(io.StringIO(text), skipinitialspace=True)
    return [record for record in reader if any(cell.strip() for cell in record)]


def _clean_header(value: str) -> str:
    return value.replace('"', "").strip()


def parse_resource_csv(text: str) -> list[Resource]:
    """Parse CSV text into canonical resources for preview.

    Rows without a title or link are dropped. Free-text cells are kept as
    read; only headers, option fields and scores are trimmed. Raises
    ``EmptyCsvError`` when there is no data row under the header and
    ``NoValidRowsError`` when nothing survives validation.
    """
    records = _read_records(text or "")
    if len(records) < 2:
        raise EmptyCsvError("CSV file is empty or only has headers")

    headers = [_clean_header(h) for h in records[0]]
    ignored = sorted({h for h in headers if h and h not in RESOURCE_FIELDS})
    if ignored:
        logger.info("Ignoring non-canonical CSV columns: %s", ", ".join(ignored))

    resources: list[Resource] = []
    for line_no, values in enumerate(records[1:], start=2):
        row = {header: (values[idx] if idx < len(values) else "") for idx, header in enumerate(headers)}
        resource = _row_to_resource(row, line_no)
        if resource is not None:
            resources.append(resource)

    if not resources:
        raise NoValidRowsError("No valid rows found in CSV")
    return resources


def _row_to_resource(row: dict[str, str], line_no: int) -> Resource | None:
    if not row.get("title", "").strip() or not row.get("link", "").strip():
        return None

    values: dict[str, object] = {}
    for name in RESOURCE_FIELDS:
        if name not in row:
            values[name] = None
            continue
        raw = row[name]
        if name in INTEGER_FIELDS:
            values[name] = parse_score(raw)
            continue
        options = ENUM_OPTIONS.get(name)
        if options is not None:
            raw = raw.strip()
            if not raw:
                values[name] = None
            elif raw in options:
                values[name] = raw
            else:
                logger.warning("Line %d: %r is not a valid %s; leaving it empty", line_no, raw, name)
                values[name] = None
            continue
        values[name] = raw
    return Resource(**values)


def _csv_cell(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def render_resource_csv(resources: Iterable[Resource]) -> str:
    """Render resources with the canonical header and every field double-quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buffer.write(",".join(RESOURCE_FIELDS) + "\n")
    for resource in resources:
        record = resource.to_record()
        writer.writerow([_csv_cell(record[name]) for name in RESOURCE_FIELDS])
    return buffer.getvalue()


def render_template_csv() -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    buffer.write(",".join(RESOURCE_FIELDS) + "\n")
    writer.writerow([TEMPLATE_EXAMPLE_ROW[name] for name in RESOURCE_FIELDS])
    return buffer.getvalue()
