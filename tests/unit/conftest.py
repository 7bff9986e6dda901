from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Callable, Sequence
from xml.sax.saxutils import escape

import pytest

LEGACY_HEADER = [
    "Origin",
    "Date",
    "Name",
    "Link",
    "Small description",
    "One-liner",
    "Cami Rating (1–5)",
    "Nico Rating (1–5)",
    "Category",
    "Course creation - Stage",
]

_WORKBOOK_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<workbook xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main"
          xmlns:r="http://schemas.openxmlformats.org/officeDocument/2006/relationships">
  <sheets>{sheets}</sheets>
</workbook>
"""

_RELS_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">{rels}</Relationships>
"""

_SHEET_XML = """<?xml version="1.0" encoding="UTF-8" standalone="yes"?>
<worksheet xmlns="http://schemas.openxmlformats.org/spreadsheetml/2006/main">
  <sheetData>{rows}</sheetData>
</worksheet>
"""


def _column_letter(idx: int) -> str:
    letters = ""
    while idx > 0:
        idx, rem = divmod(idx - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def _cell_xml(ref: str, value: object) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f'<c r="{ref}"><v>{value}</v></c>'
    return f'<c r="{ref}" t="inlineStr"><is><t>{escape(str(value))}</t></is></c>'


def _sheet_xml(rows: Sequence[Sequence[object]]) -> str:
    parts: list[str] = []
    for row_idx, row in enumerate(rows, start=1):
        cells = [
            _cell_xml(f"{_column_letter(col_idx)}{row_idx}", value)
            for col_idx, value in enumerate(row, start=1)
            if value is not None and value != ""
        ]
        parts.append(f'<row r="{row_idx}">{"".join(cells)}</row>')
    return _SHEET_XML.format(rows="".join(parts))


def build_workbook(path: Path, sheets: dict[str, Sequence[Sequence[object]]]) -> Path:
    sheet_nodes: list[str] = []
    rel_nodes: list[str] = []
    with zipfile.ZipFile(path, "w") as archive:
        for idx, (name, rows) in enumerate(sheets.items(), start=1):
            sheet_nodes.append(f'<sheet name="{escape(name)}" sheetId="{idx}" r:id="rId{idx}"/>')
            rel_nodes.append(
                f'<Relationship Id="rId{idx}" '
                'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/worksheet" '
                f'Target="worksheets/sheet{idx}.xml"/>'
            )
            archive.writestr(f"xl/worksheets/sheet{idx}.xml", _sheet_xml(rows))
        archive.writestr("xl/workbook.xml", _WORKBOOK_XML.format(sheets="".join(sheet_nodes)))
        archive.writestr("xl/_rels/workbook.xml.rels", _RELS_XML.format(rels="".join(rel_nodes)))
    return path


@pytest.fixture
def write_workbook(tmp_path: Path) -> Callable[..., Path]:
    def _write(rows: Sequence[Sequence[object]], name: str = "courses.xlsx", sheet_name: str = "Library") -> Path:
        return build_workbook(tmp_path / name, {sheet_name: rows})

    return _write


@pytest.fixture
def legacy_rows() -> list[list[object]]:
    """A title banner, the legacy header and four data rows, one of them unusable."""
    return [
        ["AI Courses Table"],
        LEGACY_HEADER,
        [
            "Newsletter",
            "2024-01-05",
            "Intro to LLMs",
            "https://youtu.be/abc",
            "Short primer on large language models",
            "",
            4,
            5,
            "Foundations & Mental Models",
            "Start",
        ],
        [
            "Blog",
            "2024-01-09",
            "Cursor Tutorial for Teams",
            "https://example.com/cursor",
            "Hands-on walkthrough",
            "",
            "",
            "Verlo",
            "Developer Tooling",
            "Start-Mid",
        ],
        [
            "Friend",
            "2024-02-01",
            "Agents deep dive",
            "https://github.com/org/agents",
            "",
            "",
            "",
            "2",
            "AI Agents & Automation",
            "Extra Tips",
        ],
        ["Friend", "2024-02-02", "No link here", "", "", "", "", "4", "", ""],
    ]
