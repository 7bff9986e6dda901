from __future__ import annotations

from typing import Sequence

import pytest

from conftest import LEGACY_HEADER
from ailibrary.application.services.spreadsheet_import_service import (
    POSITION_MODE,
    SpreadsheetImportService,
)
from ailibrary.core.errors import ImportCancelled, SpreadsheetError, ValidationError
from ailibrary.domain.models.resource import Resource


class MemoryStore:
    def __init__(self) -> None:
        self.rows: list[Resource] = []
        self.calls = 0

    def insert_many(self, resources: Sequence[Resource]) -> list[Resource]:
        self.calls += 1
        self.rows.extend(resources)
        return list(resources)


def test_prepare_by_header_skips_banner_and_normalizes(write_workbook, legacy_rows) -> None:
    source = write_workbook(legacy_rows)

    prepared = SpreadsheetImportService().prepare(source)

    assert prepared.sheet_names == ["Library"]
    assert prepared.rows_seen == 4
    assert prepared.columns[:4] == ["Origin", "Date", "Name", "Link"]
    assert [r.title for r in prepared.resources] == [
        "Intro to LLMs",
        "Cursor Tutorial for Teams",
        "Agents deep dive",
    ]

    intro, cursor, agents = prepared.resources
    assert prepared.first_resource is intro
    assert (intro.content_type, intro.quality_rating, intro.status_priority) == ("Video", 5, "Core")
    assert intro.your_notes == "Short primer on large language models"
    assert (cursor.content_type, cursor.primary_topic) == ("Tutorial", "AI-Assisted Coding")
    assert (cursor.skill_level, cursor.week_suggested) == ("Intermediate", "Week 2")
    assert (cursor.quality_rating, cursor.status_priority) == (3, "Supplemental")
    assert cursor.tools_covered == "Cursor"
    assert (agents.content_type, agents.primary_topic) == ("Tool", "Agent Development")
    assert (agents.week_suggested, agents.status_priority) == ("Optional", "To Review")


def test_blank_first_sheet_row_still_finds_header(write_workbook) -> None:
    intro = ["Newsletter", "2024-01-05", "Intro to LLMs", "https://youtu.be/abc", "Line one\nline two"]
    second = ["Blog", "2024-01-09", "Second", "https://example.com/second"]
    source = write_workbook([[], LEGACY_HEADER, intro, second])

    prepared = SpreadsheetImportService().prepare(source, skip_rows=1)

    assert prepared.columns[:4] == ["Origin", "Date", "Name", "Link"]
    assert [r.title for r in prepared.resources] == ["Intro to LLMs", "Second"]
    assert prepared.resources[0].your_notes == "Line one\nline two"


def test_position_mode_matches_header_mode(write_workbook, legacy_rows) -> None:
    source = write_workbook(legacy_rows)
    service = SpreadsheetImportService()

    by_header = service.prepare(source)
    by_position = service.prepare(source, mode=POSITION_MODE)

    assert by_position.rows_seen == 6
    assert [r.to_record() for r in by_position.resources] == [r.to_record() for r in by_header.resources]


def test_unknown_mode_is_rejected(write_workbook, legacy_rows) -> None:
    with pytest.raises(ValidationError):
        SpreadsheetImportService().prepare(write_workbook(legacy_rows), mode="guess")


def test_missing_workbook_raises(tmp_path) -> None:
    with pytest.raises(SpreadsheetError):
        SpreadsheetImportService().prepare(tmp_path / "AI Courses Table.xlsx")


def test_inspect_columns_reports_header_and_first_row(write_workbook, legacy_rows) -> None:
    report = SpreadsheetImportService().inspect_columns(write_workbook(legacy_rows), skip_rows=1)

    assert report.row_count == 4
    assert report.columns[2] == "Name"
    assert report.first_row is not None
    assert report.first_row["Name"] == "Intro to LLMs"


def test_commit_waits_then_imports_in_batches(write_workbook, legacy_rows) -> None:
    store = MemoryStore()
    waits: list[float] = []
    service = SpreadsheetImportService(store, batch_size=2, delay_seconds=5, sleep=waits.append)

    report = service.commit(service.prepare(write_workbook(legacy_rows)))

    assert waits == [5]
    assert store.calls == 2
    assert report.succeeded == 3
    assert [r.title for r in store.rows][0] == "Intro to LLMs"


def test_interrupt_during_wait_cancels_without_writing(write_workbook, legacy_rows) -> None:
    store = MemoryStore()

    def interrupted(_seconds: float) -> None:
        raise KeyboardInterrupt

    service = SpreadsheetImportService(store, sleep=interrupted)
    prepared = service.prepare(write_workbook(legacy_rows))

    with pytest.raises(ImportCancelled):
        service.commit(prepared)
    assert store.calls == 0


def test_empty_import_does_not_wait(write_workbook) -> None:
    waits: list[float] = []
    service = SpreadsheetImportService(MemoryStore(), sleep=waits.append)
    prepared = service.prepare(write_workbook([["Banner"], ["Name", "Link"]]))

    report = service.commit(prepared)

    assert prepared.resources == []
    assert report.total == 0
    assert waits == []


def test_commit_without_store_is_rejected(write_workbook, legacy_rows) -> None:
    service = SpreadsheetImportService(delay_seconds=0)
    with pytest.raises(ValidationError):
        service.commit(service.prepare(write_workbook(legacy_rows)))
