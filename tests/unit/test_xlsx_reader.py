from pathlib import Path

import pytest

from conftest import build_workbook
from ailibrary.core.errors import SpreadsheetError
from ailibrary.infrastructure.importers.xlsx_reader import XlsxSheetReader


def test_read_rows_keeps_cell_whitespace_and_skips_blank_rows(write_workbook) -> None:
    source = write_workbook(
        [
            ["Name", "Link", "", "Rating"],
            [],
            ["Intro", "https://example.com", "", 5],
            ["Two  spaces\nand a line break", "", "x"],
        ]
    )

    sheet = XlsxSheetReader(source).read_rows()

    assert sheet.sheet_name == "Library"
    assert sheet.sheet_names == ["Library"]
    assert sheet.rows == [
        ["Name", "Link", "", "Rating"],
        ["Intro", "https://example.com", "", "5"],
        ["Two  spaces\nand a line break", "", "x"],
    ]


def test_only_first_sheet_is_read(tmp_path: Path) -> None:
    source = build_workbook(
        tmp_path / "two.xlsx",
        {"Courses": [["Name"], ["First"]], "Archive": [["Name"], ["Second"]]},
    )

    reader = XlsxSheetReader(source)

    assert reader.sheet_names() == ["Courses", "Archive"]
    assert reader.read_rows().rows == [["Name"], ["First"]]


def test_read_records_skips_banner_rows_and_fills_missing_cells(write_workbook) -> None:
    source = write_workbook(
        [
            ["AI Courses Table"],
            ["Name", "Link", "Notes"],
            ["Intro", "https://example.com"],
        ]
    )

    records = XlsxSheetReader(source).read_records(skip_rows=1)

    assert records == [{"Name": "Intro", "Link": "https://example.com", "Notes": ""}]


def test_skip_rows_counts_blank_sheet_rows(write_workbook) -> None:
    source = write_workbook(
        [
            [],
            ["Name", "Link"],
            ["Intro", "https://example.com"],
        ]
    )

    records = XlsxSheetReader(source).read_records(skip_rows=1)

    assert records == [{"Name": "Intro", "Link": "https://example.com"}]


def test_duplicate_and_blank_headers_get_unique_names() -> None:
    records = XlsxSheetReader.to_records([["Rating", "", "Rating"], ["1", "2", "3"]])
    assert records == [{"Rating": "1", "column_2": "2", "Rating_2": "3"}]


def test_to_records_with_nothing_left_is_empty() -> None:
    assert XlsxSheetReader.to_records([["Banner"]], skip_rows=1) == []


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(SpreadsheetError, match="not found"):
        XlsxSheetReader(tmp_path / "missing.xlsx").read_rows()


def test_non_zip_file_raises(tmp_path: Path) -> None:
    source = tmp_path / "fake.xlsx"
    source.write_text("Name,Link\n", encoding="utf-8")
    with pytest.raises(SpreadsheetError, match="Not an .xlsx"):
        XlsxSheetReader(source).read_rows()
