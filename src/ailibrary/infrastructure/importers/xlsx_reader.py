from __future__ import annotations

import zipfile
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Iterator, Sequence
from xml.etree import ElementTree as ET

from ailibrary.core.errors import SpreadsheetError


@dataclass(slots=True)
class SheetContents:
    sheet_name: str
    sheet_names: list[str]
    rows: list[list[str]]
    # 1-based worksheet row number of each entry in ``rows``.
    row_numbers: list[int] = field(default_factory=list)


class XlsxSheetReader:
    """Read the first worksheet of an .xlsx workbook straight from its OOXML parts."""

    def __init__(self, path: Path) -> None:
        self.path = path.expanduser()

    def sheet_names(self) -> list[str]:
        with self._open() as archive:
            return [name for name, _ in self._sheet_entries(archive)]

    def read_rows(self) -> SheetContents:
        """Return every non-empty row of the first sheet as a positional list of strings."""
        with self._open() as archive:
            entries = self._sheet_entries(archive)
            if not entries:
                raise SpreadsheetError(f"Workbook has no worksheets: {self.path}")
            sheet_name, sheet_path = entries[0]
            shared_strings = self._shared_strings(archive)
            rows: list[list[str]] = []
            row_numbers: list[int] = []
            for row_number, row_map in self._iter_rows(archive, sheet_path, shared_strings):
                if not any(str(v).strip() for v in row_map.values()):
                    continue
                width = max(row_map.keys())
                rows.append([row_map.get(idx, "") for idx in range(1, width + 1)])
                row_numbers.append(row_number)
        return SheetContents(
            sheet_name=sheet_name,
            sheet_names=[name for name, _ in entries],
            rows=rows,
            row_numbers=row_numbers,
        )

    def read_records(self, *, skip_rows: int = 0) -> list[dict[str, str]]:
        """Return header-keyed rows, treating the first non-empty row below sheet row ``skip_rows`` as the header.

        Missing cells default to an empty string.
        """
        sheet = self.read_rows()
        return self.to_records(sheet.rows, skip_rows=skip_rows, row_numbers=sheet.row_numbers)

    @classmethod
    def to_records(
        cls,
        rows: list[list[str]],
        *,
        skip_rows: int = 0,
        row_numbers: Sequence[int] | None = None,
    ) -> list[dict[str, str]]:
        """Key rows by the header row.

        ``skip_rows`` counts worksheet rows, blank ones included, when
        ``row_numbers`` is given; otherwise rows are assumed contiguous from 1.
        """
        numbers = list(row_numbers) if row_numbers is not None else list(range(1, len(rows) + 1))
        rows = [row for number, row in zip(numbers, rows) if number > skip_rows]
        if not rows:
            return []
        columns = cls._dedupe_columns(rows[0])
        records: list[dict[str, str]] = []
        for row in rows[1:]:
            records.append({name: (row[idx] if idx < len(row) else "") for idx, name in enumerate(columns)})
        return records

    def _open(self) -> zipfile.ZipFile:
        if not self.path.exists() or not self.path.is_file():
            raise SpreadsheetError(f"Spreadsheet not found: {self.path}")
        try:
            return zipfile.ZipFile(self.path, "r")
        except zipfile.BadZipFile as exc:
            raise SpreadsheetError(f"Not an .xlsx workbook: {self.path}") from exc

    @staticmethod
    def _dedupe_columns(columns: list[str]) -> list[str]:
        out: list[str] = []
        seen: dict[str, int] = {}
        for idx, value in enumerate(columns, start=1):
            base = value.strip() or f"column_{idx}"
            if base not in seen:
                seen[base] = 1
                out.append(base)
                continue
            seen[base] += 1
            out.append(f"{base}_{seen[base]}")
        return out

    def _sheet_entries(self, archive: zipfile.ZipFile) -> list[tuple[str, str]]:
        names = archive.namelist()
        if "xl/workbook.xml" not in names:
            raise SpreadsheetError(f"Workbook manifest missing in {self.path}")
        workbook_root = ET.fromstring(archive.read("xl/workbook.xml"))
        rel_map: dict[str, str] = {}
        rels_path = "xl/_rels/workbook.xml.rels"
        if rels_path in names:
            rels_root = ET.fromstring(archive.read(rels_path))
            for rel in rels_root:
                if self._local_tag(rel.tag) != "Relationship":
                    continue
                rel_id = str(rel.attrib.get("Id") or "").strip()
                target = str(rel.attrib.get("Target") or "").strip()
                if rel_id and target:
                    rel_map[rel_id] = target

        entries: list[tuple[str, str]] = []
        for node in workbook_root.iter():
            if self._local_tag(node.tag) != "sheet":
                continue
            name = str(node.attrib.get("name") or "").strip() or "Sheet"
            rel_id = ""
            for key in node.attrib.keys():
                if key.endswith("}id") or key == "r:id":
                    rel_id = str(node.attrib.get(key) or "").strip()
                    break
            target = rel_map.get(rel_id, "")
            if not target:
                continue
            entries.append((name, self._resolve_target(target)))
        return entries

    @staticmethod
    def _resolve_target(target: str) -> str:
        normalized = target.replace("\\", "/").strip()
        if normalized.startswith("/"):
            normalized = normalized.lstrip("/")
        if not normalized.startswith("xl/"):
            normalized = f"xl/{normalized}"
        return str(PurePosixPath(normalized))

    def _iter_rows(
        self,
        archive: zipfile.ZipFile,
        sheet_path: str,
        shared_strings: list[str],
    ) -> Iterator[tuple[int, dict[int, str]]]:
        try:
            stream = archive.open(sheet_path, "r")
        except KeyError as exc:
            raise SpreadsheetError(f"Worksheet part missing: {sheet_path}") from exc
        with stream:
            row_seq = 0
            for _event, elem in ET.iterparse(stream, events=("end",)):
                if self._local_tag(elem.tag) != "row":
                    continue
                row_seq += 1
                row_number = int(elem.attrib.get("r", row_seq))
                row_map: dict[int, str] = {}
                cell_seq = 0
                for child in list(elem):
                    if self._local_tag(child.tag) != "c":
                        continue
                    cell_seq += 1
                    ref = child.attrib.get("r")
                    col_idx = self._cell_ref_to_col_index(ref) if ref else cell_seq
                    row_map[max(1, col_idx)] = self._cell_value(child, shared_strings)
                if row_map:
                    yield row_number, row_map
                elem.clear()

    def _shared_strings(self, archive: zipfile.ZipFile) -> list[str]:
        if "xl/sharedStrings.xml" not in archive.namelist():
            return []
        values: list[str] = []
        with archive.open("xl/sharedStrings.xml", "r") as stream:
            for _event, elem in ET.iterparse(stream, events=("end",)):
                if self._local_tag(elem.tag) != "si":
                    continue
                values.append(self._joined_text(elem))
                elem.clear()
        return values

    @classmethod
    def _cell_value(cls, cell_node: ET.Element, shared_strings: list[str]) -> str:
        cell_type = (cell_node.attrib.get("t") or "").strip().lower()
        if cell_type == "inlinestr":
            for child in list(cell_node):
                if cls._local_tag(child.tag) == "is":
                    return cls._joined_text(child)
        value_text = ""
        for child in list(cell_node):
            if cls._local_tag(child.tag) == "v":
                value_text = (child.text or "").strip()
                break
        if cell_type == "s":
            try:
                idx = int(value_text)
            except ValueError:
                return value_text
            if 0 <= idx < len(shared_strings):
                return shared_strings[idx]
        return value_text

    @staticmethod
    def _cell_ref_to_col_index(cell_ref: str | None) -> int:
        if not cell_ref:
            return 0
        letters = "".join(ch for ch in str(cell_ref) if ch.isalpha()).upper()
        if not letters:
            return 0
        total = 0
        for ch in letters:
            total = total * 26 + (ord(ch) - ord("A") + 1)
        return total

    @staticmethod
    def _local_tag(tag: str) -> str:
        if "}" in tag:
            return tag.split("}", 1)[1]
        return tag

    @staticmethod
    def _joined_text(node: ET.Element) -> str:
        # Rich-text runs are concatenated verbatim; whitespace is significant in cell text.
        return "".join(str(chunk) for chunk in node.itertext())
