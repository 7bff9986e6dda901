from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from ailibrary.application.services.batch_import_service import (
    BatchImporter,
    BatchImportReport,
    BatchOutcome,
)
from ailibrary.application.services.normalization_service import (
    header_normalizer,
    position_normalizer,
)
from ailibrary.core.config import DEFAULT_IMPORT_BATCH_SIZE, DEFAULT_IMPORT_DELAY_SECONDS
from ailibrary.core.errors import ImportCancelled, ValidationError
from ailibrary.core.taxonomy import DEFAULT_TAXONOMY, Taxonomy
from ailibrary.domain.models.resource import Resource
from ailibrary.infrastructure.db.store import ResourceStore
from ailibrary.infrastructure.importers.xlsx_reader import XlsxSheetReader

logger = logging.getLogger(__name__)

DEFAULT_WORKBOOK = Path("AI Courses Table.xlsx")
HEADER_MODE = "header"
POSITION_MODE = "position"


@dataclass(slots=True)
class PreparedImport:
    source_path: Path
    mode: str
    sheet_name: str
    sheet_names: list[str]
    rows_seen: int
    columns: list[str]
    sample_rows: list[object] = field(default_factory=list)
    resources: list[Resource] = field(default_factory=list)

    @property
    def first_resource(self) -> Resource | None:
        return self.resources[0] if self.resources else None


@dataclass(slots=True)
class ColumnReport:
    source_path: Path
    sheet_names: list[str]
    row_count: int
    columns: list[str]
    first_row: dict[str, str] | None


class SpreadsheetImportService:
    def __init__(
        self,
        store: ResourceStore | None = None,
        *,
        batch_size: int = DEFAULT_IMPORT_BATCH_SIZE,
        delay_seconds: float = DEFAULT_IMPORT_DELAY_SECONDS,
        taxonomy: Taxonomy = DEFAULT_TAXONOMY,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        self.store = store
        self.batch_size = batch_size
        self.delay_seconds = delay_seconds
        self.taxonomy = taxonomy
        self.sleep = sleep or time.sleep

    def prepare(self, file_path: Path, *, mode: str = HEADER_MODE, skip_rows: int = 1) -> PreparedImport:
        """Read the first sheet and normalize every row; nothing is sent to the datastore."""
        path = file_path.expanduser().resolve()
        reader = XlsxSheetReader(path)
        sheet = reader.read_rows()

        if mode == HEADER_MODE:
            rows: list[object] = list(
                XlsxSheetReader.to_records(sheet.rows, skip_rows=skip_rows, row_numbers=sheet.row_numbers)
            )
            columns = list(rows[0].keys()) if rows else []
            normalizer = header_normalizer(self.taxonomy)
        elif mode == POSITION_MODE:
            rows = list(sheet.rows)
            columns = []
            normalizer = position_normalizer(self.taxonomy)
        else:
            raise ValidationError(f"Unsupported import mode: {mode}")

        resources = normalizer.normalize_rows(rows)
        logger.info("Read %d rows from %s, %d valid resources", len(rows), path.name, len(resources))
        return PreparedImport(
            source_path=path,
            mode=mode,
            sheet_name=sheet.sheet_name,
            sheet_names=sheet.sheet_names,
            rows_seen=len(rows),
            columns=columns,
            sample_rows=rows[:3],
            resources=resources,
        )

    def inspect_columns(self, file_path: Path, *, skip_rows: int = 0) -> ColumnReport:
        path = file_path.expanduser().resolve()
        reader = XlsxSheetReader(path)
        records = reader.read_records(skip_rows=skip_rows)
        return ColumnReport(
            source_path=path,
            sheet_names=reader.sheet_names(),
            row_count=len(records),
            columns=list(records[0].keys()) if records else [],
            first_row=records[0] if records else None,
        )

    def wait_for_operator(self) -> None:
        """Give the operator a window to press Ctrl+C before anything is written."""
        if self.delay_seconds <= 0:
            return
        try:
            self.sleep(self.delay_seconds)
        except KeyboardInterrupt as exc:
            raise ImportCancelled("Import cancelled before any resources were written") from exc

    def commit(
        self,
        prepared: PreparedImport,
        *,
        on_batch: Callable[[BatchOutcome], None] | None = None,
    ) -> BatchImportReport:
        if not prepared.resources:
            return BatchImportReport(total=0, succeeded=0)
        if self.store is None:
            raise ValidationError("No datastore configured for import")
        self.wait_for_operator()
        importer = BatchImporter(self.store, batch_size=self.batch_size, on_batch=on_batch)
        return importer.run(prepared.resources)
