from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterator, Sequence

from ailibrary.core.config import DEFAULT_IMPORT_BATCH_SIZE
from ailibrary.core.errors import DatastoreError, ValidationError
from ailibrary.domain.models.resource import Resource
from ailibrary.infrastructure.db.store import ResourceStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BatchOutcome:
    batch_number: int
    size: int
    inserted: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class BatchImportReport:
    total: int
    succeeded: int
    batches: list[BatchOutcome] = field(default_factory=list)
    inserted: list[Resource] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    @property
    def failed_batches(self) -> list[BatchOutcome]:
        return [b for b in self.batches if not b.ok]


def chunked(items: Sequence[Resource], size: int) -> Iterator[Sequence[Resource]]:
    for start in range(0, len(items), size):
        yield items[start : start + size]


class BatchImporter:
    """Insert records in fixed-size batches, one round trip at a time.

    A failed batch is logged and skipped; earlier batches stay committed and
    later batches are still attempted.
    """

    def __init__(
        self,
        store: ResourceStore,
        batch_size: int = DEFAULT_IMPORT_BATCH_SIZE,
        on_batch: Callable[[BatchOutcome], None] | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValidationError(f"Batch size must be positive, got {batch_size}")
        self.store = store
        self.batch_size = batch_size
        self.on_batch = on_batch

    def run(self, resources: Sequence[Resource]) -> BatchImportReport:
        report = BatchImportReport(total=len(resources), succeeded=0)
        for number, batch in enumerate(chunked(resources, self.batch_size), start=1):
            try:
                inserted = self.store.insert_many(batch)
            except DatastoreError as exc:
                logger.error("Error importing batch %d: %s", number, exc)
                outcome = BatchOutcome(batch_number=number, size=len(batch), inserted=0, error=str(exc))
            else:
                report.succeeded += len(batch)
                report.inserted.extend(inserted)
                outcome = BatchOutcome(batch_number=number, size=len(batch), inserted=len(inserted))
                logger.info("Imported batch %d (%d resources)", number, len(batch))
            report.batches.append(outcome)
            if self.on_batch is not None:
                self.on_batch(outcome)
        return report
