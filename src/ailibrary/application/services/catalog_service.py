from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ailibrary.core.errors import DatastoreError, ResourceNotFoundError, ValidationError
from ailibrary.core.taxonomy import ENUM_OPTIONS, WEEKS
from ailibrary.domain.models.resource import INTEGER_FIELDS, RESOURCE_FIELDS, Resource
from ailibrary.infrastructure.db.store import ResourceStore
from ailibrary.infrastructure.importers.csv_resource_importer import (
    parse_resource_csv,
    render_resource_csv,
    render_template_csv,
)

logger = logging.getLogger(__name__)

FILTER_FIELDS = ("content_type", "primary_topic", "skill_level", "week_suggested", "status_priority")
SEARCH_FIELDS = ("title", "your_notes", "use_case_tags")


@dataclass(slots=True)
class CatalogStats:
    total: int
    core: int
    to_review: int
    avg_quality: str
    avg_relevance: str


@dataclass(slots=True)
class ResourceFilter:
    search: str = ""
    content_type: str = ""
    primary_topic: str = ""
    skill_level: str = ""
    week_suggested: str = ""
    status_priority: str = ""

    def matches(self, resource: Resource) -> bool:
        term = self.search.strip().lower()
        if term and not any(term in str(getattr(resource, name) or "").lower() for name in SEARCH_FIELDS):
            return False
        for name in FILTER_FIELDS:
            expected = getattr(self, name)
            if expected and getattr(resource, name) != expected:
                return False
        return True


@dataclass(slots=True)
class CatalogSession:
    resources: list[Resource] = field(default_factory=list)
    pending_import: list[Resource] = field(default_factory=list)


def _average(values: list[int]) -> str:
    if not values:
        return "N/A"
    return f"{sum(values) / len(values):.1f}"


def validate_fields(fields: Mapping[str, Any], *, partial: bool = False) -> dict[str, Any]:
    """Coerce and check resource fields coming from a form or API payload.

    Unknown keys (``id`` included) are dropped. With ``partial`` only the
    supplied keys are validated; otherwise title and link are required.
    """
    cleaned: dict[str, Any] = {}
    for name in RESOURCE_FIELDS:
        if name not in fields:
            continue
        value = fields[name]
        if name in INTEGER_FIELDS:
            if value in (None, ""):
                cleaned[name] = None
                continue
            try:
                number = int(value)
            except (TypeError, ValueError) as exc:
                raise ValidationError(f"{name} must be an integer between 1 and 5") from exc
            if number < 1 or number > 5:
                raise ValidationError(f"{name} must be an integer between 1 and 5")
            cleaned[name] = number
            continue
        text = None if value is None else str(value).strip()
        options = ENUM_OPTIONS.get(name)
        if options is not None and text and text not in options:
            raise ValidationError(f"Invalid {name}: {text!r}. Expected one of: {', '.join(options)}")
        if options is not None and not text:
            text = None
        cleaned[name] = text

    for required in ("title", "link"):
        if required in cleaned or not partial:
            if not cleaned.get(required):
                raise ValidationError(f"{required} is required")
    return cleaned


class CatalogService:
    """In-memory view of the ``resources`` table for one interactive session.

    Every mutation goes to the store first; the in-memory list only changes
    after the store confirms, so a failed call leaves the session untouched.
    """

    def __init__(self, store: ResourceStore, session: CatalogSession | None = None) -> None:
        self.store = store
        self.session = session or CatalogSession()

    @property
    def resources(self) -> list[Resource]:
        return self.session.resources

    @property
    def pending_import(self) -> list[Resource]:
        return self.session.pending_import

    def load(self) -> list[Resource]:
        self.session.resources = self.store.list_all()
        return self.session.resources

    def get(self, resource_id: int) -> Resource:
        for resource in self.session.resources:
            if resource.id == resource_id:
                return resource
        raise ResourceNotFoundError(f"Resource not found: {resource_id}")

    def add(self, fields: Mapping[str, Any]) -> Resource:
        cleaned = validate_fields(fields)
        draft = Resource(**cleaned)
        inserted = self.store.insert_many([draft])
        if not inserted:
            raise DatastoreError("Datastore returned no row for the new resource")
        self.session.resources.append(inserted[0])
        logger.info("Added resource %s: %s", inserted[0].id, inserted[0].title)
        return inserted[0]

    def edit(self, resource_id: int, fields: Mapping[str, Any]) -> Resource:
        self.get(resource_id)
        cleaned = validate_fields(fields, partial=True)
        updated = self.store.update(resource_id, cleaned)
        self.session.resources = [updated if r.id == resource_id else r for r in self.session.resources]
        return updated

    def delete(self, resource_id: int) -> None:
        self.get(resource_id)
        self.store.delete(resource_id)
        self.session.resources = [r for r in self.session.resources if r.id != resource_id]
        logger.info("Deleted resource %s", resource_id)

    def filter(self, criteria: ResourceFilter | None = None) -> list[Resource]:
        criteria = criteria or ResourceFilter()
        return [r for r in self.session.resources if criteria.matches(r)]

    def weekly(self) -> dict[str, list[Resource]]:
        return {week: [r for r in self.session.resources if r.week_suggested == week] for week in WEEKS}

    def stats(self) -> CatalogStats:
        resources = self.session.resources
        return CatalogStats(
            total=len(resources),
            core=sum(1 for r in resources if r.status_priority == "Core"),
            to_review=sum(1 for r in resources if r.status_priority == "To Review"),
            avg_quality=_average([r.quality_rating for r in resources if r.quality_rating]),
            avg_relevance=_average([r.relevance_score for r in resources if r.relevance_score]),
        )

    def export_csv(self) -> str:
        return render_resource_csv(self.session.resources)

    @staticmethod
    def template_csv() -> str:
        return render_template_csv()

    def preview_import(self, csv_text: str) -> list[Resource]:
        """Parse CSV text into a pending preview; nothing is written until ``confirm_import``."""
        parsed = parse_resource_csv(csv_text)
        self.session.pending_import = parsed
        return parsed

    def confirm_import(self) -> list[Resource]:
        pending = self.session.pending_import
        if not pending:
            raise ValidationError("No import preview to confirm")
        inserted = self.store.insert_many(pending)
        self.session.resources.extend(inserted)
        self.session.pending_import = []
        logger.info("Imported %d resources from CSV preview", len(inserted))
        return inserted

    def cancel_import(self) -> None:
        self.session.pending_import = []
