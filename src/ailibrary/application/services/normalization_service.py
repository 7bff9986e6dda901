from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol, Sequence

from ailibrary.core.classifiers import (
    determine_tools,
    estimate_time,
    generate_use_case_tags,
    guess_content_type,
    learning_modality_for,
    parse_rating,
    skill_level_for_stage,
    status_for_rating,
)
from ailibrary.core.taxonomy import DEFAULT_RATING, DEFAULT_STAGE, DEFAULT_TAXONOMY, Taxonomy
from ailibrary.domain.models.resource import Resource

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LegacyRow:
    name: str
    link: str
    category: str
    stage: str
    rating: object
    description: str


class FieldResolver(Protocol):
    def resolve(self, row: Any) -> LegacyRow: ...


def _cell_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class AliasFieldResolver:
    """Read legacy fields from header-keyed rows, trying each alias in order.

    Spreadsheet exports rename and re-encode headers between versions, so the
    first alias with a non-empty value wins.
    """

    DEFAULT_ALIASES: Mapping[str, tuple[str, ...]] = {
        "name": ("Name", "name", "Title", "title"),
        "link": ("Link", "link", "URL", "url"),
        "category": ("Category", "category"),
        "stage": ("Course creation - Stage", "Stage", "stage"),
        # The second spelling is the UTF-8 en dash decoded as cp1252.
        "rating": ("Nico Rating (1–5)", "Nico Rating (1â€“5)", "Nico Rating", "Rating"),
        "description": ("Small description", "Description", "description"),
    }

    def __init__(self, aliases: Mapping[str, Sequence[str]] | None = None) -> None:
        merged = dict(self.DEFAULT_ALIASES)
        if aliases:
            merged.update({key: tuple(value) for key, value in aliases.items()})
        self.aliases = merged

    def resolve(self, row: Mapping[str, Any]) -> LegacyRow:
        return LegacyRow(
            name=_cell_text(self._first(row, "name")),
            link=_cell_text(self._first(row, "link")),
            category=_cell_text(self._first(row, "category")),
            stage=_cell_text(self._first(row, "stage")),
            rating=self._first(row, "rating"),
            description=_cell_text(self._first(row, "description")),
        )

    def _first(self, row: Mapping[str, Any], field_name: str) -> object:
        for alias in self.aliases.get(field_name, ()):
            value = row.get(alias)
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            return value
        return None


class PositionFieldResolver:
    """Read legacy fields from fixed worksheet columns A-J when headers are unreliable."""

    ORIGIN = 0
    DATE = 1
    NAME = 2
    LINK = 3
    DESCRIPTION = 4
    ONE_LINER = 5
    CAMI_RATING = 6
    NICO_RATING = 7
    CATEGORY = 8
    STAGE = 9

    def resolve(self, row: Sequence[Any]) -> LegacyRow:
        return LegacyRow(
            name=_cell_text(self._cell(row, self.NAME)),
            link=_cell_text(self._cell(row, self.LINK)),
            category=_cell_text(self._cell(row, self.CATEGORY)),
            stage=_cell_text(self._cell(row, self.STAGE)),
            rating=self._cell(row, self.NICO_RATING),
            description=_cell_text(self._cell(row, self.DESCRIPTION)),
        )

    @staticmethod
    def _cell(row: Sequence[Any], idx: int) -> object:
        if idx < 0 or idx >= len(row):
            return None
        return row[idx]


class RowNormalizer:
    def __init__(self, resolver: FieldResolver, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> None:
        self.resolver = resolver
        self.taxonomy = taxonomy

    def normalize(self, row: Any) -> Resource | None:
        legacy = self.resolver.resolve(row)
        name = legacy.name.strip()
        link = legacy.link.strip()
        if not name or not link:
            return None
        if name == "Name" or link == "Link":
            return None

        taxonomy = self.taxonomy
        stage = legacy.stage if legacy.stage.strip() else DEFAULT_STAGE
        rating = parse_rating(legacy.rating, taxonomy, default=DEFAULT_RATING)
        primary_topic = taxonomy.category_map.get(legacy.category, taxonomy.default_topic)
        content_type = guess_content_type(link, name, taxonomy)

        return Resource(
            title=name,
            link=link,
            content_type=content_type,
            primary_topic=primary_topic,
            skill_level=skill_level_for_stage(stage, taxonomy),
            tools_covered=determine_tools(name, link, taxonomy),
            learning_modality=learning_modality_for(content_type, taxonomy),
            time_investment=estimate_time(content_type, taxonomy),
            quality_rating=rating,
            relevance_score=rating,
            status_priority=status_for_rating(rating),
            use_case_tags=generate_use_case_tags(primary_topic, taxonomy),
            your_notes=legacy.description.strip(),
            week_suggested=taxonomy.stage_to_week.get(stage, taxonomy.default_week),
        )

    def normalize_rows(self, rows: Iterable[Any]) -> list[Resource]:
        out: list[Resource] = []
        skipped = 0
        for row in rows:
            resource = self.normalize(row)
            if resource is None:
                skipped += 1
                continue
            out.append(resource)
        logger.debug("Normalized %d rows, skipped %d", len(out), skipped)
        return out


def header_normalizer(taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> RowNormalizer:
    return RowNormalizer(AliasFieldResolver(), taxonomy)


def position_normalizer(taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> RowNormalizer:
    return RowNormalizer(PositionFieldResolver(), taxonomy)
