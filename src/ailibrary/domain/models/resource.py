from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

RESOURCE_FIELDS = (
    "title",
    "link",
    "content_type",
    "primary_topic",
    "skill_level",
    "tools_covered",
    "learning_modality",
    "time_investment",
    "quality_rating",
    "relevance_score",
    "status_priority",
    "use_case_tags",
    "your_notes",
    "week_suggested",
)
INTEGER_FIELDS = frozenset({"quality_rating", "relevance_score"})


@dataclass(slots=True)
class Resource:
    title: str
    link: str
    content_type: str | None = "Article"
    primary_topic: str | None = "AI Fundamentals"
    skill_level: str | None = "Beginner"
    tools_covered: str | None = ""
    learning_modality: str | None = "Read/Watch"
    time_investment: str | None = ""
    quality_rating: int | None = None
    relevance_score: int | None = None
    status_priority: str | None = "To Review"
    use_case_tags: str | None = ""
    your_notes: str | None = ""
    week_suggested: str | None = "Week 1"
    id: int | None = None

    def to_record(self) -> dict[str, Any]:
        """Return the 14 canonical columns; ``id`` is owned by the datastore and never included."""
        return {name: getattr(self, name) for name in RESOURCE_FIELDS}

    def to_dict(self) -> dict[str, Any]:
        payload = {"id": self.id}
        payload.update(self.to_record())
        return payload

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Resource":
        known = {f.name for f in fields(cls)}
        values = {key: row[key] for key in row.keys() if key in known}
        values.setdefault("title", "")
        values.setdefault("link", "")
        return cls(**values)
