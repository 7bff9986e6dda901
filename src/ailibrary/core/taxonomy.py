"""Fixed option sets and lookup tables for the resource catalog.

Everything here is immutable data. The normalizer and classifiers take a
``Taxonomy`` argument so tests and callers can swap tables without touching
module globals; ``DEFAULT_TAXONOMY`` holds the library's own curriculum.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

CONTENT_TYPES = ("Article", "Video", "Tutorial", "Documentation", "Tool", "Course")
TOPICS = (
    "AI Fundamentals",
    "Prompt Engineering",
    "Workflow Automation",
    "Agent Development",
    "AI-Assisted Coding",
    "Implementation Strategy",
    "Platform Deep-Dives",
    "Applied Use Cases",
)
SKILL_LEVELS = ("Beginner", "Intermediate", "Advanced")
MODALITIES = ("Read/Watch", "Hands-On", "Discussion", "Mixed")
STATUSES = ("To Review", "Core", "Supplemental", "Archive")
WEEKS = ("Week 1", "Week 2", "Week 3", "Week 4", "Week 5", "Week 6", "Ongoing", "Optional")

ENUM_OPTIONS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "content_type": CONTENT_TYPES,
        "primary_topic": TOPICS,
        "skill_level": SKILL_LEVELS,
        "learning_modality": MODALITIES,
        "status_priority": STATUSES,
        "week_suggested": WEEKS,
    }
)

DEFAULT_TOPIC = "AI Fundamentals"
DEFAULT_WEEK = "Week 1"
DEFAULT_STAGE = "Start"
DEFAULT_RATING = 3
MIN_RATING = 1
MAX_RATING = 5


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


_CATEGORY_MAP = {
    "Foundations & Mental Models": "AI Fundamentals",
    "Developer Tooling": "AI-Assisted Coding",
    "Systems & Architecture": "Platform Deep-Dives",
    "Product / Process Thinking": "Implementation Strategy",
    "AI Agents & Automation": "Agent Development",
    "Prompting & Context Engineering": "Prompt Engineering",
    "Ecosystem & Industry Signals": "Implementation Strategy",
    "Community & Practitioner Insight": "Applied Use Cases",
    "Productivity & Knowledge Work": "Implementation Strategy",
}

# Keys are the literal stage labels found in the source spreadsheet, typos included.
_STAGE_TO_WEEK = {
    "Start": "Week 1",
    "Start-Medium": "Week 2",
    "Start-Mid": "Week 2",
    "Medium": "Week 3",
    "Middle": "Week 3",
    "Mid": "Week 3",
    "Start Tech pro - Normal Middle optional": "Week 2",
    "Start - Medium": "Week 2",
    "Start Normal / Tech non essential extra": "Week 1",
    "Start Normal / tech non essential Extra": "Week 1",
    "Start Tech / Start Middle Normal": "Week 2",
    "Start-medium - Tech / Advance nomal": "Week 3",
    "Star-Mid": "Week 2",
    "Extra Tips": "Optional",
    "Extra - Good Practice": "Optional",
    "Extra not Essential": "Optional",
    "Nice extra tool": "Optional",
    "-": "Week 1",
}

_TOOL_KEYWORDS = (
    ("Claude", ("claude",)),
    ("Cursor", ("cursor",)),
    ("Make", ("make.com", "make")),
    ("Zapier", ("zapier",)),
    ("n8n", ("n8n",)),
    ("Figma", ("figma",)),
    ("Notion", ("notion",)),
)

_TIME_BY_CONTENT_TYPE = {
    "Video": "30-45min",
    "Tutorial": "1-2hrs",
    "Documentation": "20-30min",
    "Course": "2-4hrs",
}

_TAGS_BY_TOPIC = {
    "AI Fundamentals": "Learning, Understanding",
    "Prompt Engineering": "Prompting, Optimization",
    "Workflow Automation": "Automation, Integration",
    "Agent Development": "Agent Building, Automation",
    "AI-Assisted Coding": "Coding, Development",
    "Implementation Strategy": "Strategy, Planning",
    "Platform Deep-Dives": "Tools, Platforms",
    "Applied Use Cases": "Examples, Case Studies",
}

_MODALITY_BY_CONTENT_TYPE = {"Tutorial": "Hands-On"}


@dataclass(frozen=True)
class Taxonomy:
    category_map: Mapping[str, str] = field(default_factory=lambda: _frozen(_CATEGORY_MAP))
    stage_to_week: Mapping[str, str] = field(default_factory=lambda: _frozen(_STAGE_TO_WEEK))
    tool_keywords: tuple[tuple[str, tuple[str, ...]], ...] = _TOOL_KEYWORDS
    time_by_content_type: Mapping[str, str] = field(default_factory=lambda: _frozen(_TIME_BY_CONTENT_TYPE))
    tags_by_topic: Mapping[str, str] = field(default_factory=lambda: _frozen(_TAGS_BY_TOPIC))
    modality_by_content_type: Mapping[str, str] = field(
        default_factory=lambda: _frozen(_MODALITY_BY_CONTENT_TYPE)
    )
    video_hosts: tuple[str, ...] = ("youtube.com", "youtu.be")
    code_hosts: tuple[str, ...] = ("github.com",)
    documentation_markers: tuple[str, ...] = ("docs.", "documentation")
    intermediate_stage_markers: tuple[str, ...] = ("Medium", "Middle", "Mid")
    advanced_stage_markers: tuple[str, ...] = ("Advance", "Advanced")
    rating_sentinels: frozenset[str] = frozenset({"Verlo", "N/A", "TBR", "no se"})
    default_topic: str = DEFAULT_TOPIC
    default_week: str = DEFAULT_WEEK
    default_time: str = "15-20min"
    default_tags: str = "General"
    default_tools: str = "General"
    default_modality: str = "Read/Watch"


DEFAULT_TAXONOMY = Taxonomy()
