from __future__ import annotations

import math
import re

from ailibrary.core.taxonomy import DEFAULT_TAXONOMY, MAX_RATING, MIN_RATING, Taxonomy

_LEADING_NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_LEADING_INT_RE = re.compile(r"^[+-]?\d+")


def guess_content_type(link: str | None, name: str | None, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str:
    """Classify a resource from its link host first, then from words in its name.

    Order matters: a YouTube tutorial is a Video, a GitHub course is a Tool.
    """
    url = str(link or "").lower()
    if any(host in url for host in taxonomy.video_hosts):
        return "Video"
    if any(host in url for host in taxonomy.code_hosts):
        return "Tool"
    if any(marker in url for marker in taxonomy.documentation_markers):
        return "Documentation"
    title = str(name or "").lower()
    if "tutorial" in title:
        return "Tutorial"
    if "course" in title:
        return "Course"
    return "Article"


def determine_tools(name: str | None, link: str | None, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str:
    text = f"{name or ''} {link or ''}".lower()
    tools = [label for label, needles in taxonomy.tool_keywords if any(needle in text for needle in needles)]
    return ", ".join(tools) if tools else taxonomy.default_tools


def estimate_time(content_type: str | None, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str:
    return taxonomy.time_by_content_type.get(str(content_type or ""), taxonomy.default_time)


def generate_use_case_tags(topic: str | None, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str:
    return taxonomy.tags_by_topic.get(str(topic or ""), taxonomy.default_tags)


def learning_modality_for(content_type: str | None, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str:
    return taxonomy.modality_by_content_type.get(str(content_type or ""), taxonomy.default_modality)


def status_for_rating(rating: int | None) -> str:
    if rating is None:
        return "To Review"
    if rating >= 4:
        return "Core"
    if rating >= 3:
        return "Supplemental"
    return "To Review"


def skill_level_for_stage(stage: str | None, taxonomy: Taxonomy = DEFAULT_TAXONOMY) -> str:
    text = str(stage or "")
    # Intermediate markers win when a stage mentions both levels.
    if any(marker in text for marker in taxonomy.intermediate_stage_markers):
        return "Intermediate"
    if any(marker in text for marker in taxonomy.advanced_stage_markers):
        return "Advanced"
    return "Beginner"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_rating(
    raw: object,
    taxonomy: Taxonomy = DEFAULT_TAXONOMY,
    default: int | None = None,
) -> int | None:
    """Parse a legacy spreadsheet rating into an integer between 1 and 5.

    Numeric cells are used as-is; text cells contribute their leading numeric
    prefix ("4.5 stars" -> 5). Sentinel tokens and unparseable text return
    ``default``.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, (int, float)):
        number = float(raw)
    else:
        text = str(raw).strip()
        if not text or text in taxonomy.rating_sentinels:
            return default
        match = _LEADING_NUMBER_RE.match(text)
        if match is None:
            return default
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return default
    return min(MAX_RATING, max(MIN_RATING, round_half_up(number)))


def parse_score(raw: object) -> int | None:
    """Parse an integer score from CSV text; out-of-range or garbage becomes None."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        value = raw
    else:
        match = _LEADING_INT_RE.match(str(raw).strip())
        if match is None:
            return None
        value = int(match.group(0))
    if value < MIN_RATING or value > MAX_RATING:
        return None
    return value
