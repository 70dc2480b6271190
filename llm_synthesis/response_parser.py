"""Heuristic parsing of free-text analysis responses.

The model's answer has no guaranteed grammar. Sections are located by
their headings, using the next known heading as the stop boundary, and
bullet-like lines are pulled out of each section. When no key insights
can be located the whole response is mined for bullets instead.
"""

import logging
import re
from typing import List

from llm_synthesis.schema import ParsedAnalysis

logger = logging.getLogger(__name__)

MAX_SECTION_POINTS = 8
MAX_FALLBACK_POINTS = 15
_FALLBACK_INSIGHTS = 8
_FALLBACK_TRENDS = 6

MIN_POINT_LENGTH = 15
MAX_POINT_LENGTH = 500

_SUMMARY_PATTERN = re.compile(
    r"(?:Executive Summary|Summary)[:\s]*\n([\s\S]*?)"
    r"(?=\n\s*(?:\d+\.|\*\*(?:Key Insights|Insights|Trends|Performance|Financial|Recommendations)))",
    re.IGNORECASE,
)
_INSIGHTS_PATTERN = re.compile(
    r"(?:Key Insights|Insights)[:\s]*\n([\s\S]*?)"
    r"(?=\n\s*(?:\d+\.|\*\*(?:Trends|Performance|Financial|Recommendations)))",
    re.IGNORECASE,
)
_TRENDS_PATTERN = re.compile(
    r"(?:Trends|Patterns|Performance Assessment|Financial Analysis)[\s\S]*?\n([\s\S]*?)"
    r"(?=\n\s*(?:\d+\.|\*\*(?:Strategic|Recommendations))|\Z)",
    re.IGNORECASE,
)
_RECOMMENDATIONS_PATTERN = re.compile(
    r"(?:Strategic Recommendations|Recommendations)[:\s]*\n([\s\S]*?)\Z",
    re.IGNORECASE,
)

_BULLET_MARKER = re.compile(r"^[-•*+→▶]\s*")
_NUMBER_MARKER = re.compile(r"^\d+\.\s*")
_LETTER_MARKER = re.compile(r"^[a-zA-Z]\.\s*")
_BOLD_LINE = re.compile(r"^\*\*.*\*\*$")
_MARKDOWN_HEADING = re.compile(r"^#{1,6}\s")


def _strip_marker(line: str) -> str:
    line = _BULLET_MARKER.sub("", line, count=1)
    line = _NUMBER_MARKER.sub("", line, count=1)
    line = _LETTER_MARKER.sub("", line, count=1)
    return line.strip()


def _is_candidate(line: str) -> bool:
    return (
        len(line) > MIN_POINT_LENGTH
        and not _BOLD_LINE.match(line)
        and not _MARKDOWN_HEADING.match(line)
        and "**" not in line
        and len(line) < MAX_POINT_LENGTH
    )


def extract_bullet_points(text: str, max_points: int = MAX_SECTION_POINTS) -> List[str]:
    """Extract bullet-like lines from a block of text.

    Args:
        text: Free text, possibly with markdown bullets and headings.
        max_points: Maximum number of points returned.

    Returns:
        Cleaned lines in their original order. Every item is longer than
        15 characters and contains no bold markers.
    """
    if not text:
        return []

    points: List[str] = []
    for raw_line in text.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        line = _strip_marker(line)
        if not _is_candidate(line):
            continue
        line = line.replace("**", "").strip()
        if len(line) > MIN_POINT_LENGTH:
            points.append(line)
        if len(points) >= max_points:
            break
    return points[:max_points]


def parse_analysis_response(text: str) -> ParsedAnalysis:
    """Split a model response into summary, insights, trends and recommendations.

    Never raises: unexpected failures are logged and whatever was
    recovered so far is returned.
    """
    result = ParsedAnalysis()
    if not isinstance(text, str) or not text.strip():
        return result

    try:
        summary_match = _SUMMARY_PATTERN.search(text)
        if summary_match:
            result.summary = summary_match.group(1).strip()

        insights_match = _INSIGHTS_PATTERN.search(text)
        if insights_match:
            result.key_insights = extract_bullet_points(insights_match.group(1), MAX_SECTION_POINTS)

        trends_match = _TRENDS_PATTERN.search(text)
        if trends_match:
            result.trends = extract_bullet_points(trends_match.group(1), MAX_SECTION_POINTS)

        recommendations_match = _RECOMMENDATIONS_PATTERN.search(text)
        if recommendations_match:
            result.recommendations = extract_bullet_points(
                recommendations_match.group(1), MAX_SECTION_POINTS
            )

        if not result.key_insights:
            all_points = extract_bullet_points(text, MAX_FALLBACK_POINTS)
            result.key_insights = all_points[:_FALLBACK_INSIGHTS]
            result.trends = all_points[_FALLBACK_INSIGHTS:_FALLBACK_INSIGHTS + _FALLBACK_TRENDS]
            if len(all_points) > _FALLBACK_INSIGHTS + _FALLBACK_TRENDS:
                result.recommendations = all_points[_FALLBACK_INSIGHTS + _FALLBACK_TRENDS:]
    except (re.error, TypeError, ValueError) as exc:
        logger.warning("Error parsing analysis response structure: %s", exc)

    return result
