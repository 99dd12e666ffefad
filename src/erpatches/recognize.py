"""Classify single lines of patch note text.

Every regex the extractor relies on lives here, behind ``recognize``. When
the notes drift to a new authoring format, add a pattern to the relevant
table rather than editing the extractor.
"""

import re
from dataclasses import dataclass

from .dom import collapse

ARROW = "→"

# Lines shorter than this are formatting debris ("-", "Q", stray labels)
MIN_LINE_LENGTH = 5
# Free-text lines must be longer than this to count as a change
MIN_DESCRIPTION_LENGTH = 10
MIN_COMMENT_LENGTH = 10

# "제압부(Q)", "절단 베기(쌍검 E)", "모노호시자오(R) - 츠바메가에시(R2)", "하이라이트(패시브)"
SKILL_HEADER_PATTERNS = (
    re.compile(r"^([^→]+\((?:[가-힣A-Za-z\s-]*)?[QWERP패시브]\d?\)(?:\s*-\s*[^→]+\([QWERP]\d?\))?)"),
)

# Whole-line headers; never a change on their own
HEADER_ONLY_PATTERNS = (
    re.compile(r"^[^(→]+\([QWERP]\)$"),
    re.compile(r"^[^(→]+\([가-힣A-Za-z\s-]+[QWERP]\d?\)$"),
    re.compile(r"^[^(→]+\(패시브\)$"),
    re.compile(r"^[^(→]+\([QWERP]\)\s*-\s*[^(→]+\([QWERP]\d?\)$"),
)

# "qualifier value → new value": the last whitespace-free token before the arrow is the value
ARROW_SPLIT_PATTERNS = (
    re.compile(r"^(.+?)\s+([^\s→]+(?:\([^)]*\))?(?:[^→]*?))\s*→\s*(.+)$"),
)

# Paragraph openings that mark a skill line rather than a developer comment
COMMENT_EXCLUDE_PATTERNS = (
    re.compile(r"^[^(]+\([QWERP]\)"),
    re.compile(r"^[^(]+\(패시브\)"),
    re.compile(r"^\d"),
)

NEW_MARKER = re.compile(r"신규[^가-힣]")


@dataclass(frozen=True)
class Token:
    """Base for recognized lines."""

    text: str


@dataclass(frozen=True)
class SkillHeader(Token):
    """A skill or slot name that scopes the following changes."""

    target: str


@dataclass(frozen=True)
class ArrowStatement(Token):
    """``stat before → after`` split into its three parts."""

    stat: str
    before: str
    after: str


@dataclass(frozen=True)
class Description(Token):
    """A free-text change line."""

    is_new: bool = False
    is_removed: bool = False


@dataclass(frozen=True)
class Unmatched(Token):
    """A line with an arrow that no split pattern accepts."""


@dataclass(frozen=True)
class Noise(Token):
    """Too short, empty, or a header with nothing to record."""


def match_skill_header(text: str) -> str | None:
    """Return the header prefix of ``text`` if it opens with a skill name."""
    for pattern in SKILL_HEADER_PATTERNS:
        m = pattern.match(text)
        if m:
            return m.group(0).strip()
    return None


def is_header_only(text: str) -> bool:
    return any(p.match(text) for p in HEADER_ONLY_PATTERNS)


def split_arrow(text: str) -> tuple[str, str, str] | None:
    """Split an arrow line into (stat, before, after), or None if no pattern fits."""
    for pattern in ARROW_SPLIT_PATTERNS:
        m = pattern.match(text)
        if m:
            return m.group(1).strip(), m.group(2).strip(), m.group(3).strip()
    return None


def is_comment_line(text: str) -> bool:
    """Check whether a paragraph reads as developer commentary."""
    return (
        ARROW not in text
        and len(text) > MIN_COMMENT_LENGTH
        and not any(p.match(text) for p in COMMENT_EXCLUDE_PATTERNS)
    )


def recognize(text: str, whole_line_header: bool = False) -> Token:
    """Recognize one list line.

    Args:
        text: Raw line text (whitespace is collapsed here)
        whole_line_header: Only accept a skill header that spans the whole line.
            Nested items use this so a long description that happens to open
            with a skill name is kept as a change.

    Returns:
        The token for the line
    """
    text = collapse(text)
    if len(text) < MIN_LINE_LENGTH:
        return Noise(text)

    has_arrow = ARROW in text

    header = match_skill_header(text)
    if header and not has_arrow and (not whole_line_header or header == text):
        return SkillHeader(text, target=header)

    if is_header_only(text):
        return Noise(text)

    if has_arrow:
        parts = split_arrow(text)
        if parts is None:
            return Unmatched(text)
        stat, before, after = parts
        return ArrowStatement(text, stat=stat, before=before, after=after)

    if len(text) > MIN_DESCRIPTION_LENGTH:
        return Description(
            text,
            is_new="(신규)" in text or bool(NEW_MARKER.search(text)),
            is_removed="(삭제)" in text or "삭제됩니다" in text,
        )

    return Noise(text)
