"""Parse patch note documents into per-character patch entries.

Flow per document: locate the character section, segment it into character
blocks, extract raw lines, normalize and classify them, then apply the
manual override pass. Characters whose block yields no changes are left out.
"""

import re
from dataclasses import dataclass, field

from .aggregate import add_patch_entry
from .classify import overall_change_with_comment
from .dom import Node
from .extract import RawChange, RawNumeric, extract_block
from .models import Change, Character, DescriptionChange, PatchEntry, PatchNote
from .normalize import build_arrow_change
from .overrides import ChangeOverride, apply_overrides_to_entry
from .section import locate_character_section
from .segment import segment_characters

VERSION_PATTERN = re.compile(r"(?:^|\s|-)(\d{1,2}\.\d{1,2}[a-z]?)(?:\s|$|-|패치)", re.IGNORECASE)
HOTFIX_VERSION_PATTERN = re.compile(r"(\d+\.\d+[a-z]?)\s*핫픽스", re.IGNORECASE)


@dataclass
class ParsedCharacter:
    """One character's changes from one document."""

    name: str
    dev_comment: str | None
    changes: list[Change] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)


@dataclass
class IngestResult:
    """What ingesting one document did to the character set."""

    added: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    dropped: dict[str, list[str]] = field(default_factory=dict)


def extract_patch_version(title: str) -> str:
    """Short version from a patch note title.

    Accepts "1.2", "1.2a", "8.0 패치" and "... 1.2 핫픽스"; anything else
    returns the title unchanged.
    """
    m = VERSION_PATTERN.search(title)
    if m:
        return m.group(1)
    m = HOTFIX_VERSION_PATTERN.search(title)
    if m:
        return m.group(1)
    return title


def patch_date(created_at: str) -> str:
    """ISO day of a timestamp."""
    return created_at.split("T")[0]


def build_change(raw: RawChange) -> Change:
    """Turn an extracted line into a typed, classified change."""
    if isinstance(raw, RawNumeric):
        return build_arrow_change(raw.target, raw.stat, raw.before, raw.after)
    if raw.is_new:
        category = "added"
    elif raw.is_removed:
        category = "removed"
    else:
        category = "mechanic"
    return DescriptionChange(
        target=raw.target, description=raw.description, change_type="mixed", change_category=category
    )


def parse_document(root: Node | None) -> list[ParsedCharacter]:
    """Parse a patch note content tree.

    Args:
        root: Article content root; None (no article body) yields nothing

    Returns:
        Characters with at least one change, in document order
    """
    if root is None:
        return []

    parsed = []
    for block in segment_characters(locate_character_section(root)):
        extracted = extract_block(block)
        if not extracted.changes:
            continue
        parsed.append(
            ParsedCharacter(
                name=block.name,
                dev_comment=extracted.dev_comment,
                changes=[build_change(raw) for raw in extracted.changes],
                dropped=extracted.dropped,
            )
        )
    return parsed


def mentioned_characters(root: Node | None) -> list[str]:
    """Roster characters named in a document's character section, with or without changes."""
    if root is None:
        return []
    names: list[str] = []
    for block in segment_characters(locate_character_section(root)):
        if block.name not in names:
            names.append(block.name)
    return names


def build_patch_entry(
    note: PatchNote, parsed: ParsedCharacter, overrides: list[ChangeOverride] | None = None
) -> PatchEntry:
    """Create the history entry for one parsed character.

    The streak is left at 0; it is stamped when the character is recomputed.
    """
    entry = PatchEntry(
        patch_id=note.id,
        patch_version=extract_patch_version(note.title),
        patch_date=patch_date(note.created_at),
        overall_change=overall_change_with_comment(parsed.changes, parsed.dev_comment),
        dev_comment=parsed.dev_comment,
        changes=parsed.changes,
    )
    if overrides:
        entry, _ = apply_overrides_to_entry(entry, parsed.name, overrides)
    return entry


def ingest_document(
    characters: dict[str, Character],
    note: PatchNote,
    parsed: list[ParsedCharacter],
    overrides: list[ChangeOverride] | None = None,
    only: set[str] | None = None,
) -> IngestResult:
    """Add one document's entries to the character set in place.

    Characters are created on first mention. An entry for a patch the
    character already has is skipped, so re-running is safe.

    Args:
        characters: Loaded characters by name, updated in place
        note: Source patch note
        parsed: Output of ``parse_document``
        overrides: Manual corrections to apply to new entries
        only: Restrict to these character names

    Returns:
        Names added, created and skipped, plus dropped lines per character
    """
    result = IngestResult()
    for item in parsed:
        if only is not None and item.name not in only:
            continue
        if item.dropped:
            result.dropped[item.name] = item.dropped

        character = characters.get(item.name)
        if character is None:
            character = Character(name=item.name, name_en=item.name)
            result.created.append(item.name)

        character, added = add_patch_entry(character, build_patch_entry(note, item, overrides))
        characters[item.name] = character
        if added:
            result.added.append(item.name)
        else:
            result.skipped.append(item.name)
    return result
