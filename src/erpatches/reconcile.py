"""Compare stored histories against the source and stage corrections.

Three independent checks, all read-then-diff:

- duplicates: more than one entry for a patch id in one history
- missing: a character named in a document has no entry for it
- corrected reparse: a fresh parse that extracts more than what is stored

Corrections are written to an inspectable file first and only applied by an
explicit second step.
"""

import json
from collections import Counter
from pathlib import Path

from pydantic import Field, ValidationError

from .aggregate import PatchNotFoundError, recompute_character, replace_patch_entry
from .classify import overall_change_with_comment
from .models import Change, Character, PatchEntry, PatchNote, StoredModel, utc_now
from .pipeline import ParsedCharacter


class ReconcileError(Exception):
    """Raised when a staged report cannot be read."""


# Duplicates


def find_duplicates(history: list[PatchEntry]) -> dict[int, int]:
    """Patch ids that appear more than once, with their counts."""
    counts = Counter(p.patch_id for p in history)
    return {patch_id: n for patch_id, n in counts.items() if n > 1}


def dedupe_history(history: list[PatchEntry]) -> tuple[list[PatchEntry], int]:
    """Keep the first entry for each patch id.

    Returns:
        (history without duplicates, number of entries removed)
    """
    seen: set[int] = set()
    kept = []
    for entry in history:
        if entry.patch_id in seen:
            continue
        seen.add(entry.patch_id)
        kept.append(entry)
    return kept, len(history) - len(kept)


def dedupe_character(character: Character) -> tuple[Character, int]:
    """Drop duplicate entries and recompute streaks and stats if anything changed."""
    history, removed = dedupe_history(character.patch_history)
    if not removed:
        return character, 0
    return recompute_character(character.model_copy(update={"patch_history": history})), removed


# Missing entries


class MissingDetail(StoredModel):
    patch_id: int
    patch_title: str
    patch_date: str
    character_name: str
    crawled_from_web: bool = True
    exists_in_firebase: bool = False


class MissingPatch(StoredModel):
    patch_title: str
    patch_date: str
    missing_characters: list[str]
    found_characters: list[str]


class MissingReport(StoredModel):
    """Characters named in patch notes but absent from their stored history."""

    checked_at: str = Field(default_factory=utc_now)
    total_patches_checked: int = 0
    total_missing: int = 0
    missing_by_patch: dict[int, MissingPatch] = Field(default_factory=dict)
    missing_by_character: dict[str, list[int]] = Field(default_factory=dict)
    details: list[MissingDetail] = Field(default_factory=list)

    def add(self, note: PatchNote, missing: list[str], found: list[str]) -> None:
        """Record the result of checking one patch note."""
        if not missing:
            return
        date = note.created_at.split("T")[0]
        self.missing_by_patch[note.id] = MissingPatch(
            patch_title=note.title, patch_date=date, missing_characters=missing, found_characters=found
        )
        for name in missing:
            self.missing_by_character.setdefault(name, []).append(note.id)
            self.details.append(
                MissingDetail(patch_id=note.id, patch_title=note.title, patch_date=date, character_name=name)
            )
        self.total_missing += len(missing)


def characters_with_patch(characters: list[Character], patch_id: int) -> set[str]:
    return {c.name for c in characters if c.has_patch(patch_id)}


def find_missing(mentioned: list[str], stored: set[str]) -> tuple[list[str], list[str]]:
    """Split a document's character mentions into (missing, found).

    Args:
        mentioned: Names found in the document, in document order
        stored: Names whose stored history has the document's patch id
    """
    missing = [name for name in mentioned if name not in stored]
    found = [name for name in mentioned if name in stored]
    return missing, found


# Corrected reparse


class FixData(StoredModel):
    dev_comment: str | None = None
    changes: list[Change] = Field(default_factory=list)


class FixDiff(StoredModel):
    comment_changed: bool
    old_comment_length: int
    new_comment_length: int
    old_change_count: int
    new_change_count: int
    added_changes: int


class PatchFix(StoredModel):
    """A staged replacement for one stored entry."""

    character_name: str
    patch_id: int
    patch_version: str
    old_data: FixData
    new_data: FixData
    diff: FixDiff


class FixesSummary(StoredModel):
    patches_processed: int = 0
    characters_affected: int = 0
    total_added_changes: int = 0
    comments_fixes: int = 0


class PatchFixesFile(StoredModel):
    """Staged corrections awaiting review."""

    generated_at: str = Field(default_factory=utc_now)
    total_fixes: int = 0
    summary: FixesSummary = Field(default_factory=FixesSummary)
    fixes: list[PatchFix] = Field(default_factory=list)

    @classmethod
    def create(cls, fixes: list[PatchFix], patches_processed: int) -> "PatchFixesFile":
        """Build the file with its summary counts."""
        return cls(
            total_fixes=len(fixes),
            summary=FixesSummary(
                patches_processed=patches_processed,
                characters_affected=len({f.character_name for f in fixes}),
                total_added_changes=sum(f.diff.added_changes for f in fixes),
                comments_fixes=sum(1 for f in fixes if f.diff.comment_changed),
            ),
            fixes=fixes,
        )


def propose_fix(existing: PatchEntry, parsed: ParsedCharacter, force: bool = False) -> PatchFix | None:
    """Stage a replacement if the fresh parse strictly improves on the stored entry.

    Improvement means more changes extracted or a longer comment. ``force``
    stages the replacement regardless.

    Returns:
        The staged fix, or None when the stored entry should stay
    """
    old_changes = len(existing.changes)
    new_changes = len(parsed.changes)
    old_comment = len(existing.dev_comment or "")
    new_comment = len(parsed.dev_comment or "")

    if not (force or new_changes > old_changes or new_comment > old_comment):
        return None

    return PatchFix(
        character_name=parsed.name,
        patch_id=existing.patch_id,
        patch_version=existing.patch_version,
        old_data=FixData(dev_comment=existing.dev_comment, changes=existing.changes),
        new_data=FixData(dev_comment=parsed.dev_comment, changes=parsed.changes),
        diff=FixDiff(
            comment_changed=new_comment != old_comment,
            old_comment_length=old_comment,
            new_comment_length=new_comment,
            old_change_count=old_changes,
            new_change_count=new_changes,
            added_changes=new_changes - old_changes,
        ),
    )


def apply_fix(character: Character, fix: PatchFix) -> Character:
    """Replace an entry's comment and changes with the staged data and recompute.

    The comment is applied as staged, including None.

    Raises:
        PatchNotFoundError: If the character has no entry for the fix's patch
    """
    entry = character.find_patch(fix.patch_id)
    if entry is None:
        raise PatchNotFoundError(f"{character.name} has no entry for patch {fix.patch_id}")
    updated = entry.model_copy(
        update={
            "dev_comment": fix.new_data.dev_comment,
            "changes": fix.new_data.changes,
            "overall_change": overall_change_with_comment(fix.new_data.changes, fix.new_data.dev_comment),
        }
    )
    return replace_patch_entry(character, updated)


def filter_fixes(fixes: list[PatchFix], character: str | None = None, limit: int | None = None) -> list[PatchFix]:
    if character:
        fixes = [f for f in fixes if f.character_name == character]
    if limit:
        fixes = fixes[:limit]
    return fixes


# Staged files


def write_report(model: StoredModel, path: Path) -> Path:
    """Write a staged report as pretty JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(model.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    return path


def read_fixes(path: Path) -> PatchFixesFile:
    """Load staged fixes.

    Raises:
        ReconcileError: If the file is missing or malformed
    """
    try:
        return PatchFixesFile.model_validate_json(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ReconcileError(f"No staged fixes at {path}; run the reparse job first") from e
    except ValidationError as e:
        raise ReconcileError(f"Invalid fixes file {path}: {e}") from e


def read_missing_report(path: Path) -> MissingReport:
    """Load a missing-patch report.

    Raises:
        ReconcileError: If the file is missing or malformed
    """
    try:
        return MissingReport.model_validate_json(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ReconcileError(f"No missing-patch report at {path}; run the check first") from e
    except ValidationError as e:
        raise ReconcileError(f"Invalid missing-patch report {path}: {e}") from e


def read_reparse_list(path: Path) -> list[int]:
    """Load the list of patch ids queued for a corrected reparse.

    Raises:
        ReconcileError: If the file is missing or is not a list of ids
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ReconcileError(f"No reparse list at {path}; pass --patch or --all instead") from e
    except json.JSONDecodeError as e:
        raise ReconcileError(f"Invalid reparse list {path}: {e}") from e
    if not isinstance(data, list) or not all(isinstance(i, int) for i in data):
        raise ReconcileError(f"Reparse list {path} must be a JSON array of patch ids")
    return data
