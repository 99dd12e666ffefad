"""Hand-reviewed corrections applied after automatic classification.

Overrides live in a JSON dataset keyed by (character, patchId, target, stat)
so corrections never leak into the classification code. The package ships
the reviewed set in ``erpatches/data/overrides.json``.
"""

import json
from importlib import resources
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .classify import overall_change_with_comment
from .models import (
    Change,
    ChangeCategory,
    ChangeType,
    Character,
    DescriptionChange,
    NumericChange,
    PatchEntry,
)
from .normalize import arrow_description


class OverrideError(Exception):
    """Raised when the override dataset cannot be loaded."""


class ChangeOverride(BaseModel):
    """A manual correction for one change of one patch entry."""

    character: str
    patch_id: int = Field(alias="patchId")
    target: str
    stat: str = Field(description="Stat as stored before the correction")
    new_category: ChangeCategory = Field(alias="newCategory")
    new_stat: str | None = Field(default=None, alias="newStat")
    new_before: str | None = Field(default=None, alias="newBefore")
    new_after: str | None = Field(default=None, alias="newAfter")
    new_change_type: ChangeType | None = Field(default=None, alias="newChangeType")
    note: str | None = None

    model_config = ConfigDict(populate_by_name=True)

    def matches(self, change: Change) -> bool:
        """Check whether ``change`` is the one this override corrects.

        Non-numeric arrow statements are stored as "stat: before → after"
        descriptions, so those are matched on their stat prefix.
        """
        if change.target != self.target:
            return False
        if isinstance(change, NumericChange):
            return change.stat == self.stat
        return "→" in change.description and change.description.startswith(f"{self.stat}: ")

    def apply(self, change: Change) -> Change:
        """Build the corrected change."""
        stat, before, after = arrow_parts(change, self.stat)
        stat = self.new_stat or stat
        before = self.new_before or before
        after = self.new_after or after
        change_type = self.new_change_type or change.change_type

        if self.new_category == "numeric":
            return NumericChange(
                target=change.target, stat=stat, before=before, after=after, change_type=change_type
            )
        if isinstance(change, DescriptionChange) and not (self.new_stat or self.new_before or self.new_after):
            description = change.description
        else:
            description = arrow_description(stat, before, after)
        return DescriptionChange(
            target=change.target,
            description=description,
            change_type=change_type,
            change_category=self.new_category,
        )


def arrow_parts(change: Change, stat: str) -> tuple[str, str, str]:
    """(stat, before, after) of a change, recovered from an arrow description when needed.

    Args:
        change: Change matched by an override
        stat: The stat the override matched on
    """
    if isinstance(change, NumericChange):
        return change.stat, change.before, change.after
    prefix = f"{stat}: "
    body = change.description[len(prefix) :] if change.description.startswith(prefix) else change.description
    before, _, after = body.partition(" → ")
    return stat, before.strip(), after.strip()


def default_overrides_path() -> Path:
    return Path(str(resources.files("erpatches") / "data" / "overrides.json"))


def load_overrides(path: Path | None = None) -> list[ChangeOverride]:
    """Load the override dataset.

    Args:
        path: JSON file holding a list of overrides; defaults to the packaged set

    Returns:
        Parsed overrides

    Raises:
        OverrideError: If the file is missing or malformed
    """
    path = path or default_overrides_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return [ChangeOverride.model_validate(item) for item in data]
    except FileNotFoundError as e:
        raise OverrideError(f"Override file not found: {path}") from e
    except (json.JSONDecodeError, ValidationError) as e:
        raise OverrideError(f"Invalid override file {path}: {e}") from e


def overrides_for(
    overrides: list[ChangeOverride], character: str, patch_id: int
) -> list[ChangeOverride]:
    return [o for o in overrides if o.character == character and o.patch_id == patch_id]


def apply_overrides_to_entry(
    entry: PatchEntry, character: str, overrides: list[ChangeOverride]
) -> tuple[PatchEntry, int]:
    """Apply matching overrides to one entry.

    The entry's direction is recomputed only when an override sets a change
    direction; otherwise the stored verdict stands.

    Returns:
        (entry, number of changes corrected)
    """
    relevant = overrides_for(overrides, character, entry.patch_id)
    if not relevant:
        return entry, 0

    applied = 0
    direction_touched = False
    changes: list[Change] = []
    for change in entry.changes:
        override = next((o for o in relevant if o.matches(change)), None)
        if override is None:
            changes.append(change)
            continue
        corrected = override.apply(change)
        applied += corrected != change
        direction_touched |= override.new_change_type is not None
        changes.append(corrected)

    update: dict = {"changes": changes}
    if direction_touched:
        update["overall_change"] = overall_change_with_comment(changes, entry.dev_comment)
    return entry.model_copy(update=update), applied


def apply_overrides(character: Character, overrides: list[ChangeOverride]) -> tuple[Character, int]:
    """Apply overrides across a character's whole history.

    Returns:
        (character, number of changes corrected). Streaks are not recomputed
        here; callers run ``recompute_character`` when directions changed.
    """
    total = 0
    history = []
    for entry in character.patch_history:
        entry, applied = apply_overrides_to_entry(entry, character.name, overrides)
        total += applied
        history.append(entry)
    return character.model_copy(update={"patch_history": history}), total
