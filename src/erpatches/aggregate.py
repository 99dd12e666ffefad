"""Streaks and stats over a character's patch history.

Everything here is a full recomputation from the history. Corrections can land
anywhere in the timeline, so there is no incremental path.

Streak rules, walking oldest to newest with a running (type, count):

- buff/nerf extends the run if it matches, otherwise starts a new run at 1.
  The entry's ``streak`` is the running count at that point.
- mixed resets the run to (None, 0). The entry itself is stamped 1.
"""

from .classify import overall_change_with_comment
from .models import Change, Character, CharacterStats, ChangeType, CurrentStreak, PatchEntry


class PatchNotFoundError(Exception):
    """Raised when an edit targets a patch the character has no entry for."""


def sort_chronological(history: list[PatchEntry]) -> list[PatchEntry]:
    """Oldest first, by date then patch id."""
    return sorted(history, key=lambda p: (p.patch_date, p.patch_id))


def sort_newest_first(history: list[PatchEntry]) -> list[PatchEntry]:
    """Storage order."""
    return sorted(history, key=lambda p: (p.patch_date, p.patch_id), reverse=True)


def compute_streaks(history: list[PatchEntry]) -> list[PatchEntry]:
    """Stamp each entry with its running streak.

    Args:
        history: Patch entries in any order

    Returns:
        New entries, oldest first, with ``streak`` set
    """
    running_type: ChangeType | None = None
    running_count = 0
    result = []

    for entry in sort_chronological(history):
        if entry.overall_change in ("buff", "nerf"):
            if entry.overall_change == running_type:
                running_count += 1
            else:
                running_type = entry.overall_change
                running_count = 1
            streak = running_count
        else:
            running_type, running_count = None, 0
            streak = 1
        result.append(entry.model_copy(update={"streak": streak}))

    return result


def compute_stats(history: list[PatchEntry]) -> CharacterStats:
    """Fold a history into counts, max streaks and the current streak.

    Args:
        history: Patch entries in any order

    Returns:
        Stats for the history
    """
    stats = CharacterStats(total_patches=len(history))
    running_type: ChangeType | None = None
    running_count = 0

    def close_run() -> None:
        if running_type == "buff":
            stats.max_buff_streak = max(stats.max_buff_streak, running_count)
        elif running_type == "nerf":
            stats.max_nerf_streak = max(stats.max_nerf_streak, running_count)

    for entry in sort_chronological(history):
        if entry.overall_change == "buff":
            stats.buff_count += 1
        elif entry.overall_change == "nerf":
            stats.nerf_count += 1
        else:
            stats.mixed_count += 1

        if entry.overall_change in ("buff", "nerf"):
            if entry.overall_change == running_type:
                running_count += 1
            else:
                close_run()
                running_type = entry.overall_change
                running_count = 1
        else:
            close_run()
            running_type, running_count = None, 0

    close_run()
    stats.current_streak = CurrentStreak(type=running_type, count=running_count)
    return stats


def recompute_character(character: Character) -> Character:
    """Re-stamp streaks, recompute stats and restore newest-first order."""
    stamped = compute_streaks(character.patch_history)
    return character.model_copy(
        update={
            "patch_history": list(reversed(stamped)),
            "stats": compute_stats(stamped),
        }
    )


def add_patch_entry(character: Character, entry: PatchEntry) -> tuple[Character, bool]:
    """Insert an entry unless the character already has one for its patch.

    Returns:
        (updated character, whether the entry was added)
    """
    if character.has_patch(entry.patch_id):
        return character, False
    updated = character.model_copy(update={"patch_history": [*character.patch_history, entry]})
    return recompute_character(updated), True


def replace_patch_entry(character: Character, entry: PatchEntry) -> Character:
    """Swap the stored entry with the same patch id for ``entry`` and recompute.

    Raises:
        PatchNotFoundError: If the character has no entry for the patch
    """
    if not character.has_patch(entry.patch_id):
        raise PatchNotFoundError(f"{character.name} has no entry for patch {entry.patch_id}")
    history = [entry if p.patch_id == entry.patch_id else p for p in character.patch_history]
    return recompute_character(character.model_copy(update={"patch_history": history}))


def update_patch_entry(
    character: Character,
    patch_id: int,
    *,
    dev_comment: str | None = None,
    changes: list[Change] | None = None,
    overall_change: ChangeType | None = None,
    patch_version: str | None = None,
    patch_date: str | None = None,
) -> Character:
    """Edit one entry's fields and recompute the whole character.

    ``patch_id`` cannot change. Fields left as None keep their stored value.
    When changes are replaced without an explicit ``overall_change``, the
    direction is recomputed from the new changes and the comment.

    Args:
        character: Character to edit
        patch_id: Entry to edit
        dev_comment: New developer comment
        changes: New change list
        overall_change: Direction override
        patch_version: New version label
        patch_date: New ISO date

    Returns:
        Updated character

    Raises:
        PatchNotFoundError: If the character has no entry for ``patch_id``
    """
    entry = character.find_patch(patch_id)
    if entry is None:
        raise PatchNotFoundError(f"{character.name} has no entry for patch {patch_id}")

    update: dict = {}
    if dev_comment is not None:
        update["dev_comment"] = dev_comment
    if changes is not None:
        update["changes"] = changes
    if patch_version is not None:
        update["patch_version"] = patch_version
    if patch_date is not None:
        update["patch_date"] = patch_date.split("T")[0]

    edited = entry.model_copy(update=update)
    if overall_change is not None:
        edited = edited.model_copy(update={"overall_change": overall_change})
    elif changes is not None:
        edited = edited.model_copy(
            update={"overall_change": overall_change_with_comment(edited.changes, edited.dev_comment)}
        )

    return replace_patch_entry(character, edited)
