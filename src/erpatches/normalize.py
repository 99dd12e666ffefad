"""Clean arrow statements and decide what kind of change they describe."""

import re
from dataclasses import dataclass

from .classify import classify_change
from .models import Change, ChangeCategory, Character, DescriptionChange, NumericChange, PatchEntry

_WHITESPACE = re.compile(r"\s+")

# Values meaning "there was nothing before" / "there is nothing after"
EMPTY_BEFORE = frozenset(("", "없음", "-", "x"))
EMPTY_AFTER = frozenset(("", "삭제", "없음", "-"))


@dataclass(frozen=True)
class NormalizedChange:
    """Cleaned (stat, before, after) plus its category."""

    stat: str
    before: str
    after: str
    category: ChangeCategory


def clean_text(text: str) -> str:
    """Collapse HTML entity artifacts and whitespace runs."""
    text = (
        text.replace("&nbsp;", " ")
        .replace("\xa0", " ")
        .replace("&amp;", "&")
        .replace("&lt;", "<")
        .replace("&gt;", ">")
    )
    return _WHITESPACE.sub(" ", text).strip()


def first_number_index_outside_parens(text: str) -> int:
    """Index of the first digit not inside parentheses, or -1.

    Parenthesized digits are slot annotations like "(E2)", not values.
    """
    depth = 0
    for i, char in enumerate(text):
        if char == "(":
            depth += 1
        elif char == ")":
            depth = max(0, depth - 1)
        elif depth == 0 and "0" <= char <= "9":
            return i
    return -1


def split_at_first_number(text: str) -> tuple[str, str]:
    """Split ``text`` into (qualifier prefix, numeric-leading value).

    Returns:
        ("", text) when there is no digit outside parentheses or the text
        already starts with one
    """
    cleaned = clean_text(text)
    index = first_number_index_outside_parens(cleaned)
    if index <= 0:
        return "", cleaned
    return cleaned[:index].strip(), cleaned[index:].strip()


def starts_with_number(text: str) -> bool:
    return bool(re.match(r"^[0-9]", text.strip()))


def categorize(before: str, after: str) -> ChangeCategory:
    """Decide the change category of a cleaned before/after pair.

    Precedence: added, removed, numeric, mechanic, then unknown when exactly
    one side starts with a digit.
    """
    before_clean = clean_text(before).lower()
    after_clean = clean_text(after).lower()

    if before_clean in EMPTY_BEFORE:
        return "added"
    if after_clean in EMPTY_AFTER:
        return "removed"

    before_numeric = starts_with_number(before)
    after_numeric = starts_with_number(after)
    if before_numeric and after_numeric:
        return "numeric"
    if not before_numeric and not after_numeric:
        return "mechanic"
    return "unknown"


def normalize_change(stat: str, before: str, after: str) -> NormalizedChange:
    """Clean an arrow statement and move qualifier text from the values onto the stat.

    Text ahead of the first number in ``before`` is appended to ``stat``.
    Text ahead of the first number in ``after`` is discarded, since ``stat``
    already carries the qualifier. Running this on its own output is a no-op.

    Args:
        stat: Qualifier from the arrow split
        before: Old value
        after: New value

    Returns:
        Normalized change with its category
    """
    stat = clean_text(stat)
    before = clean_text(before)
    after = clean_text(after)

    before_prefix, before_value = split_at_first_number(before)
    after_prefix, after_value = split_at_first_number(after)

    if before_prefix:
        stat = f"{stat} {before_prefix}".strip()
        before = before_value
    if after_prefix and after_value:
        after = after_value

    return NormalizedChange(stat=stat, before=before, after=after, category=categorize(before, after))


def arrow_description(stat: str, before: str, after: str) -> str:
    """Render a non-numeric arrow statement as description text."""
    if stat:
        return f"{stat}: {before} → {after}"
    return f"{before} → {after}"


def build_arrow_change(target: str, stat: str, before: str, after: str) -> Change:
    """Normalize an arrow statement into a typed change.

    Numeric pairs keep their stat/before/after shape and get a direction.
    Anything else becomes a description change with direction ``mixed``.
    """
    normalized = normalize_change(stat, before, after)
    if normalized.category == "numeric":
        return NumericChange(
            target=target,
            stat=normalized.stat,
            before=normalized.before,
            after=normalized.after,
            change_type=classify_change(normalized.stat, normalized.before, normalized.after),
        )
    return DescriptionChange(
        target=target,
        description=arrow_description(normalized.stat, normalized.before, normalized.after),
        change_type="mixed",
        change_category=normalized.category,
    )


def renormalize_entry(entry: PatchEntry) -> int:
    """Re-run cleaning and categorization over an entry's numeric changes in place.

    Returns:
        Number of changes that were modified
    """
    modified = 0
    changes: list[Change] = []
    for change in entry.changes:
        if isinstance(change, NumericChange):
            rebuilt = build_arrow_change(change.target, change.stat, change.before, change.after)
            if isinstance(rebuilt, NumericChange):
                # Keep any manually corrected direction
                rebuilt = rebuilt.model_copy(update={"change_type": change.change_type})
            if rebuilt != change:
                modified += 1
            changes.append(rebuilt)
        else:
            changes.append(change)
    entry.changes = changes
    return modified


def renormalize_history(character: Character) -> int:
    """Renormalize every entry of a character in place.

    Returns:
        Number of changes modified across the history
    """
    return sum(renormalize_entry(entry) for entry in character.patch_history)
