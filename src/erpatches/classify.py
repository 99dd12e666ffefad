"""Buff/nerf direction for single changes and whole patches.

Numeric changes compare the average of every number on each side. Stats where
a lower value is better (cooldowns, costs, cast times) flip the reading.
When a patch's changes disagree, the developer comment can settle it through
keyword sentiment: plain substring matching, no negation handling.
"""

import re
from collections.abc import Iterable

from .models import ChangeType

DECREASE_IS_BUFF = [
    "쿨다운",
    "cooldown",
    "cd",
    "마나",
    "mana",
    "sp",
    "mp",
    "소모",
    "시전",
    "cast",
    "casting",
    "딜레이",
    "delay",
    "대기",
    "wait",
    "충전",
    "charge time",
    "선딜",
    "후딜",
]

NERF_KEYWORDS = [
    "reducing",
    "reduce",
    "decreased",
    "decrease",
    "lowering",
    "lower",
    "nerfing",
    "nerf",
    "weaken",
    "weakening",
    "toning down",
    "tune down",
    "too strong",
    "very strong",
    "overperforming",
    "high win rate",
    "high pick rate",
    "dominant",
    "oppressive",
    "keep in check",
    "너프",
    "하향",
    "감소",
    "약화",
    "줄이",
    "낮추",
    "너무 강",
    "강력해서",
    "승률이 높",
    "픽률이 높",
    "지배적",
]

BUFF_KEYWORDS = [
    "buffing",
    "buff",
    "increasing",
    "increase",
    "improving",
    "improve",
    "enhancing",
    "enhance",
    "strengthening",
    "strengthen",
    "boosting",
    "boost",
    "underperforming",
    "low win rate",
    "low pick rate",
    "weak",
    "struggling",
    "needs help",
    "giving more",
    "버프",
    "상향",
    "증가",
    "강화",
    "올리",
    "높이",
    "약해서",
    "승률이 낮",
    "픽률이 낮",
    "부족",
    "개선",
]

_NUMBER = re.compile(r"[0-9]+(?:\.[0-9]+)?")


def extract_numbers(value: str) -> list[float]:
    """Every decimal number in ``value``, in order."""
    return [float(m) for m in _NUMBER.findall(value)]


def is_decrease_buff_stat(stat: str) -> bool:
    stat_lower = stat.lower()
    return any(k in stat_lower for k in DECREASE_IS_BUFF)


def classify_change(stat: str, before: str, after: str) -> ChangeType:
    """Direction of one numeric change.

    Args:
        stat: Stat name, checked against the lower-is-better table
        before: Old value
        after: New value

    Returns:
        buff or nerf, or mixed when either side has no numbers or the
        averages are equal
    """
    before_nums = extract_numbers(before)
    after_nums = extract_numbers(after)
    if not before_nums or not after_nums:
        return "mixed"

    before_avg = sum(before_nums) / len(before_nums)
    after_avg = sum(after_nums) / len(after_nums)
    if before_avg == after_avg:
        return "mixed"

    increased = after_avg > before_avg
    if is_decrease_buff_stat(stat):
        return "nerf" if increased else "buff"
    return "buff" if increased else "nerf"


def overall_change(change_types: Iterable[ChangeType]) -> ChangeType:
    """Patch direction from its changes' directions.

    Only a one-sided set resolves; anything else is mixed.
    """
    types = list(change_types)
    buffs = types.count("buff")
    nerfs = types.count("nerf")
    if buffs > 0 and nerfs == 0:
        return "buff"
    if nerfs > 0 and buffs == 0:
        return "nerf"
    return "mixed"


def comment_intent(comment: str | None) -> ChangeType | None:
    """Read buff/nerf intent from a developer comment.

    Returns:
        buff or nerf when only one keyword set matches, otherwise None
    """
    if not comment:
        return None
    lowered = comment.lower()
    has_nerf = any(k.lower() in lowered for k in NERF_KEYWORDS)
    has_buff = any(k.lower() in lowered for k in BUFF_KEYWORDS)
    if has_nerf and not has_buff:
        return "nerf"
    if has_buff and not has_nerf:
        return "buff"
    return None


def overall_change_with_comment(changes: Iterable, comment: str | None) -> ChangeType:
    """Patch direction, letting the comment settle a mixed verdict.

    Args:
        changes: Changes with a ``change_type`` attribute
        comment: Developer comment, may be None

    Returns:
        Final direction for the patch entry
    """
    result = overall_change(c.change_type for c in changes)
    if result == "mixed":
        intent = comment_intent(comment)
        if intent is not None:
            return intent
    return result

