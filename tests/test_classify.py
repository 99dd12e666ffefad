"""Tests for buff/nerf direction."""

from erpatches.classify import (
    classify_change,
    comment_intent,
    extract_numbers,
    is_decrease_buff_stat,
    overall_change,
    overall_change_with_comment,
)
from erpatches.models import DescriptionChange, NumericChange


def numeric(change_type: str) -> NumericChange:
    return NumericChange(target="기본 스탯", stat="공격력", before="10", after="12", change_type=change_type)


# =============================================================================
# Test: extract_numbers
# =============================================================================

def test_extract_numbers_composite_value():
    assert extract_numbers("80/130/180(+공격력의 30%)") == [80.0, 130.0, 180.0, 30.0]


def test_extract_numbers_decimals():
    assert extract_numbers("0.5초") == [0.5]


def test_extract_numbers_none():
    assert extract_numbers("기절") == []


# =============================================================================
# Test: classify_change
# =============================================================================

def test_increase_is_buff():
    assert classify_change("공격력", "10", "12") == "buff"


def test_decrease_is_nerf():
    assert classify_change("피해량", "80/130/180", "70/120/170") == "nerf"


def test_cooldown_decrease_is_buff():
    assert classify_change("쿨다운", "8", "6") == "buff"


def test_cooldown_increase_is_nerf():
    assert classify_change("쿨다운", "8초", "9초") == "nerf"


def test_english_stat_is_case_insensitive():
    assert classify_change("Cooldown", "8", "6") == "buff"


def test_equal_averages_are_mixed():
    assert classify_change("피해량", "10/20", "20/10") == "mixed"


def test_missing_numbers_are_mixed():
    assert classify_change("효과", "기절", "속박") == "mixed"
    assert classify_change("효과", "10", "기절") == "mixed"


def test_is_decrease_buff_stat():
    assert is_decrease_buff_stat("스킬 쿨다운")
    assert is_decrease_buff_stat("마나 소모량")
    assert not is_decrease_buff_stat("공격력")


# =============================================================================
# Test: overall_change
# =============================================================================

def test_overall_one_sided():
    assert overall_change(["buff", "buff"]) == "buff"
    assert overall_change(["nerf"]) == "nerf"


def test_overall_mixed_entries_do_not_block():
    assert overall_change(["buff", "mixed"]) == "buff"


def test_overall_conflicting_is_mixed():
    assert overall_change(["buff", "nerf"]) == "mixed"


def test_overall_empty_is_mixed():
    assert overall_change([]) == "mixed"


# =============================================================================
# Test: comment_intent
# =============================================================================

def test_comment_intent_nerf():
    assert comment_intent("니아의 승률이 높아 전체적인 성능을 하향합니다.") == "nerf"


def test_comment_intent_buff():
    assert comment_intent("아야의 성능을 상향합니다.") == "buff"


def test_comment_intent_english():
    assert comment_intent("She is overperforming, so we are toning down her damage.") == "nerf"


def test_comment_intent_both_sides_is_none():
    assert comment_intent("공격력은 상향하고 방어력은 하향합니다.") is None


def test_comment_intent_empty():
    assert comment_intent(None) is None
    assert comment_intent("") is None


# =============================================================================
# Test: overall_change_with_comment
# =============================================================================

def test_comment_settles_mixed_patch():
    changes = [numeric("buff"), numeric("nerf")]
    assert overall_change_with_comment(changes, "전체적인 성능을 하향합니다.") == "nerf"


def test_comment_ignored_for_one_sided_patch():
    assert overall_change_with_comment([numeric("buff")], "전체적인 성능을 하향합니다.") == "buff"


def test_mixed_without_comment_stays_mixed():
    changes = [numeric("buff"), numeric("nerf")]
    assert overall_change_with_comment(changes, None) == "mixed"


def test_description_only_patch_uses_comment():
    changes = [DescriptionChange(target="기본 스탯", description="이제 스킬이 벽을 통과합니다.")]
    assert overall_change_with_comment(changes, "아야의 성능을 상향합니다.") == "buff"
