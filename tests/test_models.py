"""Tests for the persisted record schema."""

import pytest
from pydantic import ValidationError

from erpatches.models import Character, DescriptionChange, NumericChange, PatchEntry, PatchNote


def test_patch_entry_from_stored_json():
    entry = PatchEntry.model_validate(
        {
            "patchId": 3209,
            "patchVersion": "1.2",
            "patchDate": "2024-05-02",
            "overallChange": "nerf",
            "streak": 2,
            "devComment": None,
            "changes": [
                {
                    "target": "제압부(Q)",
                    "stat": "피해량",
                    "before": "80",
                    "after": "70",
                    "changeType": "nerf",
                    "changeCategory": "numeric",
                },
                {
                    "target": "제압부(Q)",
                    "description": "피해량: 없음 → 10",
                    "changeType": "mixed",
                    "changeCategory": "added",
                },
            ],
        }
    )
    assert isinstance(entry.changes[0], NumericChange)
    assert isinstance(entry.changes[1], DescriptionChange)
    assert entry.streak == 2


def test_change_union_accepts_model_instances():
    entry = PatchEntry(
        patch_id=1,
        patch_version="1.0",
        patch_date="2024-01-01",
        changes=[DescriptionChange(target="기본 스탯", description="이제 스킬이 벽을 통과합니다.")],
    )
    assert isinstance(entry.changes[0], DescriptionChange)


def test_patch_date_truncated_to_day():
    entry = PatchEntry(patch_id=1, patch_version="1.0", patch_date="2024-05-02T02:00:00.000Z")
    assert entry.patch_date == "2024-05-02"


def test_numeric_change_rejects_other_category():
    with pytest.raises(ValidationError):
        NumericChange(target="기본 스탯", stat="공격력", before="10", after="12", change_category="mechanic")


def test_description_change_rejects_numeric_category():
    with pytest.raises(ValidationError):
        DescriptionChange(target="기본 스탯", description="설명", change_category="numeric")


def test_to_json_dict_uses_camel_case():
    character = Character(
        name="니아",
        patch_history=[PatchEntry(patch_id=1, patch_version="1.0", patch_date="2024-01-01", dev_comment="코멘트")],
    )
    data = character.to_json_dict()
    assert set(data) == {"name", "nameEn", "stats", "patchHistory"}
    assert data["patchHistory"][0]["patchId"] == 1
    assert data["patchHistory"][0]["devComment"] == "코멘트"
    assert data["stats"]["currentStreak"] == {"type": None, "count": 0}


def test_character_find_patch_returns_first():
    first = PatchEntry(patch_id=1, patch_version="a", patch_date="2024-01-01")
    second = PatchEntry(patch_id=1, patch_version="b", patch_date="2024-01-01")
    character = Character(name="니아", patch_history=[first, second])
    assert character.find_patch(1).patch_version == "a"
    assert character.has_patch(1)
    assert not character.has_patch(2)


def test_patch_note_link_must_be_url():
    with pytest.raises(ValidationError):
        PatchNote(id=1, title="1.2 패치 노트", link="/posts/news/1", created_at="2024-01-01T00:00:00Z")


def test_patch_note_defaults():
    note = PatchNote(id=1, title="1.2 패치 노트", link="https://example.com/1", created_at="2024-01-01T00:00:00Z")
    assert note.status is None
    assert note.is_parsed is False
    assert note.view_count == 0
