"""Tests for the manual review queue."""

from conftest import make_character, make_entry

from erpatches.models import DescriptionChange
from erpatches.review import collect_review_items


def test_collects_unknown_changes_and_mixed_entries():
    unknown = DescriptionChange(target="제압부(Q)", description="효과: 10 → 기절", change_category="unknown")
    mechanic = DescriptionChange(target="제압부(Q)", description="이제 벽을 통과합니다.")
    characters = [
        make_character("아야", [make_entry(2, "2024-02-01", "buff")]),
        make_character(
            "니아",
            [make_entry(1, "2024-01-01", "mixed", changes=[unknown, mechanic], comment="코멘트")],
        ),
    ]
    queue = collect_review_items(characters)

    assert queue.total_items == 2
    assert [(i.character_name, i.reason) for i in queue.items] == [
        ("니아", "unknown_category"),
        ("니아", "mixed_direction"),
    ]
    assert queue.items[0].text == "효과: 10 → 기절"
    assert queue.items[0].target == "제압부(Q)"
    assert queue.items[1].text == "코멘트"


def test_empty_queue():
    queue = collect_review_items([make_character("아야", [make_entry(2, "2024-02-01", "buff")])])
    assert queue.total_items == 0
    assert queue.items == []


def test_queue_serializes_camel_case():
    characters = [make_character("니아", [make_entry(1, "2024-01-01", "mixed")])]
    data = collect_review_items(characters).to_json_dict()
    assert data["totalItems"] == 1
    assert data["items"][0]["characterName"] == "니아"
    assert data["items"][0]["overallChange"] == "mixed"
