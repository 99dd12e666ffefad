"""Shared fixtures: sample patch note pages and history builders."""

import pytest

from erpatches.models import Character, NumericChange, PatchEntry, PatchNote

BASE_URL = "https://playeternalreturn.com"

# Flat dialect: bold name paragraphs followed by comment paragraphs and change lists
FLAT_PATCH_HTML = """
<html><body>
<div class="er-article-detail__content">
  <h3>개요</h3>
  <p>이번 패치의 주요 변경 사항을 안내해 드립니다.</p>
  <h3>실험체</h3>
  <p><span><strong>니아</strong></span></p>
  <p>니아의 승률이 높아 전체적인 성능을 하향합니다.</p>
  <ul>
    <li><p>제압부(Q)</p>
      <ul>
        <li>피해량 80/130/180 → 70/120/170</li>
        <li>쿨다운 8초 → 9초</li>
      </ul>
    </li>
  </ul>
  <p>이 문단은 변경 목록 뒤에 있어 코멘트가 아닙니다.</p>
  <p><span><strong>홍길동</strong></span></p>
  <ul><li>공격력 10 → 20</li></ul>
  <p><span><strong>아야</strong></span></p>
  <ul>
    <li>공격 속도 0.1 → 0.15</li>
    <li>(신규) 이제 스킬 적중 시 이동 속도가 증가합니다.</li>
    <li>피해량→20</li>
  </ul>
  <p><span><strong>레녹스</strong></span></p>
  <p>레녹스는 다음 패치에서 조정될 예정입니다.</p>
  <h3>무기</h3>
  <p><span><strong>재키</strong></span></p>
  <ul><li>공격력 10 → 20</li></ul>
</div>
</body></html>
"""

# Hotfix dialect: each character is a list item holding its own change list
NESTED_PATCH_HTML = """
<div class="er-article-detail__content">
  <h3>실험체</h3>
  <ul>
    <li><p><span><strong>레온</strong></span></p>
      <ul><li>피해량 10 → 20</li></ul>
    </li>
    <li><p><span><strong>아야</strong></span></p>
      <ul>
        <li><p>총구 화염(W)</p>
          <ul><li>쿨다운 10초 → 8초</li></ul>
        </li>
      </ul>
    </li>
  </ul>
  <h3>아이템</h3>
</div>
"""


@pytest.fixture
def flat_html() -> str:
    return FLAT_PATCH_HTML


@pytest.fixture
def nested_html() -> str:
    return NESTED_PATCH_HTML


def make_note(patch_id: int = 3209, title: str = "1.2 패치 노트", created_at: str = "2024-05-02T02:00:00.000Z"):
    return PatchNote(
        id=patch_id,
        title=title,
        link=f"{BASE_URL}/posts/news/{patch_id}",
        created_at=created_at,
        status="success",
        has_character_data=True,
    )


def make_entry(patch_id: int, date: str, overall: str = "buff", changes=None, comment=None) -> PatchEntry:
    if changes is None:
        changes = [NumericChange(target="기본 스탯", stat="공격력", before="10", after="12", change_type=overall)]
    return PatchEntry(
        patch_id=patch_id,
        patch_version=f"{patch_id}",
        patch_date=date,
        overall_change=overall,
        dev_comment=comment,
        changes=changes,
    )


def make_character(name: str = "니아", entries=None) -> Character:
    return Character(name=name, name_en=name, patch_history=entries or [])
