"""Tests for locating the character section and splitting it into blocks."""

from erpatches.dom import el, parse_content, parse_fragment, text_of
from erpatches.registry import is_valid_character, looks_like_name, normalize_character_name
from erpatches.section import locate_character_section
from erpatches.segment import CharacterBlock, bold_name, segment_characters


def name_p(name: str):
    return el("p", el("span", el("strong", name)))


# =============================================================================
# Test: dom
# =============================================================================

def test_parse_content_selects_article_body(flat_html):
    root = parse_content(flat_html)
    assert root is not None
    assert root.tag == "div"
    assert root.children[0].tag == "h3"


def test_parse_content_without_article_body():
    assert parse_content("<html><body><p>점검 중입니다</p></body></html>") is None


def test_parse_fragment_wraps_in_div():
    root = parse_fragment("<p>a</p><ul><li>b</li></ul>")
    assert [c.tag for c in root.children] == ["p", "ul"]


def test_text_of_keeps_document_order():
    node = el("li", "피해량 ", el("strong", "10"), " → 20")
    assert text_of(node) == "피해량 10 → 20"


def test_parse_fragment_drops_comments():
    root = parse_fragment("<p>보이는 글<!-- 숨은 글 --></p>")
    assert text_of(root) == "보이는 글"


# =============================================================================
# Test: registry
# =============================================================================

def test_valid_character():
    assert is_valid_character("니아")
    assert is_valid_character("데비&마를렌")


def test_invalid_character():
    assert not is_valid_character("홍길동")
    assert not is_valid_character("무기")


def test_normalize_character_name_entities():
    assert normalize_character_name("데비&amp;마를렌") == "데비&마를렌"
    assert normalize_character_name("리\xa0 다이린") == "리 다이린"


def test_looks_like_name_rejects_section_titles():
    assert looks_like_name("니아")
    assert not looks_like_name("무기")
    assert not looks_like_name("옷")
    assert not looks_like_name("Q 스킬")
    assert not looks_like_name("")


# =============================================================================
# Test: locate_character_section
# =============================================================================

def test_section_between_heading_and_sibling(flat_html):
    section = locate_character_section(parse_content(flat_html))
    texts = [text_of(e) for e in section]
    assert "니아" in texts[0]
    assert not any("재키" in t for t in texts)


def test_section_runs_to_end_of_document():
    root = el("div", el("h3", "실험체"), name_p("니아"), el("ul", el("li", "공격력 10 → 12")))
    assert len(locate_character_section(root)) == 2


def test_section_missing_returns_empty():
    root = el("div", el("h3", "시스템"), el("p", "서버 안정화 작업이 진행되었습니다."))
    assert locate_character_section(root) == []


def test_section_heading_whitespace_ignored():
    root = el("div", el("h2", "  실험체 \n"), el("p", "a"))
    assert len(locate_character_section(root)) == 1


# =============================================================================
# Test: bold_name
# =============================================================================

def test_bold_name_whole_paragraph():
    assert bold_name(name_p("니아")) == "니아"


def test_bold_name_accepts_b_tag():
    assert bold_name(el("p", el("span", el("b", "아야")))) == "아야"


def test_bold_name_rejects_partial_bold():
    p = el("p", el("span", el("strong", "니아")), " 의 스킬이 변경됩니다")
    assert bold_name(p) is None


def test_bold_name_rejects_section_title():
    assert bold_name(name_p("무기")) is None


def test_bold_name_requires_span():
    assert bold_name(el("p", el("strong", "니아"))) is None


# =============================================================================
# Test: segment_characters
# =============================================================================

def test_segment_flat_dialect(flat_html):
    blocks = segment_characters(locate_character_section(parse_content(flat_html)))
    assert [b.name for b in blocks] == ["니아", "아야", "레녹스"]
    assert all(b.dialect == "flat" for b in blocks)


def test_segment_non_roster_name_closes_block(flat_html):
    blocks = segment_characters(locate_character_section(parse_content(flat_html)))
    nia = blocks[0]
    # Comment, change list and trailing paragraph; the unknown name's list is dropped
    assert [e.tag for e in nia.elements] == ["p", "ul", "p"]


def test_segment_nested_dialect(nested_html):
    blocks = segment_characters(locate_character_section(parse_content(nested_html)))
    assert [b.name for b in blocks] == ["레온", "아야"]
    assert all(b.dialect == "nested" for b in blocks)
    # The name paragraph is not part of the block
    assert [e.tag for e in blocks[0].elements] == ["ul"]


def test_segment_elements_before_first_name_ignored():
    section = [el("p", "섹션 소개 문단입니다."), name_p("니아"), el("ul", el("li", "공격력 10 → 12"))]
    blocks = segment_characters(section)
    assert len(blocks) == 1
    assert [e.tag for e in blocks[0].elements] == ["ul"]


def test_segment_name_with_ampersand():
    blocks = segment_characters([name_p("데비&마를렌"), el("ul", el("li", "공격력 10 → 12"))])
    assert blocks[0].name == "데비&마를렌"


def test_segment_name_with_nbsp():
    blocks = segment_characters([name_p("리\xa0다이린"), el("ul", el("li", "공격력 10 → 12"))])
    assert blocks[0].name == "리 다이린"


def test_add_list_item_groups_consecutive_items():
    block = CharacterBlock(name="니아", dialect="nested")
    block.add_list_item(el("li", "a"))
    block.add_list_item(el("li", "b"))
    block.elements.append(el("p", "c"))
    block.add_list_item(el("li", "d"))
    assert [e.tag for e in block.elements] == ["ul", "p", "ul"]
    assert len(block.elements[0].children) == 2
    assert len(block.elements[2].children) == 1


def test_segment_stray_items_after_nested_character():
    section = [
        el(
            "ul",
            el("li", el("p", el("span", el("strong", "레온"))), el("ul", el("li", "피해량 10 → 20"))),
            el("li", "쿨다운 8초 → 6초"),
        )
    ]
    blocks = segment_characters(section)
    assert [e.tag for e in blocks[0].elements] == ["ul", "ul"]
