"""Valid character roster and name normalization.

The roster is the authority for what counts as a character during
segmentation. Section sub-headers ("무기", "아이템") share the bold paragraph
shape of a character name, so anything not listed here is rejected.
Keep in sync with the game's roster when new characters ship.
"""

import re

VALID_CHARACTERS = frozenset(
    [
        "가넷",
        "나딘",
        "나타폰",
        "니아",
        "니키",
        "다니엘",
        "다르코",
        "데비&마를렌",
        "띠아",
        "라우라",
        "레녹스",
        "레니",
        "레온",
        "로지",
        "루크",
        "르노어",
        "리 다이린",
        "리오",
        "마르티나",
        "마이",
        "마커스",
        "매그너스",
        "미르카",
        "바냐",
        "바바라",
        "버니스",
        "블레어",
        "비앙카",
        "샬럿",
        "셀린",
        "쇼우",
        "쇼이치",
        "수아",
        "슈린",
        "시셀라",
        "실비아",
        "아델라",
        "아드리아나",
        "아디나",
        "아르다",
        "아비게일",
        "아야",
        "아이솔",
        "아이작",
        "알렉스",
        "알론소",
        "얀",
        "에스텔",
        "에이든",
        "에키온",
        "엘레나",
        "엠마",
        "요한",
        "윌리엄",
        "유민",
        "유스티나",
        "유키",
        "이렘",
        "이바",
        "이슈트반",
        "이안",
        "일레븐",
        "자히르",
        "재키",
        "제니",
        "츠바메",
        "카밀로",
        "카티야",
        "칼라",
        "캐시",
        "케네스",
        "클로에",
        "키아라",
        "타지아",
        "테오도르",
        "펠릭스",
        "프리야",
        "피오라",
        "피올로",
        "하트",
        "헤이즈",
        "헨리",
        "현우",
        "혜진",
        "히스이",
    ]
)

# Headings that open a section of the patch note
CHARACTER_SECTION_TITLE = "실험체"
SIBLING_SECTION_TITLES = ("무기", "아이템", "코발트 프로토콜", "론울프", "특성", "시스템")

# Bold paragraphs that look like names but are section or item-slot headers
SECTION_TITLES = frozenset((CHARACTER_SECTION_TITLE, *SIBLING_SECTION_TITLES))
ITEM_SLOT_TITLES = frozenset(("옷", "팔/장식", "머리", "다리", "악세서리"))
NON_CHARACTER_TITLES = SECTION_TITLES | ITEM_SLOT_TITLES

NAME_SHAPE = re.compile(r"^[가-힣&\s]+$")


def normalize_character_name(name: str) -> str:
    """Undo HTML entity artifacts and collapse whitespace."""
    name = name.replace("&amp;", "&").replace("&nbsp;", " ").replace("\xa0", " ")
    return re.sub(r"\s+", " ", name).strip()


def is_valid_character(name: str) -> bool:
    return normalize_character_name(name) in VALID_CHARACTERS


def looks_like_name(text: str) -> bool:
    """Check the bold-run shape of a character name (Hangul, '&', spaces)."""
    return bool(text) and bool(NAME_SHAPE.match(text)) and text not in NON_CHARACTER_TITLES
