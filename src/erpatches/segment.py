"""Split the character section into one block per character.

Two authoring dialects are handled:

- flat: ``<p><span><strong>니아</strong></span></p>`` followed by sibling
  comment paragraphs and change lists, up to the next name paragraph.
- nested (hotfix notes): ``<ul><li><p><span><strong>니아</strong></span></p>
  <ul>...changes...</ul></li></ul>``, where the item's own list holds the changes.

Only top-level elements (and the direct items of top-level lists) are
checked for names; sub-lists inside a claimed item are never re-read as a
new character.
"""

from dataclasses import dataclass, field
from typing import Literal

from .dom import Node, collapse, find_child, iter_descendants, tag_of, text_of
from .registry import is_valid_character, looks_like_name, normalize_character_name

LIST_TAGS = frozenset(("ul", "ol"))

Dialect = Literal["flat", "nested"]


@dataclass
class CharacterBlock:
    """Elements describing one character's changes in one document."""

    name: str
    dialect: Dialect
    elements: list[Node] = field(default_factory=list)
    _wrapper: Node | None = field(default=None, repr=False)

    def add_list_item(self, li: Node) -> None:
        """Append a stray top-level list item, grouping consecutive ones in one list."""
        if self._wrapper is None or not self.elements or self.elements[-1] is not self._wrapper:
            self._wrapper = Node(tag="ul")
            self.elements.append(self._wrapper)
        self._wrapper.parts.append(li)


def bold_name(paragraph: Node) -> str | None:
    """Return the name if the paragraph's whole text is one bold run shaped like a name.

    Args:
        paragraph: A ``p`` element

    Returns:
        The bold text, or None if the paragraph is not a name header
    """
    strong = None
    for span in iter_descendants(paragraph, "span"):
        strong = find_child(span, "strong") or find_child(span, "b")
        if strong is not None:
            break
    if strong is None:
        return None

    strong_text = collapse(text_of(strong))
    if strong_text != collapse(text_of(paragraph)):
        return None
    if not looks_like_name(strong_text):
        return None
    return strong_text


def list_item_name(li: Node) -> str | None:
    """Name carried by a list item's first direct paragraph (hotfix dialect)."""
    first_p = find_child(li, "p")
    if first_p is None:
        return None
    return bold_name(first_p)


def segment_characters(section: list[Node]) -> list[CharacterBlock]:
    """Group section elements into per-character blocks.

    A bold name that is not on the roster still closes the previous block,
    but its own block is discarded.

    Args:
        section: Top-level elements from ``locate_character_section``

    Returns:
        Blocks for roster characters, in document order
    """
    blocks: list[CharacterBlock] = []
    current: CharacterBlock | None = None

    def start(name: str, dialect: Dialect) -> CharacterBlock | None:
        if not is_valid_character(name):
            return None
        block = CharacterBlock(name=normalize_character_name(name), dialect=dialect)
        blocks.append(block)
        return block

    for element in section:
        tag = tag_of(element)

        if tag == "p":
            name = bold_name(element)
            if name is not None:
                current = start(name, "flat")
            elif current is not None:
                current.elements.append(element)

        elif tag in LIST_TAGS:
            # A list that carries no names belongs to the current block whole
            if not any(list_item_name(li) for li in element.children if li.tag == "li"):
                if current is not None:
                    current.elements.append(element)
                continue

            for li in element.children:
                if li.tag != "li":
                    continue
                name = list_item_name(li)
                if name is not None:
                    current = start(name, "nested")
                    if current is not None:
                        first_p = find_child(li, "p")
                        current.elements.extend(c for c in li.children if c is not first_p)
                elif current is not None:
                    current.add_list_item(li)

    return blocks
