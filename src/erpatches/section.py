"""Locate the character changes section of a patch note."""

from .dom import Node, collapse, tag_of, text_of
from .registry import CHARACTER_SECTION_TITLE, SIBLING_SECTION_TITLES

HEADING_TAGS = frozenset(("h1", "h2", "h3", "h4", "h5", "h6"))

# Top-level elements the segmenter knows how to read
BLOCK_TAGS = frozenset(("p", "ul", "ol", *HEADING_TAGS))


def is_heading(node: Node) -> bool:
    return tag_of(node) in HEADING_TAGS


def heading_text(node: Node) -> str:
    return collapse(text_of(node))


def locate_character_section(root: Node) -> list[Node]:
    """Return the top-level elements between the '실험체' heading and the next section.

    The section ends at the first following heading titled with a sibling
    section (weapons, items, system...) or at end of document.

    Args:
        root: Article content root

    Returns:
        Elements inside the section, in document order. Empty if the document
        has no character section (not a balance patch).
    """
    children = [c for c in root.children if tag_of(c) in BLOCK_TAGS]

    start = next(
        (i for i, c in enumerate(children) if is_heading(c) and heading_text(c) == CHARACTER_SECTION_TITLE),
        None,
    )
    if start is None:
        return []

    end = len(children)
    for i in range(start + 1, len(children)):
        if is_heading(children[i]) and heading_text(children[i]) in SIBLING_SECTION_TITLES:
            end = i
            break

    return children[start + 1 : end]
