"""Minimal ordered element tree used by the parsing stages.

The section locator, segmenter and extractor only ever ask three questions of
a document: an element's tag, its element children and its visible text.
``Node`` answers those without carrying a parser around, so tests can build
documents by hand and production code converts BeautifulSoup output once.
"""

import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, NavigableString, Tag

CONTENT_SELECTOR = ".er-article-detail__content"

_WHITESPACE = re.compile(r"\s+")


@dataclass
class Node:
    """An element with its ordered children.

    ``parts`` interleaves text strings and child nodes in document order so
    that ``text_of`` reproduces what a browser would show.
    """

    tag: str
    parts: list["Node | str"] = field(default_factory=list)

    @property
    def children(self) -> list["Node"]:
        return [p for p in self.parts if isinstance(p, Node)]

    def to_dict(self) -> dict:
        """Convert to dictionary for debugging."""
        return {"tag": self.tag, "text": text_of(self), "children": [c.to_dict() for c in self.children]}


def el(tag: str, *parts: "Node | str") -> Node:
    """Build a node by hand: ``el("p", el("span", el("strong", "니아")))``."""
    return Node(tag=tag.lower(), parts=list(parts))


def tag_of(node: Node) -> str:
    return node.tag


def children_of(node: Node) -> list[Node]:
    return node.children


def text_of(node: Node) -> str:
    """Visible text of a node and its descendants, unmodified."""
    return "".join(p if isinstance(p, str) else text_of(p) for p in node.parts)


def collapse(text: str) -> str:
    """Collapse whitespace runs to single spaces and strip."""
    return _WHITESPACE.sub(" ", text).strip()


def find_child(node: Node, tag: str) -> Node | None:
    """First direct child with ``tag``."""
    return next((c for c in node.children if c.tag == tag), None)


def find_descendant(node: Node, tag: str) -> Node | None:
    """First descendant with ``tag`` in document order."""
    for child in node.children:
        if child.tag == tag:
            return child
        found = find_descendant(child, tag)
        if found is not None:
            return found
    return None


def iter_descendants(node: Node, tag: str):
    """Yield every descendant with ``tag`` in document order."""
    for child in node.children:
        if child.tag == tag:
            yield child
        yield from iter_descendants(child, tag)


def from_soup(element: Tag) -> Node:
    """Convert a BeautifulSoup element into a ``Node`` tree.

    Comments, scripts and other non-text strings are dropped.
    """
    parts: list[Node | str] = []
    for child in element.children:
        if isinstance(child, Tag):
            parts.append(from_soup(child))
        elif type(child) is NavigableString:
            parts.append(str(child))
    return Node(tag=element.name.lower(), parts=parts)


def parse_content(html: str) -> Node | None:
    """Parse a full patch note page and return its article content root.

    Args:
        html: Page HTML

    Returns:
        Content root node, or None if the page has no article body
    """
    soup = BeautifulSoup(html, "html.parser")
    content = soup.select_one(CONTENT_SELECTOR)
    if content is None:
        return None
    return from_soup(content)


def parse_fragment(html: str) -> Node:
    """Parse an HTML fragment into a synthetic ``div`` root."""
    soup = BeautifulSoup(html, "html.parser")
    root = Node(tag="div")
    for child in soup.children:
        if isinstance(child, Tag):
            root.parts.append(from_soup(child))
        elif type(child) is NavigableString:
            root.parts.append(str(child))
    return root
