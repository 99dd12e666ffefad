"""Extract the developer comment and raw change lines from one character block."""

from dataclasses import dataclass, field, replace

from .dom import Node, collapse, tag_of, text_of
from .models import DEFAULT_TARGET
from .recognize import ArrowStatement, Description, SkillHeader, Unmatched, is_comment_line, recognize
from .segment import LIST_TAGS, CharacterBlock


@dataclass(frozen=True)
class WalkState:
    """Context carried from one list line to the next."""

    target: str = DEFAULT_TARGET


@dataclass
class RawNumeric:
    """An arrow line before cleaning and categorization."""

    target: str
    stat: str
    before: str
    after: str


@dataclass
class RawDescription:
    """A free-text line."""

    target: str
    description: str
    is_new: bool = False
    is_removed: bool = False


RawChange = RawNumeric | RawDescription


@dataclass
class ExtractedBlock:
    """Everything pulled out of one character block."""

    name: str
    dev_comment: str | None
    changes: list[RawChange] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)


def item_text(li: Node) -> str:
    """Visible text of a list item without its nested lists."""
    pieces = []
    for part in li.parts:
        if isinstance(part, str):
            pieces.append(part)
        elif part.tag not in LIST_TAGS:
            pieces.append(text_of(part))
    return collapse("".join(pieces))


def extract_comment(elements: list[Node]) -> str | None:
    """Join commentary paragraphs that precede the first change list.

    Args:
        elements: Block elements in document order

    Returns:
        Paragraphs joined with a single space, or None if there are none
    """
    paragraphs = []
    for element in elements:
        if tag_of(element) in LIST_TAGS:
            break
        if tag_of(element) != "p":
            continue
        text = collapse(text_of(element))
        if is_comment_line(text):
            paragraphs.append(text)
    return " ".join(paragraphs) if paragraphs else None


def walk_list(
    node: Node, state: WalkState, out: ExtractedBlock, depth: int = 0
) -> WalkState:
    """Record changes from a list and all of its nested lists.

    Args:
        node: A ``ul``/``ol`` element
        state: Context from the previous line
        out: Accumulator for changes and dropped lines
        depth: Nesting depth, 0 for top-level lists

    Returns:
        Context after the last line of the list
    """
    for li in node.children:
        if li.tag != "li":
            continue

        token = recognize(item_text(li), whole_line_header=depth > 0)
        if isinstance(token, SkillHeader):
            state = replace(state, target=token.target)
        elif isinstance(token, ArrowStatement):
            out.changes.append(RawNumeric(state.target, token.stat, token.before, token.after))
        elif isinstance(token, Description):
            out.changes.append(
                RawDescription(state.target, token.text, is_new=token.is_new, is_removed=token.is_removed)
            )
        elif isinstance(token, Unmatched):
            out.dropped.append(token.text)

        for child in li.children:
            if child.tag in LIST_TAGS:
                state = walk_list(child, state, out, depth + 1)

    return state


def extract_block(block: CharacterBlock) -> ExtractedBlock:
    """Extract comment and raw changes for one character.

    Arrow lines the split patterns reject are collected in ``dropped`` for the
    run report; they never abort the block.
    """
    out = ExtractedBlock(name=block.name, dev_comment=extract_comment(block.elements))

    state = WalkState()
    for element in block.elements:
        if tag_of(element) in LIST_TAGS:
            state = walk_list(element, state, out)

    return out
