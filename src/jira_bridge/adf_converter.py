"""Plain text to Atlassian Document Format (ADF) converter.

Converts the Markdown-like text used in issue descriptions and comments into a
Document tree, and serializes that tree to the ADF JSON Jira expects.

Supported dialect (one construct per line, no nesting):
- Fenced code blocks (```lang ... ```), content kept verbatim
- Bullet items ("- " / "* ") and ordered items ("1. ")
- Headings ("# ".."###### ", or a line ending with ":" followed by a blank line)
- Paragraphs with inline **strong**, *em* and `code` marks

Conversion never raises: unterminated fences and marks consume the rest of
their scope instead of dropping content.

Reference: https://developer.atlassian.com/cloud/jira/platform/apis/document/structure/
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .document import (
    Block,
    BulletList,
    CodeBlock,
    Document,
    Heading,
    InlineRun,
    ListItem,
    MarkedText,
    MarkType,
    OrderedList,
    Paragraph,
    PlainText,
)

logger = logging.getLogger("jira_bridge.adf")

__all__ = [
    "DEFAULT_CODE_LANGUAGE",
    "convert",
    "document_to_adf",
    "parse_inline",
    "text_to_adf",
]

# Language recorded for fences opened without a tag
DEFAULT_CODE_LANGUAGE = "plain"

_FENCE_RE = re.compile(r"^```([^`]*)$")
_ORDERED_ITEM_RE = re.compile(r"^\d+\. ")
_HASH_HEADING_RE = re.compile(r"^(#{1,6}) (.*)$")
_BULLET_PREFIXES = ("- ", "* ")
_COLON_HEADING_LEVEL = 3

# Opening characters for inline marks
_MARK_CHARS = ("*", "`")


class ListKind(str, Enum):
    """Kind of list currently being accumulated."""

    BULLET = "bullet"
    ORDERED = "ordered"


@dataclass
class _OpenList:
    kind: ListKind
    items: list[ListItem] = field(default_factory=list)

    def build(self) -> Block:
        items = tuple(self.items)
        if self.kind is ListKind.BULLET:
            return BulletList(items)
        return OrderedList(items)


@dataclass
class _ScanState:
    """Accumulators threaded through the line scan.

    ``open_list`` is None when no list is open. ``code_lines`` is None outside
    a fenced block.
    """

    blocks: list[Block] = field(default_factory=list)
    open_list: _OpenList | None = None
    code_language: str | None = None
    code_lines: list[str] | None = None

    @property
    def in_code_block(self) -> bool:
        return self.code_lines is not None

    def close_list(self) -> None:
        if self.open_list is not None:
            self.blocks.append(self.open_list.build())
            self.open_list = None

    def emit(self, block: Block) -> None:
        # Flushing the list first keeps blocks in source order
        self.close_list()
        self.blocks.append(block)

    def add_item(self, kind: ListKind, text: str) -> None:
        if self.open_list is None or self.open_list.kind is not kind:
            self.close_list()
            self.open_list = _OpenList(kind)
        self.open_list.items.append(ListItem(Paragraph(parse_inline(text))))

    def open_code_block(self, language: str) -> None:
        self.close_list()
        self.code_language = language
        self.code_lines = []

    def close_code_block(self) -> None:
        text = "\n".join(self.code_lines or [])
        language = self.code_language
        self.code_lines = None
        self.code_language = None
        self.emit(CodeBlock(language=language, text=text))


def convert(text: str) -> Document:
    """Convert dialect text into a Document tree.

    Lines are interpreted in a fixed priority order: fence, code block
    interior, blank line, bullet item, ordered item, heading, paragraph.

    Every non-item block closes the open list, headings and fences included,
    so list items after a heading or code block start a new list rather than
    rejoining the earlier one.

    Args:
        text: Raw description or comment text. Empty or whitespace-only input
            yields an empty Document.

    Returns:
        A new Document whose blocks follow source line order.

    Example:
        >>> convert("# Title\\n- one\\n- two").blocks[1]
        BulletList(items=(ListItem(...), ListItem(...)))
    """
    if not text or not text.strip():
        return Document()

    lines = text.split("\n")
    state = _ScanState()

    for index, line in enumerate(lines):
        trimmed = line.strip()

        fence = _FENCE_RE.match(trimmed)
        if fence:
            if state.in_code_block:
                state.close_code_block()
            else:
                state.open_code_block(fence.group(1).strip() or DEFAULT_CODE_LANGUAGE)
            continue

        if state.in_code_block:
            state.code_lines.append(line)
            continue

        if not trimmed:
            state.close_list()
            continue

        if trimmed.startswith(_BULLET_PREFIXES):
            state.add_item(ListKind.BULLET, trimmed[2:])
            continue

        ordered = _ORDERED_ITEM_RE.match(trimmed)
        if ordered:
            state.add_item(ListKind.ORDERED, trimmed[ordered.end() :])
            continue

        heading = _match_heading(trimmed, lines, index)
        if heading is not None:
            state.emit(heading)
            continue

        state.emit(Paragraph(parse_inline(trimmed)))

    if state.in_code_block:
        logger.debug(
            "adf_unterminated_code_block",
            extra={"code_lines": len(state.code_lines or [])},
        )
        state.close_code_block()
    state.close_list()

    logger.debug(
        "adf_convert_complete",
        extra={"line_count": len(lines), "block_count": len(state.blocks)},
    )
    return Document(blocks=tuple(state.blocks))


def _match_heading(trimmed: str, lines: list[str], index: int) -> Heading | None:
    """Return a Heading if the line is one, else None.

    A colon-terminated line only counts when the next line is blank or absent.
    This is a heuristic: prose ending in ":" before a blank line becomes a
    heading too.
    """
    hashed = _HASH_HEADING_RE.match(trimmed)
    if hashed:
        level = len(hashed.group(1))
        return Heading(level=level, inline=parse_inline(hashed.group(2).strip()))

    if trimmed.endswith(":"):
        is_last = index + 1 >= len(lines)
        if is_last or not lines[index + 1].strip():
            return Heading(level=_COLON_HEADING_LEVEL, inline=parse_inline(trimmed))

    return None


def parse_inline(line: str) -> tuple[InlineRun, ...]:
    """Split a single line into plain and marked text runs.

    Scans left to right. ``**`` opens a strong run, a lone ``*`` opens an
    emphasis run and a backtick opens a code run; each extends to the next
    matching marker or to end of line when unterminated. A backslash directly
    before a marker stops it from opening a run (the backslash stays in the
    text). Marks do not nest.

    Args:
        line: One line of text, without its newline.

    Returns:
        Runs in left-to-right order. Never empty: a line yielding no runs
        comes back as a single PlainText run.

    Example:
        >>> parse_inline("a **b**")
        (PlainText(text='a '), MarkedText(text='b', mark=<MarkType.STRONG: 'strong'>))
    """
    runs: list[InlineRun] = []
    pending: list[str] = []
    length = len(line)
    i = 0

    while i < length:
        char = line[i]
        escaped = i > 0 and line[i - 1] == "\\"

        if char not in _MARK_CHARS or escaped:
            pending.append(char)
            i += 1
            continue

        if line.startswith("**", i):
            marker, mark = "**", MarkType.STRONG
        elif char == "*":
            marker, mark = "*", MarkType.EMPHASIS
        else:
            marker, mark = "`", MarkType.CODE

        if pending:
            runs.append(PlainText("".join(pending)))
            pending = []

        start = i + len(marker)
        end = line.find(marker, start)
        if end == -1:
            end = length
        runs.append(MarkedText(line[start:end], mark))
        i = end + len(marker)

    if pending:
        runs.append(PlainText("".join(pending)))

    if not runs:
        return (PlainText(line),)
    return tuple(runs)


def document_to_adf(document: Document) -> dict[str, Any]:
    """Serialize a Document to ADF JSON.

    Empty text runs are left out because Jira rejects text nodes with empty
    text.

    Raises:
        TypeError: If the tree contains a node type ADF serialization does not
            know about.
    """
    return {
        "version": document.version,
        "type": "doc",
        "content": [_block_to_adf(block) for block in document.blocks],
    }


def text_to_adf(text: str) -> dict[str, Any]:
    """Convert dialect text straight to ADF JSON."""
    return document_to_adf(convert(text))


def _block_to_adf(block: Block) -> dict[str, Any]:
    if isinstance(block, Paragraph):
        return _paragraph_to_adf(block)
    if isinstance(block, Heading):
        return {
            "type": "heading",
            "attrs": {"level": block.level},
            "content": _inline_to_adf(block.inline),
        }
    if isinstance(block, BulletList):
        return {
            "type": "bulletList",
            "content": [_list_item_to_adf(item) for item in block.items],
        }
    if isinstance(block, OrderedList):
        return {
            "type": "orderedList",
            "content": [_list_item_to_adf(item) for item in block.items],
        }
    if isinstance(block, CodeBlock):
        node: dict[str, Any] = {
            "type": "codeBlock",
            "attrs": {"language": block.language or DEFAULT_CODE_LANGUAGE},
            "content": [],
        }
        if block.text:
            node["content"].append({"type": "text", "text": block.text})
        return node
    raise TypeError(f"Unsupported block node: {type(block).__name__}")


def _paragraph_to_adf(paragraph: Paragraph) -> dict[str, Any]:
    return {"type": "paragraph", "content": _inline_to_adf(paragraph.inline)}


def _list_item_to_adf(item: ListItem) -> dict[str, Any]:
    return {"type": "listItem", "content": [_paragraph_to_adf(item.paragraph)]}


def _inline_to_adf(runs: tuple[InlineRun, ...]) -> list[dict[str, Any]]:
    nodes: list[dict[str, Any]] = []
    for run in runs:
        if isinstance(run, MarkedText):
            node: dict[str, Any] = {
                "type": "text",
                "text": run.text,
                "marks": [{"type": run.mark.value}],
            }
        elif isinstance(run, PlainText):
            node = {"type": "text", "text": run.text}
        else:
            raise TypeError(f"Unsupported inline node: {type(run).__name__}")
        if run.text:
            nodes.append(node)
    return nodes
