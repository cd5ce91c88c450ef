"""Document tree models for Jira rich-text payloads.

Mirrors the subset of Atlassian Document Format (ADF) produced by the
plain-text converter. Every node is a frozen dataclass holding tuples, so a
Document is immutable and compares structurally.

Reference: https://developer.atlassian.com/cloud/jira/platform/apis/document/structure/
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

__all__ = [
    "ADF_VERSION",
    "Block",
    "BulletList",
    "CodeBlock",
    "Document",
    "Heading",
    "InlineRun",
    "ListItem",
    "MarkType",
    "MarkedText",
    "OrderedList",
    "Paragraph",
    "PlainText",
]

# ADF document format version (the "version" field of the root node)
ADF_VERSION = 1


class MarkType(str, Enum):
    """Inline styling marks supported by the dialect.

    Values are the ADF mark type names, so ``mark.value`` goes straight onto
    the wire.
    """

    STRONG = "strong"
    EMPHASIS = "em"
    CODE = "code"


@dataclass(frozen=True)
class PlainText:
    """Unstyled text run."""

    text: str


@dataclass(frozen=True)
class MarkedText:
    """Text run carrying exactly one mark (marks never nest)."""

    text: str
    mark: MarkType


InlineRun = Union[PlainText, MarkedText]


@dataclass(frozen=True)
class Paragraph:
    inline: tuple[InlineRun, ...] = ()


@dataclass(frozen=True)
class Heading:
    level: int
    inline: tuple[InlineRun, ...] = ()

    def __post_init__(self) -> None:
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be in 1..6, got {self.level}")


@dataclass(frozen=True)
class ListItem:
    """List entry; the dialect allows a single paragraph per item."""

    paragraph: Paragraph


@dataclass(frozen=True)
class BulletList:
    items: tuple[ListItem, ...] = ()


@dataclass(frozen=True)
class OrderedList:
    items: tuple[ListItem, ...] = ()


@dataclass(frozen=True)
class CodeBlock:
    language: str | None
    text: str


Block = Union[Paragraph, Heading, BulletList, OrderedList, CodeBlock]


@dataclass(frozen=True)
class Document:
    """Root of the tree: blocks in source order plus the fixed ADF version."""

    blocks: tuple[Block, ...] = ()
    version: int = field(default=ADF_VERSION, init=False)
