from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

RAW_TEXT = "raw-text"
RAW_MATH = "raw-math"


@dataclass(frozen=True)
class Block:
    """Base class for block-level nodes."""


@dataclass(frozen=True)
class Document:
    blocks: List[Block] = field(default_factory=list)


@dataclass(frozen=True)
class Heading(Block):
    level: int
    text: str


@dataclass(frozen=True)
class Paragraph(Block):
    runs: List["InlineRun"]


@dataclass(frozen=True)
class BulletItem:
    indent_level: int
    runs: List["InlineRun"]


@dataclass(frozen=True)
class BulletList(Block):
    items: List[BulletItem]


@dataclass(frozen=True)
class MathBlock(Block):
    latex: str


@dataclass(frozen=True)
class InlineRun:
    """Base class for inline nodes."""


@dataclass(frozen=True)
class PlainText(InlineRun):
    text: str


@dataclass(frozen=True)
class Bold(InlineRun):
    text: str


@dataclass(frozen=True)
class Chunk:
    text: str
    kind: str = RAW_TEXT


@dataclass(frozen=True)
class ParserState:
    """Math continuation flags carried from one chunk to the next.

    Owned by the caller for a single document. A fresh document always
    starts from ``ParserState()``.
    """

    pending_math_open: bool = False
    pending_math_close: bool = False

    def __post_init__(self) -> None:
        if self.pending_math_open and self.pending_math_close:
            raise ValueError("Only one pending math flag may be set at a time.")

    @property
    def is_idle(self) -> bool:
        return not (self.pending_math_open or self.pending_math_close)
