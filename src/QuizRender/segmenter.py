from __future__ import annotations

import re
from typing import List

from .model import RAW_MATH, RAW_TEXT, Chunk

DEFAULT_SEPARATOR = "***"

MATH_SPAN_RE = re.compile(r"(\$[^$]+\$)")


def segment(text: str, separator: str = DEFAULT_SEPARATOR) -> List[Chunk]:
    """Split raw content into ordered chunks.

    Text is always cut on ``separator``. When the input holds a ``$`` the
    pieces are further cut around complete ``$...$`` spans, which become
    ``raw-math`` chunks. Chunks that are blank after trimming are dropped.
    """
    if not text:
        return []
    pieces = text.split(separator) if separator else [text]
    if "$" not in text:
        return [Chunk(piece, RAW_TEXT) for piece in pieces if piece.strip()]

    chunks: List[Chunk] = []
    for piece in pieces:
        for part in MATH_SPAN_RE.split(piece):
            if not part.strip():
                continue
            kind = RAW_MATH if is_math_span(part) else RAW_TEXT
            chunks.append(Chunk(part, kind))
    return chunks


def is_math_span(text: str) -> bool:
    return MATH_SPAN_RE.fullmatch(text) is not None
