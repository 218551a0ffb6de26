from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import Iterable, List, Sequence

from markdown_it import MarkdownIt

from .model import (
    Block,
    Bold,
    BulletItem,
    BulletList,
    Chunk,
    Document,
    Heading,
    InlineRun,
    MathBlock,
    Paragraph,
    ParserState,
    PlainText,
)
from .segmenter import DEFAULT_SEPARATOR, MATH_SPAN_RE, is_math_span, segment

logger = logging.getLogger(__name__)

HEADING_PREFIXES = (("#### ", 4), ("### ", 3), ("## ", 2), ("# ", 1))

# Authoring macros applied to every chunk that carries math, in this order.
MATH_CLEANUP = (
    ("\\$", "$"),
    ("**", ""),
    ("\\newlineeq", "="),
    ("\\newline", " "),
)

SHORT_CHUNK_LIMIT = 3

BOLD_SPAN_RE = re.compile(r"\*\*(.+?)\*\*", re.S)

_inline_md = MarkdownIt("zero").enable("emphasis")


def parse_content(text: str, separator: str = DEFAULT_SEPARATOR) -> Document:
    """Segment and parse one answer or explanation string."""
    document, state = parse_chunks(segment(text, separator=separator), ParserState())
    if not state.is_idle:
        logger.debug("Content ended with an open math delimiter: %r", state)
    return document


def parse_chunks(
    chunks: Iterable[Chunk | str], state: ParserState | None = None
) -> tuple[Document, ParserState]:
    blocks: List[Block] = []
    state = state or ParserState()
    for chunk in chunks:
        emitted, state = parse_chunk(chunk, state)
        blocks.extend(emitted)
    return Document(blocks=blocks), state


def parse_chunk(chunk: Chunk | str, state: ParserState) -> tuple[List[Block], ParserState]:
    """Fold a single chunk into blocks, returning the state for the next one."""
    text = chunk.text if isinstance(chunk, Chunk) else chunk
    stripped = text.strip()
    if not stripped:
        return [], state
    short = len(stripped) < SHORT_CHUNK_LIMIT

    if short and "$" in stripped and state.is_idle:
        logger.debug("Swallowed dangling opening delimiter %r", stripped)
        return [], replace(state, pending_math_open=True)

    if state.pending_math_open:
        latex = _cleanup_math(stripped.strip("$")).strip()
        state = ParserState(pending_math_close=True)
        return ([MathBlock(latex=latex)] if latex else []), state

    if short and "$" in stripped and state.pending_math_close:
        logger.debug("Swallowed dangling closing delimiter %r", stripped)
        return [], replace(state, pending_math_close=False)

    if short and ":" in stripped:
        return [], state

    if "$" in stripped:
        return _parse_math_chunk(stripped), state
    return _parse_plain_chunk(text), state


def _parse_math_chunk(text: str) -> List[Block]:
    blocks: List[Block] = []
    for part in MATH_SPAN_RE.split(_cleanup_math(text)):
        if not part.strip():
            continue
        if is_math_span(part):
            latex = part[1:-1].strip()
            if latex:
                blocks.append(MathBlock(latex=latex))
            continue
        if part.count("$"):
            logger.debug("Unmatched math delimiter kept as text: %r", part)
        heading = _heading(part)
        if heading is not None:
            blocks.append(heading)
        else:
            blocks.append(Paragraph(runs=[PlainText(_trim_colon(part.strip()))]))
    return blocks


def _parse_plain_chunk(text: str) -> List[Block]:
    heading = _heading(text)
    if heading is not None:
        return [heading]

    lines = [line for line in _trim_colon(text).split("\n") if line.strip()]
    if not any(line.strip().startswith("-") for line in lines):
        return [Paragraph(runs=parse_inline(_trim_colon(text.strip())))]

    blocks: List[Block] = []
    items: List[BulletItem] = []
    list_at = None
    for line in lines:
        trimmed = line.strip()
        if trimmed.startswith("-"):
            if list_at is None:
                list_at = len(blocks)
            content = trimmed[1:].strip()
            items.append(BulletItem(indent_level=line.index("-") // 2, runs=parse_inline(content)))
        else:
            blocks.append(Paragraph(runs=parse_inline(trimmed)))
    blocks.insert(list_at, BulletList(items=items))
    return blocks


def _heading(text: str) -> Heading | None:
    candidate = _trim_colon(text.strip())
    for prefix, level in HEADING_PREFIXES:
        if candidate.startswith(prefix):
            title = candidate[len(prefix) :].replace("**", "").strip()
            return Heading(level=level, text=title)
    return None


def _trim_colon(text: str) -> str:
    stripped = text.rstrip()
    if stripped.endswith(":"):
        return stripped[:-1]
    return text


def _cleanup_math(text: str) -> str:
    for old, new in MATH_CLEANUP:
        text = text.replace(old, new)
    return text


def parse_inline(text: str) -> List[InlineRun]:
    """Split text into plain and bold runs on ``**`` markers."""
    if not text:
        return []
    tokens = _inline_md.parseInline(text)
    runs: List[InlineRun] = []
    bold = False
    for tok in _children(tokens):
        if tok.type == "text":
            _append_run(runs, tok.content, bold)
        elif tok.type in {"strong_open", "strong_close"} and tok.markup == "**":
            bold = tok.type == "strong_open"
        elif tok.type in {"strong_open", "strong_close", "em_open", "em_close"}:
            _append_run(runs, tok.markup, bold)
        elif tok.content:
            _append_run(runs, tok.content, bold)
    return _split_unpaired_bold(runs)


def _split_unpaired_bold(runs: List[InlineRun]) -> List[InlineRun]:
    # Markers markdown-it leaves unpaired by its flanking rules, e.g. ``**Note:**text``.
    result: List[InlineRun] = []
    for run in runs:
        if not isinstance(run, PlainText) or "**" not in run.text:
            _append_run(result, run.text, isinstance(run, Bold))
            continue
        for index, part in enumerate(BOLD_SPAN_RE.split(run.text)):
            _append_run(result, part, index % 2 == 1)
    return result


def _children(tokens: Sequence) -> list:
    children: list = []
    for tok in tokens:
        children.extend(tok.children or [])
    return children


def _append_run(runs: List[InlineRun], text: str, bold: bool) -> None:
    if not text:
        return
    kind = Bold if bold else PlainText
    if runs and type(runs[-1]) is kind:
        runs[-1] = kind(runs[-1].text + text)
    else:
        runs.append(kind(text))
