from __future__ import annotations

from typing import Any, List

from .ledger import Fillable, Label, LedgerEngine, cell_reference, display_value
from .model import Block, Bold, BulletList, Document, Heading, InlineRun, MathBlock, Paragraph, PlainText

BLOCK_HEADING_TYPE = "heading"
BLOCK_PARAGRAPH_TYPE = "paragraph"
BLOCK_BULLET_LIST_TYPE = "bullet_list"
BLOCK_MATH_TYPE = "math"

INLINE_TEXT_TYPE = "text"
INLINE_BOLD_TYPE = "bold"


def document_to_dict(document: Document) -> dict[str, Any]:
    return {"blocks": [block_to_dict(block) for block in document.blocks]}


def block_to_dict(block: Block) -> dict[str, Any]:
    if isinstance(block, Heading):
        return {"type": BLOCK_HEADING_TYPE, "level": block.level, "text": block.text}
    if isinstance(block, Paragraph):
        return {"type": BLOCK_PARAGRAPH_TYPE, "runs": _runs(block.runs)}
    if isinstance(block, BulletList):
        return {
            "type": BLOCK_BULLET_LIST_TYPE,
            "items": [{"indent_level": item.indent_level, "runs": _runs(item.runs)} for item in block.items],
        }
    if isinstance(block, MathBlock):
        return {"type": BLOCK_MATH_TYPE, "latex": block.latex}
    raise TypeError(f"Unknown block: {block!r}")


def _runs(runs: List[InlineRun]) -> list[dict[str, str]]:
    result: list[dict[str, str]] = []
    for run in runs:
        if isinstance(run, Bold):
            result.append({"type": INLINE_BOLD_TYPE, "text": run.text})
        elif isinstance(run, PlainText):
            result.append({"type": INLINE_TEXT_TYPE, "text": run.text})
        else:
            raise TypeError(f"Unknown inline run: {run!r}")
    return result


def ledger_to_dict(engine: LedgerEngine) -> dict[str, Any]:
    """Grid snapshot for a renderer, including styling hints per row."""
    if not engine.is_valid:
        return {"valid": False, "error": engine.error, "rows": []}
    rows = []
    for row_index, (row, style) in enumerate(zip(engine.table.rows, engine.styles())):
        cells = {}
        for column, cell in row.cells.items():
            if isinstance(cell, Label):
                cells[column] = {"kind": "label", "text": cell.text}
            elif isinstance(cell, Fillable):
                cells[column] = {
                    "kind": "fillable",
                    "reference": cell_reference(row_index, column),
                    "options": list(cell.options),
                    "display": display_value(cell),
                    "is_correct": cell.is_correct,
                }
        rows.append(
            {
                "cells": cells,
                "font_size": style.font_size,
                "indent_level": style.normalized_level,
                "top_level": style.is_top_level,
            }
        )
    return {"valid": True, "complete": engine.is_complete, "rows": rows}
