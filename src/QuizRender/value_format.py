from __future__ import annotations

import json
import logging
import math
import re

logger = logging.getLogger(__name__)

KEY_LESSON_MARKER = "***Key Lesson:"

NUMBER_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?", re.ASCII)


def format_signed_value(raw: str) -> str:
    """Render negative numbers the accounting way: ``-5`` becomes ``(5)``.

    Anything that is not a finite number comes back untouched.
    """
    if not isinstance(raw, str) or not NUMBER_RE.fullmatch(raw.strip()):
        return raw
    value = float(raw)
    if not math.isfinite(value) or value >= 0:
        return raw
    return f"({_format_number(abs(value))})"


def _format_number(value: float) -> str:
    if value.is_integer():
        return str(int(value))
    return repr(value)


def normalize_answer(raw: str) -> str:
    """Clean up a stored answer for display.

    JSON string arrays are joined with ``", "``, pipe separated parts are
    put on their own lines, and everything else is trimmed. Any failure
    returns ``raw`` as it was given.
    """
    try:
        cleaned = raw
        parts = _json_string_list(raw)
        if parts is not None:
            cleaned = ", ".join(part.strip() for part in parts)
        if "|" in cleaned:
            return "\n".join(part.strip() for part in cleaned.split("|"))
        return cleaned.strip()
    except (AttributeError, TypeError):
        logger.debug("Could not normalize answer %r", raw)
        return raw


def _json_string_list(raw: str) -> list[str] | None:
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    if isinstance(data, list) and all(isinstance(item, str) for item in data):
        return data
    return None


def answer_latex(raw: str) -> str | None:
    """Return the math source for an answer that carries ``$`` delimiters."""
    cleaned = normalize_answer(raw)
    if "$" not in cleaned:
        return None
    return cleaned.replace("$", "")


def extract_key_lesson(explanation: str) -> str | None:
    if not explanation or KEY_LESSON_MARKER not in explanation:
        return None
    lesson = explanation.split(KEY_LESSON_MARKER, 1)[1].strip()
    lesson = lesson.replace("***", "", 1).strip()
    return lesson or None
