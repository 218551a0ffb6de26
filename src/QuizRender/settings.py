from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from .ledger import DEFAULT_BASE_FONT_SIZE, DEFAULT_MIN_FONT_SIZE
from .segmenter import DEFAULT_SEPARATOR


@dataclass
class ContentSettings:
    separator: str = DEFAULT_SEPARATOR
    base_font_size: float = DEFAULT_BASE_FONT_SIZE
    min_font_size: float = DEFAULT_MIN_FONT_SIZE

    def __post_init__(self) -> None:
        self.base_font_size = float(self.base_font_size)
        self.min_font_size = float(self.min_font_size)
        if not self.separator:
            raise ValueError("separator must not be empty.")
        if self.min_font_size > self.base_font_size:
            raise ValueError("min_font_size cannot exceed base_font_size.")


def parse_settings(text: str) -> ContentSettings:
    """Read settings from YAML text; unknown keys are ignored."""
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError("Settings YAML root must be a mapping.")
    known = {f.name for f in fields(ContentSettings)}
    return ContentSettings(**{key: value for key, value in data.items() if key in known})


def load_settings(path: str | Path | None = None) -> ContentSettings:
    if path is None:
        return ContentSettings()
    path = Path(path).expanduser()
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    return parse_settings(path.read_text(encoding="utf-8"))
