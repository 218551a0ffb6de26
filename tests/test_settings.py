from pathlib import Path

import pytest

from QuizRender.settings import ContentSettings, load_settings, parse_settings


def test_defaults():
    settings = load_settings(None)
    assert settings == ContentSettings()
    assert settings.separator == "***"


def test_parse_settings_ignores_unknown_keys():
    settings = parse_settings("separator: '|||'\nbase_font_size: 18\ntheme: dark\n")
    assert settings.separator == "|||"
    assert settings.base_font_size == 18.0
    assert settings.min_font_size == 12.0


def test_parse_settings_rejects_bad_root():
    with pytest.raises(ValueError):
        parse_settings("- a\n- b\n")


def test_font_sizes_validated():
    with pytest.raises(ValueError):
        parse_settings("base_font_size: 10\nmin_font_size: 12\n")


def test_load_settings_from_file(tmp_path: Path):
    path = tmp_path / "settings.yaml"
    path.write_text("min_font_size: 11\n", encoding="utf-8")
    assert load_settings(path).min_font_size == 11.0
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")
