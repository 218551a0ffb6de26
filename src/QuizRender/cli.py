from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from pathlib import Path

import yaml

from . import content_parser
from .ledger import LedgerEngine
from .serialization import document_to_dict, ledger_to_dict
from .settings import load_settings
from .utils import configure_logging, read_text


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="quizrender",
        description="Inspect quiz answer content and ledger questions.",
    )
    parser.add_argument("--config", type=str, help="Path to a YAML settings file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    parse_cmd = sub.add_parser("parse", help="Parse an answer or explanation text file")
    parse_cmd.add_argument("input", type=str, help="Path to the content file")
    parse_cmd.add_argument("--format", choices=("yaml", "json"), default="yaml")

    ledger_cmd = sub.add_parser("ledger", help="Load a ledger question JSON payload")
    ledger_cmd.add_argument("input", type=str, help="Path to the ledger JSON file")
    ledger_cmd.add_argument("--seed", type=int, help="Seed for the option shuffle")
    ledger_cmd.add_argument("--format", choices=("yaml", "json"), default="yaml")
    return parser


def _dump(data: dict, fmt: str) -> str:
    if fmt == "json":
        return json.dumps(data, ensure_ascii=False, indent=2)
    return yaml.safe_dump(data, allow_unicode=True, sort_keys=False)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    settings = load_settings(args.config)
    input_path = Path(args.input).expanduser()

    logging.info("Reading %s", input_path)
    text = read_text(input_path)
    logging.debug("Input length: %d chars", len(text))

    if args.command == "parse":
        document = content_parser.parse_content(text, separator=settings.separator)
        logging.info("Parsed %d blocks", len(document.blocks))
        sys.stdout.write(_dump(document_to_dict(document), args.format))
        return 0

    rng = random.Random(args.seed) if args.seed is not None else None
    engine = LedgerEngine(
        text,
        rng=rng,
        base_font_size=settings.base_font_size,
        min_font_size=settings.min_font_size,
    )
    sys.stdout.write(_dump(ledger_to_dict(engine), args.format))
    if not engine.is_valid:
        logging.error("Invalid table data: %s", engine.error)
        return 1
    correct, answered, total = engine.score()
    logging.info("%d of %d cells answered, %d correct", answered, total, correct)
    return 0


if __name__ == "__main__":
    sys.exit(main())
