from __future__ import annotations

import inspect
import json
import logging
import random
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Tuple, Union

from .value_format import format_signed_value

logger = logging.getLogger(__name__)

MAX_COLUMNS = 4

DEFAULT_BASE_FONT_SIZE = 16.0
DEFAULT_MIN_FONT_SIZE = 12.0


class InvalidLedgerError(ValueError):
    """The ledger payload cannot be turned into a table."""


class SelectionError(RuntimeError):
    """An option was chosen outside of a valid selection."""


@dataclass
class LedgerCell:
    """Base class for ledger grid cells."""


@dataclass
class Label(LedgerCell):
    text: str


@dataclass
class Fillable(LedgerCell):
    options: List[str]
    correct_value: str
    explanation: str | None = None
    value: str | None = None
    is_correct: bool | None = None
    pending: bool = False

    @property
    def answered(self) -> bool:
        return self.value is not None

    @property
    def locked(self) -> bool:
        return self.pending or self.answered


@dataclass
class LedgerRow:
    cells: Dict[str, LedgerCell]

    def __getitem__(self, column: str) -> LedgerCell:
        return self.cells[column]

    def fillables(self) -> Iterator[Tuple[str, Fillable]]:
        for column, cell in self.cells.items():
            if isinstance(cell, Fillable):
                yield column, cell


@dataclass
class LedgerTable:
    rows: List[LedgerRow] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)

    def cell(self, row_index: int, column: str) -> LedgerCell:
        return self.rows[row_index][column]

    def fillables(self) -> Iterator[Tuple[int, str, Fillable]]:
        for row_index, row in enumerate(self.rows):
            for column, cell in row.fillables():
                yield row_index, column, cell

    @property
    def is_complete(self) -> bool:
        return all(cell.answered for _, _, cell in self.fillables())


@dataclass(frozen=True)
class RowStyle:
    """Indentation driven styling hints for one row."""

    indentation: int
    normalized_level: float
    font_size: float
    is_top_level: bool


@dataclass(frozen=True)
class CheckResult:
    is_correct: bool
    correct_value: str | None = None


@dataclass(frozen=True)
class SelectionOutcome:
    cell_reference: str
    value: str
    is_correct: bool
    display: str
    explanation: str | None
    completed: bool


AnswerChecker = Callable[[str, str], Union[CheckResult, Awaitable[CheckResult]]]


def cell_reference(row_index: int, column: str) -> str:
    """External address of a cell: column letter plus the 1-based row."""
    return f"{column}{row_index + 1}"


def parse_ledger(payload: str | list, rng: random.Random | None = None) -> LedgerTable:
    """Build a table from the authoring JSON, shuffling every option list once."""
    if isinstance(payload, str):
        try:
            data = json.loads(payload)
        except ValueError as exc:
            raise InvalidLedgerError(f"Ledger payload is not valid JSON: {exc}") from exc
    else:
        data = payload
    if not isinstance(data, list) or not data:
        raise InvalidLedgerError("Ledger payload must be a non-empty list of rows.")

    rng = rng or random.Random()
    rows: List[LedgerRow] = []
    for index, raw_row in enumerate(data):
        if not isinstance(raw_row, dict):
            raise InvalidLedgerError(f"Row {index + 1} must be an object.")
        if not 0 < len(raw_row) <= MAX_COLUMNS:
            raise InvalidLedgerError(f"Row {index + 1} must have between 1 and {MAX_COLUMNS} columns.")
        cells = {str(column): _build_cell(raw, cell_reference(index, str(column)), rng) for column, raw in raw_row.items()}
        rows.append(LedgerRow(cells=cells))
    return LedgerTable(rows=rows)


def _build_cell(raw: Any, reference: str, rng: random.Random) -> LedgerCell:
    if raw is None:
        return Label("")
    if isinstance(raw, (str, int, float)) and not isinstance(raw, bool):
        return Label(str(raw))
    if not isinstance(raw, dict):
        raise InvalidLedgerError(f"Cell {reference} has an unsupported value.")
    if not raw.get("isEditable"):
        return Label(_text(raw.get("value", raw.get("correct", ""))))

    options = raw.get("options")
    correct = raw.get("correct")
    if not isinstance(options, list) or not options or correct is None:
        raise InvalidLedgerError(f"Cell {reference} needs options and a correct value.")
    shuffled = [_text(option) for option in options]
    rng.shuffle(shuffled)
    explanation = raw.get("explanation")
    value = raw.get("value")
    return Fillable(
        options=shuffled,
        correct_value=_text(correct),
        explanation=_text(explanation) if explanation else None,
        value=_text(value) if value else None,
        is_correct=raw.get("isCorrect"),
    )


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def display_value(cell: LedgerCell) -> str | None:
    """Text a renderer shows for a cell; ``None`` means still unanswered."""
    if isinstance(cell, Label):
        return cell.text
    if isinstance(cell, Fillable):
        if not cell.answered:
            return None
        if cell.is_correct is False:
            return format_signed_value(cell.correct_value)
        return format_signed_value(cell.value)
    raise TypeError(f"Unknown ledger cell: {cell!r}")


def row_styles(
    table: LedgerTable,
    base_size: float = DEFAULT_BASE_FONT_SIZE,
    min_size: float = DEFAULT_MIN_FONT_SIZE,
) -> List[RowStyle]:
    indents = [_leading_whitespace(row) for row in table.rows]
    max_indentation = max(indents, default=0)
    styles: List[RowStyle] = []
    for indentation in indents:
        if max_indentation == 0:
            styles.append(RowStyle(indentation, 0.0, base_size, True))
            continue
        size = base_size - indentation * (base_size - min_size) / max_indentation
        styles.append(
            RowStyle(
                indentation=indentation,
                normalized_level=indentation / max_indentation,
                font_size=max(size, min_size),
                is_top_level=indentation != max_indentation,
            )
        )
    return styles


def _leading_whitespace(row: LedgerRow) -> int:
    if not row.cells:
        return 0
    primary = next(iter(row.cells.values()))
    if not isinstance(primary, Label):
        return 0
    return len(primary.text) - len(primary.text.lstrip())


class LedgerEngine:
    """Selection flow over one ledger question.

    ``Idle -> Selecting(cell) -> Idle``. Every fillable cell gets a single
    attempt; the cell is locked as soon as an option is chosen and only
    unlocked again if the answer checker fails.
    """

    def __init__(
        self,
        payload: str | list,
        checker: Optional[AnswerChecker] = None,
        rng: random.Random | None = None,
        on_complete: Optional[Callable[["LedgerEngine"], None]] = None,
        base_font_size: float = DEFAULT_BASE_FONT_SIZE,
        min_font_size: float = DEFAULT_MIN_FONT_SIZE,
    ) -> None:
        self.checker = checker
        self.on_complete = on_complete
        self.base_font_size = base_font_size
        self.min_font_size = min_font_size
        self.error: str | None = None
        self.selected: Tuple[int, str] | None = None
        self._completion_signalled = False
        try:
            self.table = parse_ledger(payload, rng=rng)
        except InvalidLedgerError as exc:
            logger.warning("Invalid ledger table: %s", exc)
            self.error = str(exc)
            self.table = LedgerTable()

    @property
    def is_valid(self) -> bool:
        return self.error is None

    @property
    def is_selecting(self) -> bool:
        return self.selected is not None

    @property
    def is_complete(self) -> bool:
        return self.is_valid and self.table.is_complete

    def styles(self) -> List[RowStyle]:
        return row_styles(self.table, self.base_font_size, self.min_font_size)

    def select_cell(self, row_index: int, column: str) -> bool:
        """Open the option picker for a cell. Returns False if the cell cannot be selected."""
        try:
            cell = self.table.cell(row_index, column)
        except (IndexError, KeyError):
            return False
        if not isinstance(cell, Fillable) or cell.locked:
            logger.debug("Cell %s is not selectable", cell_reference(row_index, column))
            return False
        self.selected = (row_index, column)
        return True

    def cancel_selection(self) -> None:
        self.selected = None

    def options_for_selection(self) -> List[str]:
        if self.selected is None:
            return []
        return list(self._selected_cell().options)

    async def choose_option(self, option: str) -> SelectionOutcome:
        if self.selected is None:
            raise SelectionError("No cell is being selected.")
        if self.checker is None:
            raise SelectionError("No answer checker configured.")
        row_index, column = self.selected
        cell = self._selected_cell()
        if option not in cell.options:
            raise SelectionError(f"{option!r} is not an option for {cell_reference(row_index, column)}.")

        reference = cell_reference(row_index, column)
        cell.pending = True
        self.selected = None
        try:
            result = self.checker(option, reference)
            if inspect.isawaitable(result):
                result = await result
        except Exception:
            logger.warning("Answer check failed for %s, selection rolled back", reference)
            raise
        finally:
            cell.pending = False

        cell.value = option
        cell.is_correct = bool(result.is_correct)
        if result.correct_value:
            cell.correct_value = result.correct_value
        return SelectionOutcome(
            cell_reference=reference,
            value=option,
            is_correct=cell.is_correct,
            display=display_value(cell),
            explanation=cell.explanation,
            completed=self._check_completion(),
        )

    def score(self) -> Tuple[int, int, int]:
        cells = [cell for _, _, cell in self.table.fillables()]
        answered = [cell for cell in cells if cell.answered]
        correct = [cell for cell in answered if cell.is_correct]
        return len(correct), len(answered), len(cells)

    def _selected_cell(self) -> Fillable:
        row_index, column = self.selected
        cell = self.table.cell(row_index, column)
        if not isinstance(cell, Fillable):
            raise SelectionError(f"{cell_reference(row_index, column)} is not a fillable cell.")
        return cell

    def _check_completion(self) -> bool:
        if self._completion_signalled or not self.is_complete:
            return False
        self._completion_signalled = True
        logger.info("Ledger table complete")
        if self.on_complete is not None:
            self.on_complete(self)
        return True
