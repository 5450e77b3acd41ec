"""Cell normalization — turns raw spreadsheet cells into slugs and counts."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tally.domain.entities.counter_row import CounterRow
from tally.domain.value_objects.enums import CounterField

logger = logging.getLogger(__name__)

HEADER: list[str] = ["slug", *(f.value for f in CounterField)]


def clean_slug(value: object) -> str:
    """Slug cells are compared as strings; missing cells become ''."""
    if value is None:
        return ""
    return str(value)


def parse_count(value: object) -> int:
    """Parse a counter cell.

    - None / blank → 0
    - ints and integral floats / numeric strings ("3", "3.0") → int
    - anything else → 0, with a warning
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    text = str(value).strip()
    if not text:
        return 0
    try:
        return int(float(text))
    except ValueError:
        logger.warning("Non-numeric counter cell %r treated as 0", value)
        return 0


def cell(values: Sequence[object], index: int) -> object:
    """Value at *index*, or None when the row is shorter (trailing blanks)."""
    return values[index] if index < len(values) else None


def row_from_cells(row_id: int, values: Sequence[object]) -> CounterRow:
    """Build a CounterRow from one sheet row (slug, likes, dislikes, infos)."""
    return CounterRow(
        row_id=row_id,
        slug=clean_slug(cell(values, 0)),
        likes=parse_count(cell(values, CounterField.LIKES.column - 1)),
        dislikes=parse_count(cell(values, CounterField.DISLIKES.column - 1)),
        infos=parse_count(cell(values, CounterField.INFOS.column - 1)),
    )


def cells_from_row(row: CounterRow) -> list[object]:
    return [row.slug, row.likes, row.dislikes, row.infos]


def column_letter(column: int) -> str:
    """1-based column number → A1 notation letter (columns A..Z only)."""
    if not 1 <= column <= 26:
        raise ValueError(f"Column out of range: {column}")
    return chr(ord("A") + column - 1)
