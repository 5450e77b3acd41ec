"""CSV sheet adapter — a local CSV file used as the counter spreadsheet."""

from __future__ import annotations

import asyncio
import csv
import logging
from pathlib import Path

from tally.adapters.sheet.cells import (
    HEADER,
    cells_from_row,
    clean_slug,
    parse_count,
    row_from_cells,
)
from tally.application.ports.counter_repo import CounterRepository
from tally.domain.entities.counter_row import CounterRow
from tally.domain.errors import StoreError
from tally.domain.policies.row_lookup import find_first
from tally.domain.value_objects.enums import CounterField

logger = logging.getLogger(__name__)


class CsvSheetRepository(CounterRepository):
    """Spreadsheet semantics on a CSV file.

    Row 1 is the header; data rows are addressed by their 1-based line number,
    which is what ``CounterRow.row_id`` holds.
    """

    def __init__(self, path: Path | str, encoding: str = "utf-8"):
        self._path = Path(path)
        self._encoding = encoding
        self._write_lock = asyncio.Lock()

    @property
    def path(self) -> Path:
        return self._path

    # ─── Raw file access ───────────────────────────────────────────

    def _read_all(self) -> list[list[str]]:
        if not self._path.exists():
            return []
        with open(self._path, encoding=self._encoding, newline="") as f:
            return [row for row in csv.reader(f)]

    def _write_all(self, rows: list[list[object]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp_path, "w", encoding=self._encoding, newline="") as f:
            csv.writer(f).writerows(rows)
        tmp_path.replace(self._path)

    async def _load(self) -> list[list[str]]:
        return await asyncio.to_thread(self._read_all)

    async def _store(self, rows: list[list[object]]) -> None:
        await asyncio.to_thread(self._write_all, rows)

    async def _data_rows(self) -> list[list[str]]:
        rows = await self._load()
        return rows[1:] if rows else []

    # ─── CounterRepository ─────────────────────────────────────────

    async def ensure_table(self) -> None:
        async with self._write_lock:
            if await self._load():
                return
            await self._store([HEADER])
            logger.info("Created counter sheet %s", self._path)

    async def find_row(self, slug: str) -> CounterRow | None:
        data = await self._data_rows()
        index, duplicates = find_first([clean_slug(r[0]) if r else "" for r in data], slug)
        if index is None:
            return None
        if duplicates:
            logger.warning(
                "Slug '%s' has %d duplicate rows in %s; using row %d",
                slug, duplicates, self._path, index + 2,
            )
        # +2: skip the header and convert to 1-based numbering
        return row_from_cells(index + 2, data[index])

    async def append_row(self, slug: str) -> CounterRow:
        async with self._write_lock:
            rows = await self._load() or [HEADER]
            row = CounterRow(row_id=len(rows) + 1, slug=slug)
            # Full rewrite: appending raw text would glue onto a last line
            # saved without a trailing newline
            await self._store([*rows, cells_from_row(row)])
        return row

    async def increment_counter(self, row: CounterRow, field: CounterField) -> int:
        async with self._write_lock:
            rows = await self._load()
            values = self._existing_row(rows, row)
            values.extend([""] * (len(HEADER) - len(values)))
            value = parse_count(values[field.column - 1]) + 1
            values[field.column - 1] = str(value)
            await self._store(rows)
        row.set_count(field, value)
        return value

    async def reset_row(self, row: CounterRow) -> None:
        async with self._write_lock:
            rows = await self._load()
            values = self._existing_row(rows, row)
            values[:] = [values[0] if values else row.slug, "0", "0", "0"]
            await self._store(rows)
        row.reset()

    async def list_rows(self) -> list[CounterRow]:
        return [row_from_cells(i + 2, values) for i, values in enumerate(await self._data_rows())]

    def _existing_row(self, rows: list[list[str]], row: CounterRow) -> list[str]:
        if row.row_id is None or not 2 <= row.row_id <= len(rows):
            raise StoreError(f"Row {row.row_id} for slug '{row.slug}' is not in {self._path}")
        return rows[row.row_id - 1]
