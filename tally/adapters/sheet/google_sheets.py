"""Google Sheets adapter — implements CounterRepository over the Sheets REST API v4."""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import quote

import httpx

from tally.adapters.sheet.cells import (
    HEADER,
    cell,
    cells_from_row,
    clean_slug,
    column_letter,
    parse_count,
    row_from_cells,
)
from tally.application.ports.counter_repo import CounterRepository
from tally.config import settings
from tally.domain.entities.counter_row import CounterRow
from tally.domain.errors import StoreError
from tally.domain.policies.row_lookup import find_first
from tally.domain.value_objects.enums import CounterField

logger = logging.getLogger(__name__)

SHEETS_API_URL = "https://sheets.googleapis.com/v4/spreadsheets"

_UPDATED_ROW_RE = re.compile(r"![A-Z]+(\d+)")


class GoogleSheetsRepository(CounterRepository):
    """Google Sheets implementation of CounterRepository.

    The tab named ``sheet_name`` holds a header row followed by one row per
    slug; ``CounterRow.row_id`` is the 1-based sheet row number.
    """

    def __init__(
        self,
        spreadsheet_id: str | None = None,
        access_token: str | None = None,
        sheet_name: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._spreadsheet_id = spreadsheet_id or settings.google_sheets_spreadsheet_id
        self._access_token = access_token or settings.google_sheets_access_token
        self._sheet_name = sheet_name or settings.sheet_name
        self._timeout = timeout if timeout is not None else settings.google_sheets_timeout
        self._transport = transport
        self._table_ready = False

    # ─── HTTP plumbing ─────────────────────────────────────────────

    def _a1(self, cells: str) -> str:
        name = self._sheet_name.replace("'", "''")
        return f"'{name}'!{cells}"

    def _values_url(self, cells: str, suffix: str = "") -> str:
        return f"{SHEETS_API_URL}/{self._spreadsheet_id}/values/{quote(self._a1(cells), safe='')}{suffix}"

    async def _request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        if not self._spreadsheet_id:
            raise StoreError("Google Sheets spreadsheet id is not set")

        headers = {}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"

        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self._timeout
            ) as client:
                response = await client.request(
                    method, url, params=params, json=json, headers=headers
                )
                response.raise_for_status()
                return response.json() if response.content else {}
        except httpx.HTTPStatusError as e:
            logger.error(
                "Google Sheets %s %s failed: %d %s",
                method, url, e.response.status_code, e.response.text,
            )
            raise StoreError(
                f"Google Sheets request failed with status {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            logger.error("Google Sheets %s %s failed: %s", method, url, e)
            raise StoreError(f"Google Sheets request failed: {e}") from e

    async def _batch_update(self, requests: list[dict[str, Any]]) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"{SHEETS_API_URL}/{self._spreadsheet_id}:batchUpdate",
            json={"requests": requests},
        )

    async def _get_values(self, cells: str) -> list[list[Any]]:
        data = await self._request(
            "GET",
            self._values_url(cells),
            params={"valueRenderOption": "UNFORMATTED_VALUE"},
        )
        return data.get("values", [])

    async def _put_values(self, cells: str, values: list[list[Any]]) -> None:
        await self._request(
            "PUT",
            self._values_url(cells),
            params={"valueInputOption": "RAW"},
            json={"majorDimension": "ROWS", "values": values},
        )

    async def _ready(self) -> None:
        if not self._table_ready:
            await self.ensure_table()

    # ─── CounterRepository ─────────────────────────────────────────

    async def ensure_table(self) -> None:
        meta = await self._request(
            "GET",
            f"{SHEETS_API_URL}/{self._spreadsheet_id}",
            params={"fields": "sheets.properties(sheetId,title)"},
        )
        sheet_id = next(
            (
                s["properties"]["sheetId"]
                for s in meta.get("sheets", [])
                if s.get("properties", {}).get("title") == self._sheet_name
            ),
            None,
        )
        if sheet_id is None:
            reply = await self._batch_update(
                [{"addSheet": {"properties": {"title": self._sheet_name}}}]
            )
            sheet_id = reply["replies"][0]["addSheet"]["properties"]["sheetId"]
            logger.info("Created sheet '%s' (id=%s)", self._sheet_name, sheet_id)

        if not await self._get_values("A1:D1"):
            await self._put_values("A1:D1", [HEADER])
            await self._batch_update([
                {
                    "repeatCell": {
                        "range": {
                            "sheetId": sheet_id,
                            "startRowIndex": 0,
                            "endRowIndex": 1,
                            "startColumnIndex": 0,
                            "endColumnIndex": len(HEADER),
                        },
                        "cell": {"userEnteredFormat": {"textFormat": {"bold": True}}},
                        "fields": "userEnteredFormat.textFormat.bold",
                    }
                }
            ])
            logger.info("Wrote header row to sheet '%s'", self._sheet_name)

        self._table_ready = True

    async def find_row(self, slug: str) -> CounterRow | None:
        await self._ready()
        data = (await self._get_values("A:D"))[1:]
        index, duplicates = find_first([clean_slug(r[0]) if r else "" for r in data], slug)
        if index is None:
            return None
        if duplicates:
            logger.warning(
                "Slug '%s' has %d duplicate rows in sheet '%s'; using row %d",
                slug, duplicates, self._sheet_name, index + 2,
            )
        return row_from_cells(index + 2, data[index])

    async def append_row(self, slug: str) -> CounterRow:
        await self._ready()
        row = CounterRow(row_id=None, slug=slug)
        data = await self._request(
            "POST",
            self._values_url("A:D", ":append"),
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"majorDimension": "ROWS", "values": [cells_from_row(row)]},
        )
        updated_range = data.get("updates", {}).get("updatedRange", "")
        match = _UPDATED_ROW_RE.search(updated_range)
        if not match:
            raise StoreError(f"Unexpected append response range: {updated_range!r}")
        row.row_id = int(match.group(1))
        return row

    async def increment_counter(self, row: CounterRow, field: CounterField) -> int:
        if row.row_id is None:
            raise StoreError(f"Row for slug '{row.slug}' has no sheet position")
        a1 = f"{column_letter(field.column)}{row.row_id}"
        current = await self._get_values(a1)
        value = parse_count(cell(current[0], 0) if current else None) + 1
        await self._put_values(a1, [[value]])
        row.set_count(field, value)
        return value

    async def reset_row(self, row: CounterRow) -> None:
        if row.row_id is None:
            raise StoreError(f"Row for slug '{row.slug}' has no sheet position")
        await self._put_values(f"B{row.row_id}:D{row.row_id}", [[0, 0, 0]])
        row.reset()

    async def list_rows(self) -> list[CounterRow]:
        await self._ready()
        data = (await self._get_values("A:D"))[1:]
        return [row_from_cells(i + 2, values) for i, values in enumerate(data)]
