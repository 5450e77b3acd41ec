"""Tests for GoogleSheetsRepository against a fake Sheets API (no network)."""

from __future__ import annotations

import json
import re

import httpx
import pytest

from tally.adapters.sheet.google_sheets import GoogleSheetsRepository
from tally.application.use_cases.counter_service import CounterService
from tally.domain.errors import StoreError
from tally.domain.value_objects.enums import CounterField

_RANGE_RE = re.compile(r"^([A-Z])(\d*)(?::([A-Z])(\d*))?$")


class FakeSheetsApi:
    """Just enough of the Sheets v4 API for one spreadsheet."""

    def __init__(self, titles=("Sheet1",), grid=None):
        self.titles = list(titles)
        self.grid: list[list] = [list(r) for r in (grid or [])]
        self.requests: list[httpx.Request] = []
        self.batch_requests: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        base = "/v4/spreadsheets/sheet-id"

        if path == base and request.method == "GET":
            return httpx.Response(200, json={
                "sheets": [
                    {"properties": {"sheetId": i, "title": t}} for i, t in enumerate(self.titles)
                ]
            })

        if path == base + ":batchUpdate":
            body = json.loads(request.content)
            self.batch_requests.extend(body["requests"])
            replies = []
            for req in body["requests"]:
                if "addSheet" in req:
                    self.titles.append(req["addSheet"]["properties"]["title"])
                    replies.append({"addSheet": {"properties": {"sheetId": 99}}})
                else:
                    replies.append({})
            return httpx.Response(200, json={"replies": replies})

        a1 = path.split("/values/", 1)[1]
        append = a1.endswith(":append")
        if append:
            a1 = a1[: -len(":append")]
        sheet, cells = a1.rsplit("!", 1)
        assert sheet == "'metrics'"
        c1, r1, c2, r2 = _RANGE_RE.match(cells).groups()

        if append:
            self.grid.append(json.loads(request.content)["values"][0])
            n = len(self.grid)
            return httpx.Response(200, json={"updates": {"updatedRange": f"'metrics'!A{n}:D{n}"}})

        col_start = ord(c1) - ord("A")
        col_end = ord(c2 or c1) - ord("A")
        row_start = int(r1) - 1 if r1 else 0
        row_end = int(r2 or r1) - 1 if r1 else len(self.grid) - 1

        if request.method == "GET":
            values = []
            for r in range(row_start, min(row_end, len(self.grid) - 1) + 1):
                row = self.grid[r][col_start:col_end + 1]
                while row and row[-1] in ("", None):
                    row.pop()
                values.append(row)
            while values and not values[-1]:
                values.pop()
            return httpx.Response(200, json={"values": values} if values else {})

        if request.method == "PUT":
            assert request.url.params["valueInputOption"] == "RAW"
            for dr, new_row in enumerate(json.loads(request.content)["values"]):
                r = row_start + dr
                while len(self.grid) <= r:
                    self.grid.append([])
                target = self.grid[r]
                for dc, value in enumerate(new_row):
                    c = col_start + dc
                    while len(target) <= c:
                        target.append("")
                    target[c] = value
            return httpx.Response(200, json={})

        return httpx.Response(404)


def _repo(api, **kwargs) -> GoogleSheetsRepository:
    return GoogleSheetsRepository(
        spreadsheet_id="sheet-id",
        access_token="token-123",
        sheet_name="metrics",
        transport=httpx.MockTransport(api),
        **kwargs,
    )


HEADER = ["slug", "likes", "dislikes", "infos"]


@pytest.mark.asyncio
async def test_ensure_table_creates_sheet_and_bold_header():
    api = FakeSheetsApi()
    await _repo(api).ensure_table()
    assert "metrics" in api.titles
    assert api.grid == [HEADER]
    repeat = next(r["repeatCell"] for r in api.batch_requests if "repeatCell" in r)
    assert repeat["range"]["sheetId"] == 99
    assert repeat["cell"]["userEnteredFormat"]["textFormat"]["bold"] is True


@pytest.mark.asyncio
async def test_ensure_table_leaves_existing_sheet_alone():
    api = FakeSheetsApi(titles=["metrics"], grid=[HEADER, ["home", 1, 2, 3]])
    await _repo(api).ensure_table()
    assert api.batch_requests == []
    assert api.grid == [HEADER, ["home", 1, 2, 3]]


@pytest.mark.asyncio
async def test_requests_carry_bearer_token():
    api = FakeSheetsApi(titles=["metrics"], grid=[HEADER])
    await _repo(api).find_row("home")
    assert all(r.headers["Authorization"] == "Bearer token-123" for r in api.requests)


@pytest.mark.asyncio
async def test_find_row_first_match():
    api = FakeSheetsApi(
        titles=["metrics"],
        grid=[HEADER, ["blog", 1], ["home", 4, 0, 2], ["home", 100, 100, 100]],
    )
    row = await _repo(api).find_row("home")
    assert row.row_id == 3
    assert row.to_payload() == {"slug": "home", "likes": 4, "dislikes": 0, "infos": 2}


@pytest.mark.asyncio
async def test_find_row_missing():
    api = FakeSheetsApi(titles=["metrics"], grid=[HEADER, ["blog", 1]])
    assert await _repo(api).find_row("home") is None


@pytest.mark.asyncio
async def test_append_and_increment():
    api = FakeSheetsApi(titles=["metrics"], grid=[HEADER, ["blog", 1, 0, 0]])
    repo = _repo(api)
    row = await repo.append_row("home")
    assert row.row_id == 3
    assert await repo.increment_counter(row, CounterField.INFOS) == 1
    assert await repo.increment_counter(row, CounterField.INFOS) == 2
    assert api.grid[2] == ["home", 0, 0, 2]


@pytest.mark.asyncio
async def test_reset_row():
    api = FakeSheetsApi(titles=["metrics"], grid=[HEADER, ["home", 4, 5, 6]])
    repo = _repo(api)
    row = await repo.find_row("home")
    await repo.reset_row(row)
    assert api.grid[1] == ["home", 0, 0, 0]


@pytest.mark.asyncio
async def test_service_scenario_on_sheets():
    api = FakeSheetsApi()
    service = CounterService(repo=_repo(api))
    assert await service.read_counts("home") == {
        "slug": "home", "likes": 0, "dislikes": 0, "infos": 0,
    }
    await service.bump("home", "likes")
    assert await service.bump("home", "dislikes") == {
        "slug": "home", "likes": 1, "dislikes": 1, "infos": 0,
    }
    assert api.grid == [HEADER, ["home", 1, 1, 0]]


@pytest.mark.asyncio
async def test_http_error_becomes_store_error():
    def failing(request):
        return httpx.Response(403, json={"error": {"message": "forbidden"}})

    repo = GoogleSheetsRepository(
        spreadsheet_id="sheet-id", access_token="t", sheet_name="metrics",
        transport=httpx.MockTransport(failing),
    )
    with pytest.raises(StoreError, match="status 403"):
        await repo.find_row("home")


@pytest.mark.asyncio
async def test_missing_spreadsheet_id():
    repo = GoogleSheetsRepository(
        spreadsheet_id="", access_token="t", sheet_name="metrics",
        transport=httpx.MockTransport(FakeSheetsApi()),
    )
    repo._spreadsheet_id = ""
    with pytest.raises(StoreError, match="spreadsheet id is not set"):
        await repo.ensure_table()
