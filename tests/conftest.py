"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio

import pytest

from tally.application.ports.counter_repo import CounterRepository
from tally.domain.entities.counter_row import CounterRow
from tally.domain.value_objects.enums import CounterField


class InMemoryCounterRepo(CounterRepository):
    """List-backed store. Yields to the event loop between reads and writes
    so unsynchronized callers would interleave."""

    def __init__(self, rows: list[CounterRow] | None = None):
        self.rows: list[CounterRow] = list(rows or [])
        self.table_created = False
        self.appends = 0
        self.writes = 0
        self.commits = 0

    async def ensure_table(self):
        self.table_created = True

    async def find_row(self, slug):
        await asyncio.sleep(0)
        for index, row in enumerate(self.rows):
            if row.slug == slug:
                return CounterRow(
                    row_id=index, slug=row.slug, likes=row.likes,
                    dislikes=row.dislikes, infos=row.infos,
                )
        return None

    async def append_row(self, slug):
        await asyncio.sleep(0)
        self.rows.append(CounterRow(row_id=len(self.rows), slug=slug))
        self.appends += 1
        return CounterRow(row_id=len(self.rows) - 1, slug=slug)

    async def increment_counter(self, row, field: CounterField):
        stored = self.rows[row.row_id]
        current = stored.count(field)
        await asyncio.sleep(0)
        stored.set_count(field, current + 1)
        self.writes += 1
        row.set_count(field, current + 1)
        return current + 1

    async def reset_row(self, row):
        self.rows[row.row_id].reset()
        row.reset()

    async def commit(self):
        self.commits += 1

    async def list_rows(self):
        return [
            CounterRow(row_id=i, slug=r.slug, likes=r.likes, dislikes=r.dislikes, infos=r.infos)
            for i, r in enumerate(self.rows)
        ]


@pytest.fixture
def memory_repo():
    return InMemoryCounterRepo()


@pytest.fixture
def seeded_repo():
    return InMemoryCounterRepo([
        CounterRow(row_id=None, slug="home", likes=3, dislikes=1, infos=0),
        CounterRow(row_id=None, slug="about", likes=0, dislikes=0, infos=7),
    ])
