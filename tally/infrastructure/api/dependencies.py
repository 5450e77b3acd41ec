"""FastAPI dependency injection — wires the configured store into CounterService."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends

from tally.adapters.sheet.csv_sheet import CsvSheetRepository
from tally.adapters.sheet.google_sheets import GoogleSheetsRepository
from tally.application.ports.counter_repo import CounterRepository
from tally.application.use_cases.counter_service import CounterService
from tally.application.use_cases.slug_locks import SlugLocks
from tally.config import settings

logger = logging.getLogger(__name__)

# Process-wide: every request must share the same per-slug locks
_slug_locks = SlugLocks()

# Singleton sheet adapters (the CSV one owns the file write lock)
_csv_repo: CsvSheetRepository | None = None
_sheets_repo: GoogleSheetsRepository | None = None


def get_slug_locks() -> SlugLocks:
    return _slug_locks


def _sheet_repo() -> CounterRepository:
    global _csv_repo, _sheets_repo
    if settings.counter_backend == "google_sheets":
        if _sheets_repo is None:
            _sheets_repo = GoogleSheetsRepository()
            logger.info("Using Google Sheets counter store")
        return _sheets_repo
    if _csv_repo is None:
        _csv_repo = CsvSheetRepository(settings.csv_sheet_path)
        logger.info("Using CSV counter store at %s", settings.csv_sheet_path)
    return _csv_repo


@asynccontextmanager
async def open_counter_repo() -> AsyncIterator[CounterRepository]:
    """Repository for the configured backend, scoped to one unit of work.

    The SQL backend gets its own session, committed on success and rolled
    back on error. Sheet backends are shared singletons.
    """
    if settings.counter_backend == "sql":
        # Imported lazily so sheet deployments never build a database engine
        from tally.adapters.persistence.database import get_session
        from tally.adapters.persistence.repositories import SqlCounterRepository

        async with get_session() as session:
            yield SqlCounterRepository(session)
    else:
        yield _sheet_repo()


async def get_counter_repo() -> AsyncIterator[CounterRepository]:
    async with open_counter_repo() as repo:
        yield repo


def get_counter_service(
    repo: CounterRepository = Depends(get_counter_repo),
) -> CounterService:
    return CounterService(repo=repo, locks=_slug_locks)
