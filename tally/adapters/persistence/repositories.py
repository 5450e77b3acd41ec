"""SQLAlchemy repository implementation."""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tally.adapters.persistence.database import Base
from tally.adapters.persistence.models import CounterRowModel
from tally.application.ports.counter_repo import CounterRepository
from tally.domain.entities.counter_row import CounterRow
from tally.domain.errors import StoreError
from tally.domain.value_objects.enums import CounterField

logger = logging.getLogger(__name__)


def _row_to_domain(m: CounterRowModel) -> CounterRow:
    return CounterRow(
        row_id=m.id,
        slug=m.slug,
        likes=m.likes or 0,
        dislikes=m.dislikes or 0,
        infos=m.infos or 0,
    )


class SqlCounterRepository(CounterRepository):
    """Counter rows in a relational table, looked up by the unique slug index."""

    def __init__(self, session: AsyncSession):
        self._s = session

    async def ensure_table(self) -> None:
        conn = await self._s.connection()
        await conn.run_sync(Base.metadata.create_all, tables=[CounterRowModel.__table__])

    async def find_row(self, slug: str) -> CounterRow | None:
        result = await self._s.execute(
            select(CounterRowModel)
            .where(CounterRowModel.slug == slug)
            .execution_options(populate_existing=True)
        )
        m = result.scalar_one_or_none()
        return _row_to_domain(m) if m else None

    async def append_row(self, slug: str) -> CounterRow:
        m = CounterRowModel(slug=slug, likes=0, dislikes=0, infos=0)
        try:
            async with self._s.begin_nested():
                self._s.add(m)
        except IntegrityError:
            # Another process inserted the same slug first
            logger.info("Slug '%s' was created concurrently, reusing it", slug)
            existing = await self.find_row(slug)
            if existing is None:
                raise
            return existing
        return _row_to_domain(m)

    async def increment_counter(self, row: CounterRow, field: CounterField) -> int:
        result = await self._s.execute(
            select(CounterRowModel)
            .where(CounterRowModel.id == row.row_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        m = result.scalar_one_or_none()
        if m is None:
            raise StoreError(f"Row {row.row_id} for slug '{row.slug}' no longer exists")
        value = (getattr(m, field.value) or 0) + 1
        setattr(m, field.value, value)
        await self._s.flush()
        row.set_count(field, value)
        return value

    async def reset_row(self, row: CounterRow) -> None:
        await self._s.execute(
            update(CounterRowModel)
            .where(CounterRowModel.id == row.row_id)
            .values(likes=0, dislikes=0, infos=0)
        )
        await self._s.flush()
        row.reset()

    async def commit(self) -> None:
        await self._s.commit()

    async def list_rows(self) -> list[CounterRow]:
        result = await self._s.execute(
            select(CounterRowModel)
            .order_by(CounterRowModel.id)
            .execution_options(populate_existing=True)
        )
        return [_row_to_domain(m) for m in result.scalars()]
