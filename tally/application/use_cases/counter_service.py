"""CounterService — read, bump and reset per-slug counters."""

from __future__ import annotations

import logging

from tally.application.ports.counter_repo import CounterRepository
from tally.application.use_cases.slug_locks import SlugLocks
from tally.domain.entities.counter_row import CounterRow
from tally.domain.value_objects.enums import CounterField

logger = logging.getLogger(__name__)


class CounterService:
    """Orchestrates counter reads and writes against a CounterRepository.

    No state is cached between calls: every operation goes back to the
    repository. Mutations for one slug are serialized through ``locks``.
    """

    def __init__(self, repo: CounterRepository, locks: SlugLocks | None = None):
        self._repo = repo
        self._locks = locks if locks is not None else SlugLocks()

    async def get_or_create_sheet(self) -> None:
        await self._repo.ensure_table()
        await self._repo.commit()

    async def find_row(self, slug: str) -> CounterRow | None:
        return await self._repo.find_row(slug)

    async def ensure_row(self, slug: str) -> CounterRow:
        """Return the row for *slug*, appending a zeroed one if it is missing."""
        async with self._locks.for_slug(slug):
            row = await self._ensure_row(slug)
            await self._repo.commit()
            return row

    async def _ensure_row(self, slug: str) -> CounterRow:
        row = await self._repo.find_row(slug)
        if row is not None:
            return row
        row = await self._repo.append_row(slug)
        logger.info("Created counter row for slug '%s'", slug)
        return row

    async def read_counts(self, slug: str) -> dict:
        """Current counters for *slug*; zeros (not persisted) if it is unknown."""
        row = await self._repo.find_row(slug)
        if row is None:
            return CounterRow.empty(slug).to_payload()
        return row.to_payload()

    async def bump(self, slug: str, field: CounterField | str) -> dict:
        """Increment one counter of *slug* by 1 and return all its counters.

        Args:
            slug: resource identifier.
            field: a CounterField or its raw name.

        Returns:
            The row as read back after the write.

        Raises:
            InvalidField: if *field* is not likes/dislikes/infos. Raised before
                the store is touched, so no row gets created.
        """
        if not isinstance(field, CounterField):
            field = CounterField.parse(field)

        async with self._locks.for_slug(slug):
            row = await self._ensure_row(slug)
            new_value = await self._repo.increment_counter(row, field)
            await self._repo.commit()
            logger.debug("Bumped %s/%s to %d", slug, field.value, new_value)

        return await self.read_counts(slug)

    async def reset_slug(self, slug: str) -> bool:
        """Zero all counters of an existing slug. Unknown slugs are left alone."""
        async with self._locks.for_slug(slug):
            row = await self._repo.find_row(slug)
            if row is None:
                logger.info("Slug not found: %s", slug)
                return False
            await self._repo.reset_row(row)
            await self._repo.commit()
        logger.info("Reset slug: %s", slug)
        return True

    async def list_counts(self) -> list[dict]:
        return [row.to_payload() for row in await self._repo.list_rows()]
