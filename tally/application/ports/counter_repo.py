"""Port interface for counter row persistence."""

from abc import ABC, abstractmethod

from tally.domain.entities.counter_row import CounterRow
from tally.domain.value_objects.enums import CounterField


class CounterRepository(ABC):
    @abstractmethod
    async def ensure_table(self) -> None:
        """Create the table (and its header row) if it does not exist yet."""
        ...

    @abstractmethod
    async def find_row(self, slug: str) -> CounterRow | None:
        """Return the first row whose slug matches exactly, or None."""
        ...

    @abstractmethod
    async def append_row(self, slug: str) -> CounterRow:
        """Append a zero-initialized row for *slug* and return it with its row_id."""
        ...

    @abstractmethod
    async def increment_counter(self, row: CounterRow, field: CounterField) -> int:
        """Read one counter cell of an existing row, write it back plus 1.

        Blank cells count as 0. Returns the new value.
        """
        ...

    @abstractmethod
    async def reset_row(self, row: CounterRow) -> None:
        """Set all three counters of an existing row to 0."""
        ...

    @abstractmethod
    async def list_rows(self) -> list[CounterRow]:
        ...

    async def commit(self) -> None:
        """Make preceding writes durable. Stores that write through need nothing."""
        return None
