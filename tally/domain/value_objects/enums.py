"""Domain enums — pure Python, no external dependencies."""

from enum import Enum

from tally.domain.errors import InvalidField, UnknownAction


class CounterField(str, Enum):
    LIKES = "likes"
    DISLIKES = "dislikes"
    INFOS = "infos"

    @classmethod
    def parse(cls, raw: str | None) -> "CounterField":
        """Map a raw request value onto a counter field.

        Raises:
            InvalidField: if *raw* is missing or not one of likes/dislikes/infos.
        """
        try:
            return cls(raw)
        except ValueError:
            raise InvalidField(raw) from None

    @property
    def column(self) -> int:
        """1-based sheet column holding this counter (column 1 is the slug)."""
        return _COLUMNS[self]


_COLUMNS: dict[CounterField, int] = {
    CounterField.LIKES: 2,
    CounterField.DISLIKES: 3,
    CounterField.INFOS: 4,
}


class CounterAction(str, Enum):
    GET = "get"
    BUMP = "bump"

    @classmethod
    def parse(cls, raw: str | None) -> "CounterAction":
        if not raw:
            return cls.GET
        try:
            return cls(raw)
        except ValueError:
            raise UnknownAction(raw) from None
