"""CounterRow entity — one slug's persisted counters."""

from dataclasses import dataclass

from tally.domain.value_objects.enums import CounterField


@dataclass
class CounterRow:
    row_id: int | None
    slug: str
    likes: int = 0
    dislikes: int = 0
    infos: int = 0

    def count(self, field: CounterField) -> int:
        return getattr(self, field.value) or 0

    def set_count(self, field: CounterField, value: int) -> None:
        setattr(self, field.value, value)

    def reset(self) -> None:
        for field in CounterField:
            self.set_count(field, 0)

    def to_payload(self) -> dict:
        """Serialize to the public response shape."""
        return {
            "slug": self.slug,
            "likes": self.likes,
            "dislikes": self.dislikes,
            "infos": self.infos,
        }

    @classmethod
    def empty(cls, slug: str) -> "CounterRow":
        """Zero-valued row that has not been persisted."""
        return cls(row_id=None, slug=slug)
