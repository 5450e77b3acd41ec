"""RowLookupPolicy — pick the row that answers for a slug."""

from __future__ import annotations

from collections.abc import Sequence


def find_first(slugs: Sequence[str], slug: str) -> tuple[int | None, int]:
    """Linear scan for an exact slug match.

    The first match wins. Extra matches can only come from manual edits to the
    store; they are counted so the caller can report them.

    Args:
        slugs: slug column of every data row, in store order.
        slug: slug to look up.

    Returns:
        (index of the first match or None, number of additional matches)
    """
    first: int | None = None
    duplicates = 0
    for index, candidate in enumerate(slugs):
        if candidate != slug:
            continue
        if first is None:
            first = index
        else:
            duplicates += 1
    return first, duplicates
