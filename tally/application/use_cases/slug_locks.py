"""Per-slug serialization point for read-modify-write sequences."""

from __future__ import annotations

import asyncio
import weakref


class SlugLocks:
    """Hands out one ``asyncio.Lock`` per slug.

    Locks are held weakly: once no coroutine references a slug's lock it is
    dropped, so the registry does not grow with the number of slugs seen.
    """

    def __init__(self) -> None:
        self._locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def for_slug(self, slug: str) -> asyncio.Lock:
        lock = self._locks.get(slug)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[slug] = lock
        return lock

    def __len__(self) -> int:
        return len(self._locks)
