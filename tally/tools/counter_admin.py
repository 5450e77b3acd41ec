"""Operator maintenance for the counter store.

Usage:
    python -m tally.tools.counter_admin init
    python -m tally.tools.counter_admin list
    python -m tally.tools.counter_admin reset home
    python -m tally.tools.counter_admin selftest --slug test
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from tally.application.use_cases.counter_service import CounterService
from tally.config import settings
from tally.domain.value_objects.enums import CounterField
from tally.infrastructure.api.dependencies import get_slug_locks, open_counter_repo

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


async def init_store() -> None:
    async with open_counter_repo() as repo:
        await CounterService(repo, get_slug_locks()).get_or_create_sheet()
    logger.info("Counter store initialized (backend=%s)", settings.counter_backend)


async def reset(slug: str) -> bool:
    async with open_counter_repo() as repo:
        return await CounterService(repo, get_slug_locks()).reset_slug(slug)


async def view_all_counts() -> list[dict]:
    async with open_counter_repo() as repo:
        rows = await CounterService(repo, get_slug_locks()).list_counts()

    print(f"\n{'='*50}")
    print("ALL COUNTS")
    print(f"{'='*50}")
    print("Slug | Likes | Dislikes | Infos")
    print("-----|-------|----------|------")
    for row in rows:
        print(f"{row['slug']} | {row['likes']} | {row['dislikes']} | {row['infos']}")
    print(f"{'='*50}\n")
    return rows


async def self_test(slug: str) -> dict:
    """Read, bump every field once, read again; print each step."""
    async with open_counter_repo() as repo:
        service = CounterService(repo, get_slug_locks())

        print(f'1. Reading initial counts for "{slug}":')
        initial = await service.read_counts(slug)
        print(json.dumps(initial))

        for step, field in enumerate(CounterField, start=2):
            print(f"{step}. Bumping {field.value}:")
            print(json.dumps(await service.bump(slug, field)))

        print(f"{len(CounterField) + 2}. Final counts:")
        final = await service.read_counts(slug)
        print(json.dumps(final))

    for field in CounterField:
        if final[field.value] != initial[field.value] + 1:
            logger.error(
                "Self-test failed: %s went from %d to %d",
                field.value, initial[field.value], final[field.value],
            )
            raise SystemExit(1)
    logger.info("Self-test passed for slug '%s'", slug)
    return final


def main():
    parser = argparse.ArgumentParser(description="Tally counter store maintenance")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create the counter sheet/table and its header")
    sub.add_parser("list", help="Print every row of the counter store")

    reset_parser = sub.add_parser("reset", help="Set a slug's counters back to 0")
    reset_parser.add_argument("slug")

    test_parser = sub.add_parser("selftest", help="Bump each counter once and verify")
    test_parser.add_argument(
        "--slug", type=str, default="test",
        help="Slug to exercise (default: test)",
    )

    args = parser.parse_args()

    if args.command == "init":
        asyncio.run(init_store())
    elif args.command == "list":
        asyncio.run(view_all_counts())
    elif args.command == "reset":
        if not asyncio.run(reset(args.slug)):
            sys.exit(1)
    elif args.command == "selftest":
        asyncio.run(self_test(args.slug))


if __name__ == "__main__":
    main()
