"""Command that fills the transfers table if needed and prints user statistics."""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from operator import attrgetter

from transferstats.common import DEFAULT_USER, PASSWORD, ClickhouseClient, ClickhouseError
from transferstats.generator import DefaultTransferGenerator
from transferstats.model import UserStats
from transferstats.stats import calculate_user_stats, calculate_user_stats_clickhouse
from transferstats.storage import ClickhouseStorage

DEFAULT_URL = "http://localhost:8123"
DEFAULT_COUNT = 10_000
DEFAULT_LIMIT = 10

_by_address = attrgetter("address")


@contextmanager
def _context(message: str) -> Iterator[None]:
    try:
        yield
    except ClickhouseError as exc:
        raise ClickhouseError(f"{message}: {exc}", status=exc.status) from exc


async def run(
    client: ClickhouseClient, count: int = DEFAULT_COUNT, limit: int = DEFAULT_LIMIT
) -> tuple[list[UserStats], list[UserStats]]:
    """Seed the table with ``count`` mock transfers when it is empty, then compute statistics.

    Returns the server-side and the local statistics, each sorted by address and
    cut to ``limit`` entries.
    """
    storage = ClickhouseStorage(client)
    with _context("Failed to get transfers from storage"):
        transfers = await storage.get_transfers()

    if not transfers:
        mock_transfers = DefaultTransferGenerator().generate(count)
        with _context("Failed to insert transfer into storage"):
            for transfer in mock_transfers:
                await storage.insert_transfer(transfer)
        with _context("Failed to get transfers from storage after inserting mock transfers"):
            transfers = await storage.get_transfers()

    with _context("Failed to calculate user stats"):
        remote = await calculate_user_stats_clickhouse(client)
    remote.sort(key=_by_address)
    local = sorted(calculate_user_stats(transfers), key=_by_address)
    return remote[:limit], local[:limit]


def _non_negative(text: str) -> int:
    value = int(text)
    if value < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {value}")
    return value


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="transferstats", description="Compute per-address transfer statistics."
    )
    parser.add_argument("--url", default=DEFAULT_URL, help="ClickHouse HTTP endpoint")
    parser.add_argument("--user", default=DEFAULT_USER, help="ClickHouse user")
    parser.add_argument("--password", default=PASSWORD, help="ClickHouse password")
    parser.add_argument(
        "--count", type=_non_negative, default=DEFAULT_COUNT,
        help="mock transfers to insert when the table is empty",
    )
    parser.add_argument(
        "--limit", type=_non_negative, default=DEFAULT_LIMIT,
        help="number of statistics rows to print from each source",
    )
    return parser.parse_args(argv)


async def _run_with_client(args: argparse.Namespace) -> tuple[list[UserStats], list[UserStats]]:
    async with ClickhouseClient(args.url, user=args.user, password=args.password) as client:
        return await run(client, args.count, args.limit)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        remote, local = asyncio.run(_run_with_client(args))
    except ClickhouseError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    for stat in remote:
        print(f"Clickhouse: \n{stat!r}")
    for stat in local:
        print(repr(stat))
    return 0


if __name__ == "__main__":
    sys.exit(main())