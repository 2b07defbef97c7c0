"""Persistence of transfers in the ClickHouse ``transfers`` table."""

from __future__ import annotations

from transferstats.common import ClickhouseClient
from transferstats.model import Transfer

TRANSFERS_TABLE = "transfers"


class ClickhouseStorage:
    """Reads and writes :class:`Transfer` rows through a :class:`ClickhouseClient`."""

    def __init__(self, client: ClickhouseClient) -> None:
        self.client = client

    @classmethod
    def from_url(cls, database_url: str) -> ClickhouseStorage:
        return cls(ClickhouseClient(database_url))

    async def insert_transfer(self, transfer: Transfer) -> None:
        await self.client.insert(TRANSFERS_TABLE, [transfer.to_dict()])

    async def get_transfers(self) -> list[Transfer]:
        rows = await self.client.fetch_all(f"SELECT * FROM {TRANSFERS_TABLE}")
        return [Transfer.from_dict(row) for row in rows]