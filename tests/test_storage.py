import json

import httpx
import pytest

from transferstats.common import ClickhouseClient, ClickhouseError
from transferstats.model import Transfer
from transferstats.storage import ClickhouseStorage

URL = "http://localhost:8123"


class FakeServer:
    """In-memory stand-in for a ClickHouse server holding one transfers table."""

    def __init__(self):
        self.rows = []
        self.inserts = 0

    def __call__(self, request):
        query = request.url.params.get("query")
        body = request.content.decode()
        if query is not None and query.startswith("INSERT INTO `transfers`"):
            self.inserts += 1
            self.rows.extend(json.loads(line) for line in body.splitlines() if line.strip())
            return httpx.Response(200, text="")
        if body.startswith("SELECT * FROM transfers"):
            return httpx.Response(200, text="".join(json.dumps(r) + "\n" for r in self.rows))
        return httpx.Response(400, text="unexpected request")


def sample_transfer():
    return Transfer(ts=1, address_from="A", address_to="B", amount=100.0, usd_price=1.5)


def make_storage(server):
    return ClickhouseStorage(ClickhouseClient(URL, transport=httpx.MockTransport(server)))


@pytest.mark.asyncio
async def test_insert_and_get_transfer():
    server = FakeServer()
    storage = make_storage(server)
    await storage.insert_transfer(sample_transfer())
    transfers = await storage.get_transfers()
    await storage.client.aclose()

    assert len(transfers) == 1
    assert transfers[0].amount == 100.0
    assert transfers[0].address_from == "A"
    assert transfers[0].address_to == "B"
    assert transfers[0].usd_price == 1.5
    assert transfers[0] == sample_transfer()


@pytest.mark.asyncio
async def test_multiple_inserts():
    server = FakeServer()
    storage = make_storage(server)
    t1 = sample_transfer()
    t2 = Transfer(**{**t1.to_dict(), "amount": 200.0})
    await storage.insert_transfer(t1)
    await storage.insert_transfer(t2)
    transfers = await storage.get_transfers()
    await storage.client.aclose()

    assert len(transfers) == 2
    assert transfers[1].amount == 200.0
    assert server.inserts == 2


@pytest.mark.asyncio
async def test_get_from_empty_table():
    storage = make_storage(FakeServer())
    transfers = await storage.get_transfers()
    await storage.client.aclose()
    assert transfers == []


@pytest.mark.asyncio
async def test_inserted_row_columns():
    server = FakeServer()
    storage = make_storage(server)
    await storage.insert_transfer(sample_transfer())
    await storage.client.aclose()
    assert server.rows == [
        {"ts": 1, "address_from": "A", "address_to": "B", "amount": 100.0, "usd_price": 1.5}
    ]


@pytest.mark.asyncio
async def test_server_error_raises():
    def handler(request):
        return httpx.Response(404, text="Code: 60. DB::Exception: Unknown table")

    storage = ClickhouseStorage(ClickhouseClient(URL, transport=httpx.MockTransport(handler)))
    with pytest.raises(ClickhouseError) as info:
        await storage.get_transfers()
    await storage.client.aclose()
    assert info.value.status == 404


@pytest.mark.asyncio
async def test_from_url():
    storage = ClickhouseStorage.from_url(URL)
    assert storage.client.database_url == URL
    await storage.client.aclose()