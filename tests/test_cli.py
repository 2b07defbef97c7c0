import json

import httpx
import pytest
import respx

from transferstats.cli import main, run
from transferstats.common import ClickhouseClient, ClickhouseError

URL = "http://localhost:8123"


def stats_row(address, volume):
    return {"address": address, "total_volume": volume, "avg_buy_price": 1.0,
            "avg_sell_price": 1.0, "max_balance": 0.0}


class FakeServer:
    """In-memory ClickHouse stand-in answering transfer reads, inserts and the stats query."""

    def __init__(self, rows=None, stats_rows=None):
        self.rows = list(rows or [])
        self.stats_rows = list(stats_rows or [])
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
        if "GROUP BY address" in body:
            return httpx.Response(200, text="".join(json.dumps(r) + "\n" for r in self.stats_rows))
        return httpx.Response(400, text="unexpected request")


def client_for(server):
    return ClickhouseClient(URL, transport=httpx.MockTransport(server))


@pytest.mark.asyncio
async def test_run_seeds_empty_table():
    server = FakeServer(stats_rows=[stats_row("B", 1.0), stats_row("A", 2.0)])
    async with client_for(server) as client:
        remote, local = await run(client, count=5, limit=3)

    assert len(server.rows) == 5
    assert server.inserts == 5
    assert [s.address for s in remote] == ["A", "B"]
    assert len(local) == 3
    addresses = [s.address for s in local]
    assert addresses == sorted(addresses)
    assert all(a.startswith("0x") for a in addresses)


@pytest.mark.asyncio
async def test_run_uses_existing_rows():
    existing = {"ts": 1, "address_from": "A", "address_to": "B",
                "amount": 10.0, "usd_price": 2.0}
    server = FakeServer(rows=[existing])
    async with client_for(server) as client:
        remote, local = await run(client, count=5, limit=10)

    assert server.inserts == 0
    assert remote == []
    assert [s.address for s in local] == ["A", "B"]
    assert local[0].avg_sell_price == 2.0
    assert local[1].avg_buy_price == 2.0


@pytest.mark.asyncio
async def test_run_wraps_errors():
    def handler(request):
        return httpx.Response(500, text="DB::Exception: boom")

    async with ClickhouseClient(URL, transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(ClickhouseError) as info:
            await run(client, count=1, limit=1)
    assert "Failed to get transfers from storage" in str(info.value)
    assert "boom" in str(info.value)
    assert info.value.status == 500


def test_main_prints_stats(capsys):
    server = FakeServer(stats_rows=[stats_row("0xabc", 4.0)])
    with respx.mock:
        respx.route(method="POST", host="localhost").mock(side_effect=server)
        code = main(["--url", URL, "--count", "4", "--limit", "2"])

    out = capsys.readouterr().out
    assert code == 0
    assert len(server.rows) == 4
    assert out.count("Clickhouse: \n") == 1
    assert "UserStats(address='0xabc'" in out
    assert out.count("UserStats(") == 3


def test_main_reports_failure(capsys):
    def handler(request):
        return httpx.Response(500, text="DB::Exception: boom")

    with respx.mock:
        respx.route(method="POST", host="localhost").mock(side_effect=handler)
        code = main(["--url", URL])

    err = capsys.readouterr().err
    assert code == 1
    assert "Failed to get transfers from storage" in err


def test_main_rejects_negative_count():
    with pytest.raises(SystemExit) as info:
        main(["--count", "-1"])
    assert info.value.code == 2