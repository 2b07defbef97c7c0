"""Per-address trading statistics, computed locally or by the database."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from transferstats.common import ClickhouseClient
from transferstats.model import Transfer, UserStats

USER_STATS_QUERY = """
SELECT
    address,
    ifNull(sum(amount_in) + sum(amount_out), 0) as total_volume,
    ifNull(sum(amount_in * usd_price_in) / nullIf(sum(amount_in), 0), 0) as avg_buy_price,
    ifNull(sum(amount_out * usd_price_out) / nullIf(sum(amount_out), 0), 0) as avg_sell_price,
    ifNull(max(balance), 0) as max_balance
FROM (
    SELECT
        CAST(address_to AS String) as address,
        amount as amount_in,
        0.0 as amount_out,
        usd_price as usd_price_in,
        0.0 as usd_price_out,
        sum(amount) OVER (PARTITION BY address_to ORDER BY ts
            ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW) as balance
    FROM transfers
    UNION ALL
    SELECT
        CAST(address_from AS String) as address,
        0.0 as amount_in,
        amount as amount_out,
        0.0 as usd_price_in,
        usd_price as usd_price_out,
        sum(-amount) OVER (PARTITION BY address_from ORDER BY ts
            ROWS BETWEEN UNBOUNDED PRECEDING AND CURRENT ROW) as balance
    FROM transfers
)
GROUP BY address
HAVING sum(amount_in) > 0 OR sum(amount_out) > 0
"""


def calculate_balance_history(
    transfers: Iterable[Transfer],
) -> dict[str, list[tuple[int, float]]]:
    """Return, for each address, its running balance after every transfer it took part in."""
    history: defaultdict[str, list[tuple[int, float]]] = defaultdict(list)
    balances: defaultdict[str, float] = defaultdict(float)
    for t in transfers:
        balances[t.address_from] -= t.amount
        history[t.address_from].append((t.ts, balances[t.address_from]))
        balances[t.address_to] += t.amount
        history[t.address_to].append((t.ts, balances[t.address_to]))
    return dict(history)


def weighted_avg(data: Iterable[tuple[float, float]]) -> float:
    """Average of ``(price, amount)`` pairs weighted by amount; 0.0 when the total is not positive."""
    sum_px = 0.0
    sum_amt = 0.0
    for price, amount in data:
        sum_px += price * amount
        sum_amt += amount
    return sum_px / sum_amt if sum_amt > 0.0 else 0.0


def calculate_user_stats(transfers: Iterable[Transfer]) -> list[UserStats]:
    """Compute statistics for every address that appears in ``transfers``."""
    transfers = list(transfers)
    buys: defaultdict[str, list[tuple[float, float]]] = defaultdict(list)
    sells: defaultdict[str, list[tuple[float, float]]] = defaultdict(list)
    volumes: dict[str, float] = {}

    for t in transfers:
        buys[t.address_to].append((t.usd_price, t.amount))
        sells[t.address_from].append((t.usd_price, t.amount))
        for address in dict.fromkeys((t.address_from, t.address_to)):
            volumes[address] = volumes.get(address, 0.0) + max(0.0, t.amount)

    history = calculate_balance_history(transfers)

    return [
        UserStats(
            address=address,
            total_volume=volume,
            avg_buy_price=weighted_avg(buys.get(address, ())),
            avg_sell_price=weighted_avg(sells.get(address, ())),
            max_balance=max([0.0, *(balance for _, balance in history.get(address, ()))]),
        )
        for address, volume in volumes.items()
    ]


async def calculate_user_stats_clickhouse(client: ClickhouseClient) -> list[UserStats]:
    """Have the server compute the statistics over its ``transfers`` table."""
    rows = await client.fetch_all(USER_STATS_QUERY)
    return [UserStats.from_dict(row) for row in rows]