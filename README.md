# transferstats

transferstats works with token transfers. It can generate random transfers, store them in a
ClickHouse `transfers` table, and compute these statistics for each address:

- total volume
- volume-weighted average buy price
- volume-weighted average sell price
- maximum balance

It computes the statistics in two ways and prints both results so you can compare them:

- in Python, from the transfers loaded out of the database (`transferstats.stats.calculate_user_stats`);
- inside ClickHouse, with a single SQL query that uses window functions
  (`transferstats.stats.calculate_user_stats_clickhouse`).

## Installation

```
pip install transferstats
```

For development and tests:

```
pip install "transferstats[test]"
```

## Command line

```
transferstats
```

The command connects to ClickHouse over its HTTP interface and reads every row of
`transfers`. If the table is empty, it first inserts randomly generated transfers and reads
the table again. It then prints the first rows of the ClickHouse statistics, each preceded by
`Clickhouse:`, followed by the first rows of the Python statistics. Both lists are sorted by
address.

Options:

| option       | default                 | meaning                                                  |
|--------------|-------------------------|----------------------------------------------------------|
| `--url`      | `http://localhost:8123` | ClickHouse HTTP endpoint                                 |
| `--user`     | `default`               | ClickHouse user                                          |
| `--password` | `password`              | ClickHouse password                                      |
| `--count`    | `10000`                 | number of mock transfers to insert when the table is empty |
| `--limit`    | `10`                    | number of statistics rows to print from each source      |

`--count` and `--limit` must not be negative. If ClickHouse cannot be reached or returns an
error, the command prints `error: ...` to standard error and exits with status 1.

`transferstats --help` lists the options.

## The `transfers` table

The package does not create the table. It must already exist with these columns:

| column         | type    |
|----------------|---------|
| `ts`           | UInt64  |
| `address_from` | String  |
| `address_to`   | String  |
| `amount`       | Float64 |
| `usd_price`    | Float64 |

## Library use

### Generating transfers

```python
import random

from transferstats.generator import DefaultTransferGenerator, TransferGenConfig
from transferstats.stats import calculate_user_stats

config = TransferGenConfig(min_amount=10.0, max_amount=20.0)
generator = DefaultTransferGenerator(config, rng=random.Random(42))
transfers = generator.generate(1_000)

for stat in sorted(calculate_user_stats(transfers), key=lambda s: s.address)[:5]:
    print(stat)
```

`TransferGenConfig` defaults to amounts in `[1.0, 1000.0)`, prices in `[0.1, 2.0)` and
timestamps up to 30 days before now. If a minimum and maximum are equal, every transfer gets
that value. An empty range, a negative count or a `max_age_secs` that is not positive raises
`ValueError`. Addresses come from `rand_address`: `0x` followed by ten random letters and
digits. Pass your own `random.Random` to get repeatable output.

`TransferGenerator` is the abstract base class for generators. It has a single method,
`generate(count)`.

### Statistics in Python

`transferstats.stats` provides:

- `calculate_user_stats(transfers)` returns one `UserStats` per address that appears in the
  transfers. Total volume is the sum of `max(amount, 0)` over the transfers the address takes
  part in. A transfer from an address to itself counts once. Buy and sell prices are
  weighted by amount. Maximum balance is the highest running balance, and never less
  than 0.
- `calculate_balance_history(transfers)` returns, for each address, the list of
  `(ts, balance)` pairs after each transfer it took part in.
- `weighted_avg(pairs)` returns the amount-weighted average of `(price, amount)` pairs, or
  0.0 when the total amount is not positive.

### Working with ClickHouse

Reading and writing are asynchronous:

```python
import asyncio

from transferstats.common import ClickhouseClient
from transferstats.stats import calculate_user_stats_clickhouse
from transferstats.storage import ClickhouseStorage


async def report():
    password = "password"
    async with ClickhouseClient("http://localhost:8123", user="default", password=password) as client:
        storage = ClickhouseStorage(client)
        transfers = await storage.get_transfers()
        stats = await calculate_user_stats_clickhouse(client)
        print(len(transfers), "transfers,", len(stats), "addresses")


asyncio.run(report())
```

`ClickhouseClient` sends the user and password as `X-ClickHouse-User` and `X-ClickHouse-Key`
headers. It exchanges rows as `JSONEachRow`. It has these methods:

- `fetch_all(sql)` returns the rows as dictionaries.
- `execute(sql)` runs a statement and ignores its result.
- `insert(table, rows)` inserts rows given as mappings.
- `aclose()` closes the connection.

It can also be used as an async context manager. An `httpx` transport can be passed for
testing.

`ClickhouseStorage(client)`, or `ClickhouseStorage.from_url(url)`, has two methods:

- `insert_transfer(transfer)` inserts one transfer.
- `get_transfers()` reads every row of `transfers`.

Failed requests and non-200 responses raise `ClickhouseError`. Its `status` attribute holds
the HTTP status when there was one.

The SQL query and the Python code give different results in some cases. The query counts
both sides of a transfer from an address to itself. It leaves out addresses whose incoming
and outgoing amounts are never positive. It also tracks incoming and outgoing running sums
separately when it computes the maximum balance.

### Records

`Transfer` (`ts`, `address_from`, `address_to`, `amount`, `usd_price`) and `UserStats`
(`address`, `total_volume`, `avg_buy_price`, `avg_sell_price`, `max_balance`) are data
classes. `to_dict` and `to_json` convert them to dictionaries and JSON. `from_dict` and
`from_json` build them back.