"""Asynchronous client for the ClickHouse HTTP interface."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any

import httpx

DEFAULT_USER = "default"
PASSWORD = "password"

_QUERY_SETTINGS = {"output_format_json_quote_64bit_integers": "0"}


class ClickhouseError(Exception):
    """Raised when the server rejects a request or cannot be reached."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def _quote_identifier(name: str) -> str:
    escaped = name.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"


def _strip_statement(sql: str) -> str:
    return sql.strip().rstrip(";").rstrip()


class ClickhouseClient:
    """Talks to a ClickHouse server over HTTP, exchanging rows as JSON."""

    def __init__(
        self,
        database_url: str,
        user: str = DEFAULT_USER,
        password: str = PASSWORD,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.database_url = database_url
        self.user = user
        self._http = httpx.AsyncClient(
            headers={"X-ClickHouse-User": user, "X-ClickHouse-Key": password},
            transport=transport,
        )

    async def _post(self, content: str, params: Mapping[str, str] | None = None) -> str:
        try:
            response = await self._http.post(
                self.database_url, params=dict(params or {}), content=content.encode("utf-8")
            )
        except httpx.HTTPError as exc:
            raise ClickhouseError(f"request to {self.database_url} failed: {exc}") from exc
        if response.status_code != 200:
            raise ClickhouseError(response.text.strip(), status=response.status_code)
        return response.text

    async def fetch_all(self, sql: str) -> list[dict[str, Any]]:
        """Run a SELECT and return every row as a dictionary."""
        text = await self._post(
            f"{_strip_statement(sql)}\nFORMAT JSONEachRow", params=_QUERY_SETTINGS
        )
        return [json.loads(line) for line in text.splitlines() if line.strip()]

    async def execute(self, sql: str) -> None:
        """Run a statement whose result is not needed."""
        await self._post(_strip_statement(sql))

    async def insert(self, table: str, rows: Iterable[Mapping[str, Any]]) -> None:
        """Insert rows, given as mappings of column name to value, into a table."""
        body = "".join(json.dumps(dict(row)) + "\n" for row in rows)
        if not body:
            return
        query = f"INSERT INTO {_quote_identifier(table)} FORMAT JSONEachRow"
        await self._post(body, params={"query": query})

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> ClickhouseClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()