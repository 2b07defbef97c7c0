"""Records for token transfers and per-address statistics."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any, Mapping


@dataclass
class Transfer:
    """A single movement of tokens from one address to another."""

    ts: int
    address_from: str
    address_to: str
    amount: float
    usd_price: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Transfer:
        return cls(
            ts=int(data["ts"]),
            address_from=str(data["address_from"]),
            address_to=str(data["address_to"]),
            amount=float(data["amount"]),
            usd_price=float(data["usd_price"]),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> Transfer:
        return cls.from_dict(json.loads(text))


@dataclass
class UserStats:
    """Aggregated trading figures for one address."""

    address: str
    total_volume: float
    avg_buy_price: float
    avg_sell_price: float
    max_balance: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UserStats:
        return cls(
            address=str(data["address"]),
            total_volume=float(data["total_volume"]),
            avg_buy_price=float(data["avg_buy_price"]),
            avg_sell_price=float(data["avg_sell_price"]),
            max_balance=float(data["max_balance"]),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> UserStats:
        return cls.from_dict(json.loads(text))