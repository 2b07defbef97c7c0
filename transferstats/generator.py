"""Random generation of mock transfers."""

from __future__ import annotations

import random
import string
import sys
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

from transferstats.model import Transfer

_ALPHANUMERIC = string.ascii_letters + string.digits
_EPSILON = sys.float_info.epsilon


@dataclass
class TransferGenConfig:
    """Ranges the generated transfers are drawn from."""

    min_amount: float = 1.0
    max_amount: float = 1000.0
    min_price: float = 0.1
    max_price: float = 2.0
    max_age_secs: int = 86_400 * 30


class TransferGenerator(ABC):
    """Something that produces transfers."""

    @abstractmethod
    def generate(self, count: int) -> list[Transfer]:
        """Return ``count`` transfers."""


def rand_address(rng: random.Random) -> str:
    """Return a random address: ``0x`` followed by ten alphanumeric characters."""
    return "0x" + "".join(rng.choices(_ALPHANUMERIC, k=10))


def _value_in(rng: random.Random, low: float, high: float, what: str) -> float:
    if abs(low - high) < _EPSILON:
        return low
    if not low < high:
        raise ValueError(f"empty {what} range: {low} .. {high}")
    return low + (high - low) * rng.random()


class DefaultTransferGenerator(TransferGenerator):
    """Draws transfers uniformly from the ranges in a :class:`TransferGenConfig`."""

    def __init__(
        self, config: TransferGenConfig | None = None, rng: random.Random | None = None
    ) -> None:
        self.config = config if config is not None else TransferGenConfig()
        self._rng = rng if rng is not None else random.Random()

    def _one(self, now: int) -> Transfer:
        cfg = self.config
        rng = self._rng
        address_from = rand_address(rng)
        address_to = rand_address(rng)
        amount = _value_in(rng, cfg.min_amount, cfg.max_amount, "amount")
        usd_price = _value_in(rng, cfg.min_price, cfg.max_price, "price")
        if cfg.max_age_secs <= 0:
            raise ValueError(f"max_age_secs must be positive, got {cfg.max_age_secs}")
        ts = now - rng.randrange(cfg.max_age_secs)
        return Transfer(
            ts=ts,
            address_from=address_from,
            address_to=address_to,
            amount=amount,
            usd_price=usd_price,
        )

    def generate(self, count: int) -> list[Transfer]:
        if count < 0:
            raise ValueError(f"count must not be negative, got {count}")
        now = int(time.time())
        return [self._one(now) for _ in range(count)]