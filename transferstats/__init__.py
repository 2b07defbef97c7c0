"""Generate token transfers, store them in ClickHouse and compute per-address trading statistics."""

__version__ = "0.1.0"

__all__ = ["__version__"]