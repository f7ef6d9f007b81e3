"""Market snapshot container for valuation and risk."""

from __future__ import annotations

import datetime as dt
import logging
import warnings

import numpy as np
import pandas as pd

from .exceptions import ConfigurationError, DataNotFoundError, ValidationError
from .rates import RateCurve
from .utils import as_date
from .volatility import VolCurve


def _normalize_key(name: str) -> str:
    if not isinstance(name, str):
        raise ConfigurationError(f"market keys must be strings, got {type(name).__name__}")
    return name.strip().upper()


def _as_price(value: float, label: str) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{label} must be numeric, got {value!r}") from exc
    if not np.isfinite(price):
        raise ValidationError(f"{label} must be finite, got {price}")
    return price


class Market:
    """In-memory market snapshot: rate curves, vol curves, spot and bond prices.

    All keys are case-insensitive (normalized to upper case). A missing key
    raises :class:`~lattice_risk.exceptions.DataNotFoundError`; there are no
    silent defaults.

    The snapshot exclusively owns its curve instances. :meth:`copy` clones
    every curve, so shocking a copy never leaks into the original.

    Parameters
    ==========
    as_of: date
        valuation date
    name: str
        free-form label for the snapshot
    logger: logging.Logger, optional
        observability hook for construction/copy/lookup diagnostics; the
        module logger is used when omitted
    """

    def __init__(
        self,
        as_of: dt.date,
        name: str = "",
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.as_of = as_of
        self.name = name
        self._log = logger if logger is not None else logging.getLogger(__name__)
        self._curves: dict[str, RateCurve] = {}
        self._vols: dict[str, VolCurve] = {}
        self._stock_prices: dict[str, float] = {}
        self._bond_prices: dict[str, float] = {}
        self._log.debug("Market %r created as of %s", self.name, self.as_of)

    @property
    def as_of(self) -> dt.date:
        return self._as_of

    @as_of.setter
    def as_of(self, value: dt.date) -> None:
        self._as_of = as_date(value)

    # ------------------------------------------------------------------
    # Add / update
    # ------------------------------------------------------------------

    def add_curve(self, name: str, curve: RateCurve) -> None:
        """Store a private copy of ``curve`` under ``name``."""
        if not isinstance(curve, RateCurve):
            raise ConfigurationError(f"curve must be a RateCurve, got {type(curve).__name__}")
        self._curves[_normalize_key(name)] = curve.copy()

    def add_vol_curve(self, name: str, curve: VolCurve) -> None:
        if not isinstance(curve, VolCurve):
            raise ConfigurationError(f"vol curve must be a VolCurve, got {type(curve).__name__}")
        self._vols[_normalize_key(name)] = curve.copy()

    def add_stock_price(self, symbol: str, price: float) -> None:
        self._stock_prices[_normalize_key(symbol)] = _as_price(price, "stock price")

    def add_bond_price(self, bond: str, price: float) -> None:
        self._bond_prices[_normalize_key(bond)] = _as_price(price, "bond price")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _lookup(self, table: dict, name: str, label: str):
        key = _normalize_key(name)
        try:
            return table[key]
        except KeyError:
            available = sorted(table)
            self._log.error("%s not found in market: %s (available: %s)", label, key, available)
            raise DataNotFoundError(
                f"{label} not found: {key}. Available: {available}", key=key
            ) from None

    def get_curve(self, name: str) -> RateCurve:
        return self._lookup(self._curves, name, "Rate curve")

    def get_vol_curve(self, name: str) -> VolCurve:
        return self._lookup(self._vols, name, "Vol curve")

    def get_stock_price(self, symbol: str) -> float:
        return self._lookup(self._stock_prices, symbol, "Stock price")

    def get_bond_price(self, bond: str) -> float:
        return self._lookup(self._bond_prices, bond, "Bond price")

    def has_curve(self, name: str) -> bool:
        return _normalize_key(name) in self._curves

    def has_vol_curve(self, name: str) -> bool:
        return _normalize_key(name) in self._vols

    @property
    def curve_names(self) -> list[str]:
        return sorted(self._curves)

    @property
    def vol_curve_names(self) -> list[str]:
        return sorted(self._vols)

    @property
    def stock_symbols(self) -> list[str]:
        return sorted(self._stock_prices)

    @property
    def bond_names(self) -> list[str]:
        return sorted(self._bond_prices)

    # ------------------------------------------------------------------
    # Shocks / copies
    # ------------------------------------------------------------------

    def shock_price(self, symbol: str, bump: float) -> bool:
        """Scale a spot price by ``(1 + bump)``; warn and return False when absent."""
        key = _normalize_key(symbol)
        if key not in self._stock_prices:
            warnings.warn(
                f"Stock {key} not found in market {self.name!r}; price shock ignored",
                RuntimeWarning,
                stacklevel=2,
            )
            return False
        self._stock_prices[key] *= 1.0 + float(bump)
        return True

    def copy(self, name: str | None = None) -> "Market":
        """Deep copy: every curve is cloned, price tables are copied."""
        clone = Market(self.as_of, self.name if name is None else name, logger=self._log)
        clone._curves = {k: c.copy() for k, c in self._curves.items()}
        clone._vols = {k: v.copy() for k, v in self._vols.items()}
        clone._stock_prices = dict(self._stock_prices)
        clone._bond_prices = dict(self._bond_prices)
        return clone

    def describe(self) -> pd.DataFrame:
        """Long-format summary of every market quote (kind, name, tenor, value)."""
        rows: list[dict] = []
        for kind, table in (("rate", self._curves), ("vol", self._vols)):
            for key in sorted(table):
                curve = table[key]
                for tenor, value in zip(curve.tenors, curve.values):
                    rows.append({"kind": kind, "name": key, "tenor": tenor, "value": value})
        for kind, prices in (("stock", self._stock_prices), ("bond", self._bond_prices)):
            for key in sorted(prices):
                rows.append({"kind": kind, "name": key, "tenor": None, "value": prices[key]})
        return pd.DataFrame(rows, columns=["kind", "name", "tenor", "value"])

    def __repr__(self) -> str:
        return (
            f"Market(name={self.name!r}, as_of={self.as_of.isoformat()}, "
            f"curves={self.curve_names}, vols={self.vol_curve_names})"
        )
