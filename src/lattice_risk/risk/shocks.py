"""Shocked market snapshots for bump-and-reprice risk.

A decorator takes a base :class:`~lattice_risk.market_environment.Market`
and a :class:`MarketShock` and builds its own deep copies with one factor
bumped. The base market is never mutated. A shock whose target is missing
from the market degrades to an unmodified copy with a ``RuntimeWarning``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING
import datetime as dt
import logging
import warnings

from ..exceptions import ConfigurationError
from ..utils import as_date

if TYPE_CHECKING:
    from ..market_environment import Market

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MarketShock:
    """One risk factor bump: target key, tenor date and magnitude."""

    factor: str
    size: float
    tenor: dt.date | None = None

    def __post_init__(self):
        if not isinstance(self.factor, str) or not self.factor.strip():
            raise ConfigurationError("shock factor must be a non-empty string")
        object.__setattr__(self, "factor", self.factor.strip().upper())
        try:
            object.__setattr__(self, "size", float(self.size))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(f"shock size must be numeric, got {self.size!r}") from exc
        if self.tenor is not None:
            object.__setattr__(self, "tenor", as_date(self.tenor))


class _ShockDecorator:
    kind = "factor"

    def __init__(self, market: Market, shock: MarketShock) -> None:
        if not isinstance(shock, MarketShock):
            raise ConfigurationError(f"shock must be a MarketShock, got {type(shock).__name__}")
        self.shock = shock
        self.market_origin = market

    @property
    def factor(self) -> str:
        return self.shock.factor

    def _missing(self, market: Market) -> Market:
        warnings.warn(
            f"{self.kind} {self.factor} not found in market {market.name!r}; "
            "using unshocked copy",
            RuntimeWarning,
            stacklevel=4,
        )
        return market


class _TenorShockDecorator(_ShockDecorator):
    def __init__(self, market: Market, shock: MarketShock) -> None:
        super().__init__(market, shock)
        if shock.tenor is None:
            raise ConfigurationError(f"{self.kind} shock on {shock.factor} has no tenor")

    def _has_target(self, market: Market) -> bool:
        raise NotImplementedError

    def _target(self, market: Market):
        raise NotImplementedError

    def _bumped(self, delta: float) -> Market:
        clone = self.market_origin.copy()
        if not self._has_target(clone):
            return self._missing(clone)
        self._target(clone).shock_tenor(self.shock.tenor, delta)
        return clone


class CurveDecorator(_TenorShockDecorator):
    """Up and down copies of the market with one rate curve bumped at one tenor."""

    kind = "Rate curve"

    def __init__(self, market: Market, shock: MarketShock) -> None:
        super().__init__(market, shock)
        self.market_up = self._bumped(+shock.size)
        self.market_down = self._bumped(-shock.size)

    def _has_target(self, market: Market) -> bool:
        return market.has_curve(self.factor)

    def _target(self, market: Market):
        return market.get_curve(self.factor)


class VolDecorator(_TenorShockDecorator):
    """A single upward-bumped copy plus the unmodified original market."""

    kind = "Vol curve"

    def __init__(self, market: Market, shock: MarketShock) -> None:
        super().__init__(market, shock)
        self.market_bumped = self._bumped(+shock.size)

    def _has_target(self, market: Market) -> bool:
        return market.has_vol_curve(self.factor)

    def _target(self, market: Market):
        return market.get_vol_curve(self.factor)


class PriceDecorator(_ShockDecorator):
    """Up and down copies with one spot price scaled by ``1 +/- size``."""

    kind = "Stock"

    def __init__(self, market: Market, shock: MarketShock) -> None:
        super().__init__(market, shock)
        self.market_up = self._bumped(+shock.size)
        self.market_down = self._bumped(-shock.size)

    @property
    def spot(self) -> float:
        return self.market_origin.get_stock_price(self.factor)

    def _bumped(self, bump: float) -> Market:
        clone = self.market_origin.copy()
        if self.factor not in clone.stock_symbols:
            return self._missing(clone)
        clone.shock_price(self.factor, bump)
        return clone
