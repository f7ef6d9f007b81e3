"""Instrument definitions.

A closed set of immutable instrument variants:

- :class:`EuropeanOption`, :class:`AmericanOption` (vanilla and binary)
- :class:`EuropeanCallSpread`, :class:`AmericanCallSpread` (normalized ramp)
- :class:`Bond`, :class:`Swap` (closed-form discounting)

Options and spreads satisfy the :class:`TreeProduct` capability and are priced
on a binomial lattice; bonds and swaps value themselves through ``pv(market)``.

Direction is applied exactly once, inside ``payoff``: a short position
returns the negated payoff. ``notional`` is always the (non-negative)
magnitude.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace as dc_replace
from typing import TYPE_CHECKING, ClassVar, Protocol, runtime_checkable
import datetime as dt
import logging

import numpy as np

from .enums import DayCountConvention, ExerciseType, OptionType, PositionSide
from .exceptions import ConfigurationError, ValidationError
from .utils import as_date, calculate_year_fraction, generate_schedule

if TYPE_CHECKING:
    from .market_environment import Market

logger = logging.getLogger(__name__)

DEFAULT_RATE_CURVE = "USD-SOFR"
DEFAULT_VOL_CURVE = "LOGVOL"


@runtime_checkable
class TreeProduct(Protocol):
    """Capability required for binomial lattice pricing."""

    expiry: dt.date
    underlying: str
    notional: float
    rate_curve: str
    vol_curve: str

    def payoff(self, spot): ...

    def value_at_node(self, spot, t, continuation): ...


def _finite_float(value, label: str) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{label} must be numeric") from exc
    if not np.isfinite(out):
        raise ValidationError(f"{label} must be finite")
    return out


def _like_input(values: np.ndarray, spot) -> np.ndarray | float:
    """Return a float for scalar input, an array for array input."""
    if np.ndim(spot) == 0:
        return float(values)
    return values


@dataclass(frozen=True, slots=True, kw_only=True)
class Instrument:
    """Fields and validation shared by every instrument."""

    notional: float
    trade_date: dt.date
    expiry: dt.date
    underlying: str
    side: PositionSide | str = PositionSide.LONG
    rate_curve: str | None = None

    instrument_type: ClassVar[str] = "Instrument"

    def __post_init__(self) -> None:
        if isinstance(self.side, str):
            try:
                object.__setattr__(self, "side", PositionSide(self.side.lower()))
            except ValueError as exc:
                raise ConfigurationError(f"unknown position side {self.side!r}") from exc
        if not isinstance(self.side, PositionSide):
            raise ConfigurationError(
                f"side must be PositionSide enum, got {type(self.side).__name__}"
            )

        notional = _finite_float(self.notional, f"{self.instrument_type}.notional")
        if notional < 0.0:
            raise ValidationError(
                f"{self.instrument_type}.notional must be >= 0; use side for direction"
            )
        object.__setattr__(self, "notional", notional)

        if not isinstance(self.underlying, str) or not self.underlying.strip():
            raise ValidationError(f"{self.instrument_type}.underlying cannot be empty")
        object.__setattr__(self, "underlying", self.underlying.strip().upper())

        trade_date = as_date(self.trade_date)
        expiry = as_date(self.expiry)
        if expiry <= trade_date:
            raise ValidationError(f"{self.instrument_type} expiry must be after trade date")
        object.__setattr__(self, "trade_date", trade_date)
        object.__setattr__(self, "expiry", expiry)

        if self.rate_curve is not None:
            object.__setattr__(self, "rate_curve", self.rate_curve.strip().upper())

    @property
    def is_long(self) -> bool:
        return self.side is PositionSide.LONG

    @property
    def sign(self) -> float:
        return 1.0 if self.is_long else -1.0

    def replace(self, **kwargs: object):
        """Return a copy with fields replaced (the original is never mutated)."""
        return dc_replace(self, **kwargs)


# ── Lattice instruments ─────────────────────────────────────────────


@dataclass(frozen=True, slots=True, kw_only=True)
class _TreeInstrument(Instrument):
    """Base for instruments priced on the lattice.

    Subclasses implement ``_intrinsic(spot)`` (unsigned, per unit notional,
    vectorized over spot) and set ``exercise_type``.
    """

    vol_curve: str = DEFAULT_VOL_CURVE

    exercise_type: ClassVar[ExerciseType] = ExerciseType.EUROPEAN

    def __post_init__(self) -> None:
        Instrument.__post_init__(self)
        if self.rate_curve is None:
            object.__setattr__(self, "rate_curve", DEFAULT_RATE_CURVE)
        object.__setattr__(self, "vol_curve", self.vol_curve.strip().upper())

    def _intrinsic(self, spot: np.ndarray) -> np.ndarray:
        raise NotImplementedError

    def payoff(self, spot):
        """Signed payoff per unit notional at ``spot`` (float or array)."""
        s = np.asarray(spot, dtype=float)
        return _like_input(self.sign * self._intrinsic(s), spot)

    def value_at_node(self, spot, t, continuation):
        """Node value given the discounted continuation value.

        European exercise keeps the continuation. American exercise takes the
        larger of the signed payoff and the continuation on either side.
        """
        if self.exercise_type is ExerciseType.EUROPEAN:
            return continuation
        return np.maximum(self.payoff(spot), continuation)

    def market_payoff(self, market: Market) -> float:
        """Payoff at today's spot, scaled by notional."""
        return self.notional * float(self.payoff(market.get_stock_price(self.underlying)))


@dataclass(frozen=True, slots=True, kw_only=True)
class _VanillaOption(_TreeInstrument):
    option_type: OptionType
    strike: float

    def __post_init__(self) -> None:
        _TreeInstrument.__post_init__(self)
        if not isinstance(self.option_type, OptionType):
            raise ConfigurationError(
                f"option_type must be OptionType enum, got {type(self.option_type).__name__}"
            )
        strike = _finite_float(self.strike, f"{self.instrument_type}.strike")
        if strike < 0.0:
            raise ValidationError(f"{self.instrument_type}.strike must be >= 0")
        object.__setattr__(self, "strike", strike)

    def _intrinsic(self, spot: np.ndarray) -> np.ndarray:
        K = self.strike
        if self.option_type is OptionType.CALL:
            return np.maximum(spot - K, 0.0)
        if self.option_type is OptionType.PUT:
            return np.maximum(K - spot, 0.0)
        if self.option_type is OptionType.BINARY_CALL:
            return np.where(spot >= K, 1.0, 0.0)
        return np.where(spot <= K, 1.0, 0.0)


@dataclass(frozen=True, slots=True, kw_only=True)
class EuropeanOption(_VanillaOption):
    """European vanilla or binary option on a stock."""

    instrument_type: ClassVar[str] = "EuropeanOption"
    exercise_type: ClassVar[ExerciseType] = ExerciseType.EUROPEAN


@dataclass(frozen=True, slots=True, kw_only=True)
class AmericanOption(_VanillaOption):
    """American (early-exercise) vanilla or binary option on a stock."""

    instrument_type: ClassVar[str] = "AmericanOption"
    exercise_type: ClassVar[ExerciseType] = ExerciseType.AMERICAN


@dataclass(frozen=True, slots=True, kw_only=True)
class _CallSpread(_TreeInstrument):
    """Normalized call spread: 0 below strike1, 1 above strike2, linear in between."""

    strike1: float
    strike2: float

    def __post_init__(self) -> None:
        _TreeInstrument.__post_init__(self)
        k1 = _finite_float(self.strike1, f"{self.instrument_type}.strike1")
        k2 = _finite_float(self.strike2, f"{self.instrument_type}.strike2")
        if k1 < 0.0:
            raise ValidationError(f"{self.instrument_type}.strike1 must be >= 0")
        if k1 >= k2:
            raise ValidationError("strike1 must be less than strike2")
        object.__setattr__(self, "strike1", k1)
        object.__setattr__(self, "strike2", k2)

    @property
    def strike(self) -> float:
        return 0.5 * (self.strike1 + self.strike2)

    @property
    def option_type(self) -> OptionType:
        return OptionType.CALL

    def _intrinsic(self, spot: np.ndarray) -> np.ndarray:
        ramp = (spot - self.strike1) / (self.strike2 - self.strike1)
        return np.clip(ramp, 0.0, 1.0)


@dataclass(frozen=True, slots=True, kw_only=True)
class EuropeanCallSpread(_CallSpread):
    instrument_type: ClassVar[str] = "EuroCallSpread"
    exercise_type: ClassVar[ExerciseType] = ExerciseType.EUROPEAN


@dataclass(frozen=True, slots=True, kw_only=True)
class AmericanCallSpread(_CallSpread):
    instrument_type: ClassVar[str] = "AmerCallSpread"
    exercise_type: ClassVar[ExerciseType] = ExerciseType.AMERICAN


# ── Closed-form instruments ─────────────────────────────────────────


@dataclass(frozen=True, slots=True, kw_only=True)
class _ScheduledInstrument(Instrument):
    """Fixed-schedule rate instrument. ``underlying`` names the discount curve."""

    frequency: float
    start_date: dt.date | None = None
    schedule: tuple[dt.date, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        Instrument.__post_init__(self)
        if self.rate_curve is None:
            object.__setattr__(self, "rate_curve", self.underlying)
        start = self.trade_date if self.start_date is None else as_date(self.start_date)
        object.__setattr__(self, "start_date", start)

        frequency = _finite_float(self.frequency, f"{self.instrument_type}.frequency")
        if not (0.0 < frequency <= 1.0):
            raise ValidationError(
                f"{self.instrument_type}.frequency must be in (0, 1], got {frequency}"
            )
        object.__setattr__(self, "frequency", frequency)
        if self.expiry <= start:
            raise ValidationError(f"{self.instrument_type} maturity must be after start date")
        object.__setattr__(
            self, "schedule", tuple(generate_schedule(start, self.expiry, frequency))
        )

    @property
    def maturity(self) -> dt.date:
        return self.expiry

    def _live_periods(self, as_of: dt.date):
        """(period start, payment date) pairs whose payment is not in the past."""
        for prev, pay in zip(self.schedule[:-1], self.schedule[1:]):
            if pay < as_of:
                continue
            yield prev, pay


@dataclass(frozen=True, slots=True, kw_only=True)
class Bond(_ScheduledInstrument):
    """Fixed-coupon bullet bond discounted on ``rate_curve``.

    Coupons accrue ACT/365F. ``payoff(price)`` is ``notional * (price - 100)``
    for a price quoted per 100.
    """

    coupon_rate: float

    instrument_type: ClassVar[str] = "Bond"

    def __post_init__(self) -> None:
        _ScheduledInstrument.__post_init__(self)
        object.__setattr__(
            self, "coupon_rate", _finite_float(self.coupon_rate, "Bond.coupon_rate")
        )

    @property
    def strike(self) -> float:
        return self.coupon_rate

    def payoff(self, market_price):
        price = np.asarray(market_price, dtype=float)
        return _like_input(self.sign * self.notional * (price - 100.0), market_price)

    def market_payoff(self, market: Market) -> float:
        return float(self.payoff(market.get_bond_price(self.underlying)))

    def pv(self, market: Market) -> float:
        curve = market.get_curve(self.rate_curve)
        coupon = self.notional * self.coupon_rate
        pv = 0.0
        for prev, pay in self._live_periods(market.as_of):
            tau = calculate_year_fraction(prev, pay, DayCountConvention.ACT_365F)
            pv += coupon * tau * curve.df(pay)
        if self.expiry >= market.as_of:
            pv += self.notional * curve.df(self.expiry)
        logger.debug("Bond %s pv=%.6f", self.underlying, pv)
        return self.sign * pv


@dataclass(frozen=True, slots=True, kw_only=True)
class Swap(_ScheduledInstrument):
    """Fixed-for-floating interest rate swap on a single curve.

    A long position pays fixed and receives floating. Fixed accruals are
    ACT/360; the floating leg is valued as ``notional * (df(start) - df(maturity))``.
    """

    fixed_rate: float

    instrument_type: ClassVar[str] = "Swap"

    def __post_init__(self) -> None:
        _ScheduledInstrument.__post_init__(self)
        object.__setattr__(self, "fixed_rate", _finite_float(self.fixed_rate, "Swap.fixed_rate"))

    @property
    def strike(self) -> float:
        return self.fixed_rate

    def payoff(self, rate):
        r = np.asarray(rate, dtype=float)
        return _like_input(self.sign * self.notional * (r - self.fixed_rate), rate)

    def annuity(self, market: Market) -> float:
        """PV of one unit of fixed rate paid on the remaining schedule."""
        curve = market.get_curve(self.rate_curve)
        annuity = 0.0
        for prev, pay in self._live_periods(market.as_of):
            tau = calculate_year_fraction(prev, pay, DayCountConvention.ACT_360)
            annuity += self.notional * tau * curve.df(pay)
        return annuity

    def floating_leg(self, market: Market) -> float:
        curve = market.get_curve(self.rate_curve)
        df_start = curve.df(self.start_date) if self.start_date > market.as_of else 1.0
        return self.notional * (df_start - curve.df(self.expiry))

    def par_rate(self, market: Market) -> float:
        annuity = self.annuity(market)
        if annuity == 0.0:
            raise ValidationError("Swap has no remaining fixed payments")
        return self.floating_leg(market) / annuity

    def market_payoff(self, market: Market) -> float:
        return self.pv(market)

    def pv(self, market: Market) -> float:
        fixed = self.fixed_rate * self.annuity(market)
        floating = self.floating_leg(market)
        logger.debug("Swap %s fixed=%.6f floating=%.6f", self.underlying, fixed, floating)
        return self.sign * (floating - fixed)
