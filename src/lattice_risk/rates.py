"""Interest-rate curve utilities."""

from __future__ import annotations

from collections.abc import Mapping
import datetime as dt
import warnings

import numpy as np
import pandas as pd

from .exceptions import ConfigurationError, DataNotFoundError, ValidationError
from .utils import add_tenor, as_date, calculate_year_fraction


class TenorCurve:
    """Date-keyed curve of values with linear interpolation on calendar days.

    Points are kept sorted by tenor date. Inserting a point at an existing
    tenor overwrites its value. Queries return the exact value at an
    inserted tenor, interpolate linearly (using calendar-day ordinals as the
    axis) between bracketing tenors, and extrapolate flat beyond either end.

    A curve instance is owned by exactly one market snapshot; use
    :meth:`copy` to obtain an independent clone before mutating.
    """

    value_label = "value"

    def __init__(self, name: str = "", reference_date: dt.date | None = None) -> None:
        self.name = name
        self.reference_date = as_date(reference_date) if reference_date is not None else None
        self._ordinals = np.empty(0, dtype=np.int64)
        self._values = np.empty(0, dtype=float)

    @classmethod
    def from_tenor_quotes(
        cls,
        name: str,
        as_of: dt.date,
        quotes: Mapping[str, float],
    ):
        """Build a curve from tenor labels (``"3M"``, ``"1Y"``...) relative to ``as_of``."""
        curve = cls(name, reference_date=as_of)
        for tenor, value in quotes.items():
            curve.add_point(add_tenor(as_of, tenor), value)
        return curve

    # ------------------------------------------------------------------
    # Construction / mutation
    # ------------------------------------------------------------------

    def add_point(self, tenor: dt.date, value: float) -> None:
        """Insert (or overwrite) the value at ``tenor`` keeping tenors sorted."""
        tenor = as_date(tenor)
        try:
            value = float(value)
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"{self.value_label} must be numeric, got {value!r}") from exc
        if not np.isfinite(value):
            raise ValidationError(f"{self.value_label} must be finite, got {value}")

        idx = self._find(tenor)
        if idx is not None:
            self._values[idx] = value
            return
        pos = int(np.searchsorted(self._ordinals, tenor.toordinal()))
        self._ordinals = np.insert(self._ordinals, pos, tenor.toordinal())
        self._values = np.insert(self._values, pos, value)

    def _find(self, tenor: dt.date) -> int | None:
        """Index of the point at exactly ``tenor``, or None."""
        ordinal = tenor.toordinal()
        pos = int(np.searchsorted(self._ordinals, ordinal))
        if pos < len(self._ordinals) and self._ordinals[pos] == ordinal:
            return pos
        return None

    def shock(self, delta: float) -> None:
        """Apply a parallel additive shift to every point."""
        self._values = self._values + float(delta)

    def shock_tenor(self, tenor: dt.date, delta: float) -> bool:
        """Shift the point at exactly ``tenor`` by ``delta``.

        Returns False (with a RuntimeWarning) when the tenor is not on the curve;
        the curve is left unchanged in that case.
        """
        tenor = as_date(tenor)
        idx = self._find(tenor)
        if idx is not None:
            self._values[idx] += float(delta)
            return True
        warnings.warn(
            f"Tenor {tenor.isoformat()} not found on curve {self.name!r}; shock ignored",
            RuntimeWarning,
            stacklevel=2,
        )
        return False

    def copy(self):
        """Return an independent clone (no shared point storage)."""
        clone = type(self)(self.name, reference_date=self.reference_date)
        clone._ordinals = self._ordinals.copy()
        clone._values = self._values.copy()
        return clone

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def tenors(self) -> tuple[dt.date, ...]:
        return tuple(dt.date.fromordinal(int(o)) for o in self._ordinals)

    @property
    def values(self) -> tuple[float, ...]:
        return tuple(float(v) for v in self._values)

    @property
    def start_date(self) -> dt.date:
        """Date from which discounting year fractions are measured."""
        if self.reference_date is not None:
            return self.reference_date
        self._require_points()
        return dt.date.fromordinal(int(self._ordinals[0]))

    def __len__(self) -> int:
        return len(self._ordinals)

    def __contains__(self, tenor: object) -> bool:
        if not isinstance(tenor, dt.date):
            return False
        return self._find(as_date(tenor)) is not None

    def _require_points(self) -> None:
        if len(self._ordinals) == 0:
            raise DataNotFoundError(f"Curve {self.name!r} is empty", key=self.name)

    def value_at(self, date: dt.date) -> float:
        """Exact, interpolated or flat-extrapolated value at ``date``."""
        self._require_points()
        ordinal = as_date(date).toordinal()
        # np.interp is exact at the nodes and flat beyond either end
        return float(np.interp(ordinal, self._ordinals, self._values))

    def to_series(self) -> pd.Series:
        """Curve points as a date-indexed pandas Series."""
        return pd.Series(
            self._values.copy(),
            index=pd.Index(self.tenors, name="tenor"),
            name=self.name or self.value_label,
            dtype=float,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, points={len(self)})"


class RateCurve(TenorCurve):
    """Continuously-compounded zero-rate curve keyed by tenor date.

    Discount factors are ``exp(-r(date) * tau)`` where ``tau`` is the
    ACT/365F year fraction from the curve start (``reference_date`` when
    set, otherwise the first tenor) to ``date``.
    """

    value_label = "rate"

    def add_rate(self, tenor: dt.date, rate: float) -> None:
        self.add_point(tenor, rate)

    def rate(self, date: dt.date) -> float:
        """Zero rate at ``date``."""
        return self.value_at(date)

    def df(self, date: dt.date) -> float:
        """Discount factor from the curve start to ``date``."""
        r = self.rate(date)
        tau = calculate_year_fraction(self.start_date, date)
        return float(np.exp(-r * tau))

    def forward_rate(self, start: dt.date, end: dt.date) -> float:
        """Continuously-compounded forward rate between two dates."""
        t0 = calculate_year_fraction(self.start_date, start)
        t1 = calculate_year_fraction(self.start_date, end)
        if t1 <= t0:
            raise ConfigurationError("forward_rate needs end after start")
        return (np.log(self.df(start)) - np.log(self.df(end))) / (t1 - t0)
