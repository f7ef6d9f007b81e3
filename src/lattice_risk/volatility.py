"""Volatility term structure keyed by tenor date."""

from __future__ import annotations

import datetime as dt

from .rates import TenorCurve


class VolCurve(TenorCurve):
    """Lognormal (Black) volatility by expiry date.

    Shares the interpolation rules of :class:`~lattice_risk.rates.TenorCurve`:
    exact at inserted tenors, linear in calendar days between them, flat
    beyond the ends.
    """

    value_label = "vol"

    def add_vol(self, tenor: dt.date, vol: float) -> None:
        self.add_point(tenor, vol)

    def vol(self, date: dt.date) -> float:
        """Volatility at ``date``."""
        return self.value_at(date)
