"""Tests for tenor-keyed rate and volatility curves."""

import datetime as dt

import numpy as np
import pandas as pd
import pytest

from lattice_risk.exceptions import ConfigurationError, DataNotFoundError, ValidationError
from lattice_risk.rates import RateCurve
from lattice_risk.volatility import VolCurve

from lattice_risk.tests.helpers import AS_OF, flat_rate_curve

D0 = dt.date(2025, 1, 1)
D1 = dt.date(2025, 1, 31)
D2 = dt.date(2025, 12, 31)


def two_point_curve() -> RateCurve:
    curve = RateCurve("TEST")
    curve.add_rate(D0, 0.02)
    curve.add_rate(D1, 0.04)
    return curve


class TestInterpolation:
    def test_exact_tenor_returns_inserted_value(self):
        assert two_point_curve().rate(D1) == 0.04

    def test_midpoint_is_average(self):
        midpoint = D0 + (D1 - D0) / 2
        assert two_point_curve().rate(midpoint) == pytest.approx(0.03)

    def test_beyond_last_tenor_is_flat(self):
        assert two_point_curve().rate(D2) == 0.04

    def test_before_first_tenor_is_flat(self):
        assert two_point_curve().rate(dt.date(2024, 6, 1)) == 0.02

    def test_datetime_query_matches_date(self):
        curve = two_point_curve()
        assert curve.rate(dt.datetime(2025, 1, 31, 17, 0)) == 0.04

    def test_vol_curve_same_rules(self):
        vols = VolCurve("LOGVOL")
        vols.add_vol(D0, 0.10)
        vols.add_vol(D1, 0.30)
        assert vols.vol(D0 + (D1 - D0) / 2) == pytest.approx(0.20)
        assert vols.vol(D2) == 0.30

    def test_matches_linear_interpolation_on_day_ordinals(self):
        curve = RateCurve("TEST")
        quotes = {D0: 0.02, D1: 0.04, D2: 0.01}
        for tenor, rate in quotes.items():
            curve.add_rate(tenor, rate)
        xs = [t.toordinal() for t in quotes]
        ys = list(quotes.values())
        queries = [D0 + dt.timedelta(days=n) for n in range(-30, 400, 7)]
        np.testing.assert_allclose(
            [curve.rate(q) for q in queries],
            np.interp([q.toordinal() for q in queries], xs, ys),
            rtol=0.0,
            atol=1e-15,
        )


class TestInsertion:
    def test_out_of_order_inserts_stay_sorted(self):
        curve = RateCurve("TEST")
        curve.add_rate(D2, 0.03)
        curve.add_rate(D0, 0.01)
        curve.add_rate(D1, 0.02)
        assert curve.tenors == (D0, D1, D2)
        assert curve.values == (0.01, 0.02, 0.03)

    def test_same_date_overwrites(self):
        curve = two_point_curve()
        curve.add_rate(D1, 0.05)
        assert len(curve) == 2
        assert curve.rate(D1) == 0.05

    def test_non_numeric_rejected(self):
        with pytest.raises(ValidationError, match="numeric"):
            RateCurve("TEST").add_rate(D0, "abc")

    def test_non_finite_rejected(self):
        with pytest.raises(ValidationError, match="finite"):
            RateCurve("TEST").add_rate(D0, np.nan)

    def test_from_tenor_quotes(self):
        curve = RateCurve.from_tenor_quotes("USD-SOFR", AS_OF, {"1Y": 0.05, "3M": 0.04})
        assert curve.tenors == (dt.date(2025, 4, 1), dt.date(2026, 1, 1))
        assert curve.reference_date == AS_OF

    def test_empty_curve_query_raises(self):
        with pytest.raises(DataNotFoundError, match="empty"):
            RateCurve("EMPTY").rate(D0)


class TestDiscounting:
    def test_flat_curve_one_year_df(self):
        curve = flat_rate_curve(AS_OF, 0.05)
        assert curve.df(dt.date(2026, 1, 1)) == pytest.approx(np.exp(-0.05))

    def test_start_defaults_to_first_tenor(self):
        curve = two_point_curve()
        assert curve.start_date == D0
        assert curve.df(D0) == 1.0

    def test_reference_date_overrides_first_tenor(self):
        curve = flat_rate_curve(AS_OF, 0.05)
        assert curve.start_date == AS_OF
        assert curve.df(AS_OF) == 1.0

    def test_flat_forward_rate(self):
        curve = flat_rate_curve(AS_OF, 0.05)
        fwd = curve.forward_rate(dt.date(2025, 4, 1), dt.date(2026, 1, 1))
        assert fwd == pytest.approx(0.05)

    def test_forward_rate_needs_ordered_dates(self):
        curve = flat_rate_curve(AS_OF, 0.05)
        with pytest.raises(ConfigurationError):
            curve.forward_rate(dt.date(2026, 1, 1), dt.date(2025, 4, 1))


class TestMutation:
    def test_parallel_shock(self):
        curve = two_point_curve()
        curve.shock(0.01)
        assert curve.values == pytest.approx((0.03, 0.05))

    def test_shock_tenor_hits_only_that_point(self):
        curve = two_point_curve()
        assert curve.shock_tenor(D1, 0.01) is True
        assert curve.rate(D0) == 0.02
        assert curve.rate(D1) == pytest.approx(0.05)

    def test_shock_tenor_missing_warns(self):
        curve = two_point_curve()
        with pytest.warns(RuntimeWarning, match="not found"):
            assert curve.shock_tenor(D2, 0.01) is False
        assert curve.values == (0.02, 0.04)

    def test_copy_is_independent(self):
        curve = two_point_curve()
        clone = curve.copy()
        clone.shock(0.01)
        clone.add_rate(D2, 0.09)
        assert curve.values == (0.02, 0.04)
        assert len(curve) == 2
        assert isinstance(clone, RateCurve)

    def test_to_series(self):
        series = two_point_curve().to_series()
        assert isinstance(series, pd.Series)
        assert list(series.index) == [D0, D1]
        assert series.name == "TEST"
