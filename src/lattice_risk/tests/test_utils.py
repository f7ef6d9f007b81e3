"""Tests for day counts, tenor arithmetic, schedules and parsing helpers."""

import datetime as dt
import logging

import numpy as np
import pandas as pd
import pytest

from lattice_risk.enums import DayCountConvention
from lattice_risk.exceptions import ConfigurationError, ValidationError
from lattice_risk.utils import (
    add_tenor,
    as_date,
    calculate_year_fraction,
    frequency_to_tenor,
    generate_schedule,
    log_timing,
    parse_percentage,
    tenor_offset,
)


# ---------------------------------------------------------------------------
# Day counts
# ---------------------------------------------------------------------------


class TestYearFraction:
    def test_act365f_one_year(self):
        assert calculate_year_fraction(dt.date(2025, 1, 1), dt.date(2026, 1, 1)) == 1.0

    def test_act365f_leap_year(self):
        """2024 is a leap year → 366 actual days."""
        yf = calculate_year_fraction(dt.date(2024, 1, 1), dt.date(2025, 1, 1))
        assert np.isclose(yf, 366.0 / 365.0)

    def test_act360_90_days(self):
        yf = calculate_year_fraction(
            dt.date(2025, 1, 1), dt.date(2025, 4, 1), DayCountConvention.ACT_360
        )
        assert np.isclose(yf, 0.25)

    def test_act365_25_four_years(self):
        yf = calculate_year_fraction(
            dt.date(2024, 1, 1), dt.date(2028, 1, 1), DayCountConvention.ACT_365_25
        )
        assert np.isclose(yf, 4.0)

    def test_thirty_360_month_ends(self):
        """Both 31sts roll to the 30th."""
        yf = calculate_year_fraction(
            dt.date(2025, 1, 31), dt.date(2025, 3, 31), DayCountConvention.THIRTY_360_US
        )
        assert np.isclose(yf, 60.0 / 360.0)

    def test_thirty_360_jan31_to_feb28(self):
        yf = calculate_year_fraction(
            dt.date(2025, 1, 31), dt.date(2025, 2, 28), DayCountConvention.THIRTY_360_US
        )
        assert np.isclose(yf, 28.0 / 360.0)

    def test_reversed_dates_are_negative(self):
        assert calculate_year_fraction(dt.date(2026, 1, 1), dt.date(2025, 1, 1)) == -1.0

    def test_time_of_day_is_ignored(self):
        start = dt.datetime(2025, 1, 1, 18, 30)
        end = dt.date(2025, 1, 2)
        assert np.isclose(calculate_year_fraction(start, end), 1.0 / 365.0)


class TestAsDate:
    def test_datetime_is_truncated(self):
        assert as_date(dt.datetime(2025, 3, 4, 12, 0)) == dt.date(2025, 3, 4)

    def test_date_passes_through(self):
        d = dt.date(2025, 3, 4)
        assert as_date(d) is d

    def test_string_rejected(self):
        with pytest.raises(ConfigurationError):
            as_date("2025-03-04")


# ---------------------------------------------------------------------------
# Tenors
# ---------------------------------------------------------------------------


class TestAddTenor:
    @pytest.mark.parametrize(
        "tenor, expected",
        [
            ("ON", dt.date(2025, 1, 2)),
            ("O/N", dt.date(2025, 1, 2)),
            ("7D", dt.date(2025, 1, 8)),
            ("2W", dt.date(2025, 1, 15)),
            ("3M", dt.date(2025, 4, 1)),
            ("1Y", dt.date(2026, 1, 1)),
            (" 6m ", dt.date(2025, 7, 1)),
        ],
    )
    def test_tenor_labels(self, tenor, expected):
        assert add_tenor(dt.date(2025, 1, 1), tenor) == expected

    def test_month_end_clamps(self):
        assert add_tenor(dt.date(2025, 1, 31), "1M") == dt.date(2025, 2, 28)
        assert add_tenor(dt.date(2024, 1, 31), "1M") == dt.date(2024, 2, 29)

    def test_leap_day_plus_one_year(self):
        assert add_tenor(dt.date(2024, 2, 29), "1Y") == dt.date(2025, 2, 28)

    def test_unknown_unit_rejected(self):
        with pytest.raises(ValidationError, match="Unsupported tenor"):
            add_tenor(dt.date(2025, 1, 1), "10X")

    def test_non_string_rejected(self):
        with pytest.raises(ConfigurationError):
            add_tenor(dt.date(2025, 1, 1), 3)

    def test_tenor_offset_is_a_pandas_offset(self):
        offset = tenor_offset("6M")
        assert isinstance(offset, pd.DateOffset)
        assert (pd.Timestamp("2025-08-31") + offset).date() == dt.date(2026, 2, 28)


class TestSchedules:
    @pytest.mark.parametrize(
        "frequency, tenor", [(0.25, "3M"), (0.5, "6M"), (1.0, "1Y"), (1.0 / 12.0, "1M")]
    )
    def test_frequency_to_tenor(self, frequency, tenor):
        assert frequency_to_tenor(frequency) == tenor

    @pytest.mark.parametrize("frequency", [0.0, -0.5, 1.5])
    def test_frequency_out_of_range(self, frequency):
        with pytest.raises(ValidationError, match="frequency"):
            frequency_to_tenor(frequency)

    def test_quarterly_schedule(self):
        schedule = generate_schedule(dt.date(2025, 1, 15), dt.date(2026, 1, 15), 0.25)
        assert schedule == [
            dt.date(2025, 1, 15),
            dt.date(2025, 4, 15),
            dt.date(2025, 7, 15),
            dt.date(2025, 10, 15),
            dt.date(2026, 1, 15),
        ]

    def test_short_final_period_kept(self):
        schedule = generate_schedule(dt.date(2025, 1, 15), dt.date(2025, 12, 1), 0.5)
        assert schedule == [dt.date(2025, 1, 15), dt.date(2025, 7, 15), dt.date(2025, 12, 1)]

    def test_month_end_clamp_rolls_forward(self):
        schedule = generate_schedule(dt.date(2025, 1, 31), dt.date(2025, 7, 31), 1.0 / 12.0)
        assert schedule == [
            dt.date(2025, 1, 31),
            dt.date(2025, 2, 28),
            dt.date(2025, 3, 28),
            dt.date(2025, 4, 28),
            dt.date(2025, 5, 28),
            dt.date(2025, 6, 28),
            dt.date(2025, 7, 31),
        ]

    def test_quarterly_from_month_end_rolls_from_previous_date(self):
        schedule = generate_schedule(dt.date(2025, 1, 31), dt.date(2026, 1, 31), 0.25)
        assert schedule == [
            dt.date(2025, 1, 31),
            dt.date(2025, 4, 30),
            dt.date(2025, 7, 30),
            dt.date(2025, 10, 30),
            dt.date(2026, 1, 30),
            dt.date(2026, 1, 31),
        ]

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError):
            generate_schedule(dt.date(2025, 1, 1), dt.date(2025, 1, 1), 0.5)


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------


class TestParsePercentage:
    def test_with_percent_sign(self):
        assert np.isclose(parse_percentage("5.56%"), 0.0556)

    def test_without_percent_sign(self):
        assert np.isclose(parse_percentage(" 20 "), 0.20)

    def test_invalid(self):
        with pytest.raises(ValidationError, match="Invalid percentage"):
            parse_percentage("abc%")


class TestLogTiming:
    def test_enabled_emits_debug_record(self, caplog):
        log = logging.getLogger("lattice_risk.tests.timing")
        with caplog.at_level(logging.DEBUG, logger="lattice_risk.tests.timing"):
            with log_timing(log, "block", True):
                pass
        assert any("Timing block" in r.getMessage() for r in caplog.records)

    def test_disabled_is_silent(self, caplog):
        log = logging.getLogger("lattice_risk.tests.timing")
        with caplog.at_level(logging.DEBUG, logger="lattice_risk.tests.timing"):
            with log_timing(log, "block", False):
                pass
        assert not caplog.records
