"""Shared pytest fixtures for lattice_risk tests."""

import datetime as dt

import pytest

from lattice_risk.enums import OptionType, PositionSide
from lattice_risk.instruments import AmericanOption, Bond, EuropeanOption, Swap
from lattice_risk.market_environment import Market

from lattice_risk.tests.helpers import AS_OF, ONE_YEAR, build_market, make_option


# ---------------------------------------------------------------------------
# Scalar constants
# ---------------------------------------------------------------------------

SPOT = 100.0
STRIKE = 100.0
RATE = 0.05
VOL = 0.20


@pytest.fixture()
def as_of() -> dt.date:
    return AS_OF


@pytest.fixture()
def one_year() -> dt.date:
    return ONE_YEAR


# ---------------------------------------------------------------------------
# Market
# ---------------------------------------------------------------------------


@pytest.fixture()
def market() -> Market:
    """Flat 5% USD-SOFR curve, flat 20% vol, AAPL at 100."""
    return build_market(rate=RATE, vol=VOL, spot=SPOT)


@pytest.fixture()
def multi_curve_market() -> Market:
    """Two rate curves so that risk has an irrelevant factor."""
    market = build_market(rate=RATE, vol=VOL, spot=SPOT, curve_names=("USD-SOFR", "EUR-ESTR"))
    market.add_stock_price("MSFT", 400.0)
    return market


# ---------------------------------------------------------------------------
# Instruments
# ---------------------------------------------------------------------------


@pytest.fixture()
def euro_call() -> EuropeanOption:
    return make_option(EuropeanOption, option_type=OptionType.CALL, strike=STRIKE)


@pytest.fixture()
def euro_put() -> EuropeanOption:
    return make_option(EuropeanOption, option_type=OptionType.PUT, strike=STRIKE)


@pytest.fixture()
def amer_put() -> AmericanOption:
    return make_option(AmericanOption, option_type=OptionType.PUT, strike=STRIKE)


@pytest.fixture()
def short_amer_put() -> AmericanOption:
    return make_option(
        AmericanOption, option_type=OptionType.PUT, strike=STRIKE, side=PositionSide.SHORT
    )


@pytest.fixture()
def bond() -> Bond:
    """Two-year 4% semi-annual bond discounted on USD-SOFR."""
    return Bond(
        underlying="USD-SOFR",
        trade_date=AS_OF,
        expiry=dt.date(2027, 1, 1),
        notional=100.0,
        coupon_rate=0.04,
        frequency=0.5,
    )


@pytest.fixture()
def swap() -> Swap:
    """Five-year quarterly payer swap on USD-SOFR."""
    return Swap(
        underlying="USD-SOFR",
        trade_date=AS_OF,
        expiry=dt.date(2030, 1, 1),
        notional=1_000_000.0,
        fixed_rate=0.045,
        frequency=0.25,
    )
