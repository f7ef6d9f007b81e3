import datetime as dt

from lattice_risk.enums import OptionType, PositionSide
from lattice_risk.instruments import EuropeanOption
from lattice_risk.market_environment import Market
from lattice_risk.rates import RateCurve
from lattice_risk.utils import add_tenor
from lattice_risk.volatility import VolCurve

AS_OF = dt.date(2025, 1, 1)
ONE_YEAR = dt.date(2026, 1, 1)
STANDARD_TENORS = ("3M", "6M", "1Y", "2Y", "5Y")


def flat_rate_curve(as_of, rate, name="USD-SOFR", tenors=STANDARD_TENORS) -> RateCurve:
    """Flat zero curve with points at ``tenors`` from ``as_of``."""
    return RateCurve.from_tenor_quotes(name, as_of, {t: rate for t in tenors})


def flat_vol_curve(as_of, vol, name="LOGVOL", tenors=STANDARD_TENORS) -> VolCurve:
    return VolCurve.from_tenor_quotes(name, as_of, {t: vol for t in tenors})


def build_market(
    as_of=AS_OF,
    *,
    rate: float = 0.05,
    vol: float = 0.20,
    spot: float = 100.0,
    symbol: str = "AAPL",
    curve_names=("USD-SOFR",),
    name: str = "test",
) -> Market:
    """Market with flat rate curve(s), one flat vol curve and one stock."""
    market = Market(as_of, name)
    for curve_name in curve_names:
        market.add_curve(curve_name, flat_rate_curve(as_of, rate, name=curve_name))
    market.add_vol_curve("LOGVOL", flat_vol_curve(as_of, vol))
    market.add_stock_price(symbol, spot)
    return market


def make_option(
    cls=EuropeanOption,
    *,
    option_type: OptionType = OptionType.CALL,
    strike: float = 100.0,
    expiry=None,
    side: PositionSide = PositionSide.LONG,
    notional: float = 1.0,
    underlying: str = "AAPL",
    trade_date=AS_OF,
    **kwargs,
):
    """Option expiring one year after ``trade_date`` unless ``expiry`` is given."""
    if expiry is None:
        expiry = add_tenor(trade_date, "1Y")
    return cls(
        option_type=option_type,
        strike=strike,
        expiry=expiry,
        side=side,
        notional=notional,
        underlying=underlying,
        trade_date=trade_date,
        **kwargs,
    )
