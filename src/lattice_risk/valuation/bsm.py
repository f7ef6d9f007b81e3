"""Black-Scholes closed-form valuation of European payoffs."""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging
import numpy as np
from scipy.stats import norm
from ..enums import OptionType
from ..exceptions import UnsupportedFeatureError
from ..instruments import EuropeanCallSpread, EuropeanOption
from ..utils import calculate_year_fraction

if TYPE_CHECKING:
    from ..market_environment import Market


logger = logging.getLogger(__name__)


def _d_values(
    spot: float, strike: float, time_to_maturity: float, rate: float, volatility: float
) -> tuple[float, float]:
    """Return ``(d1, d2)``; strike 0 maps to the deep in-the-money limit."""
    if strike <= 0.0:
        return np.inf, np.inf
    denominator = volatility * np.sqrt(time_to_maturity)
    d1 = (np.log(spot / strike) + (rate + 0.5 * volatility**2) * time_to_maturity) / denominator
    return d1, d1 - denominator


def black_scholes_price(
    spot: float,
    strike: float,
    time_to_maturity: float,
    rate: float,
    volatility: float,
    option_type: OptionType = OptionType.CALL,
) -> float:
    """Black-Scholes value of a European option per unit notional.

    Parameters
    ==========
    spot: float
        current underlying price
    strike: float
        strike price
    time_to_maturity: float
        year fraction to expiry
    rate: float
        continuously compounded risk-free rate
    volatility: float
        lognormal volatility
    option_type: OptionType
        CALL, PUT, BINARY_CALL (cash-or-nothing, pays 1) or BINARY_PUT

    Returns
    =======
    value: float
        option value; the undiscounted intrinsic payoff when
        ``time_to_maturity <= 0`` or ``volatility <= 0``
    """
    if time_to_maturity <= 0.0 or volatility <= 0.0:
        return _intrinsic(spot, strike, option_type)

    d1, d2 = _d_values(spot, strike, time_to_maturity, rate, volatility)
    df = np.exp(-rate * time_to_maturity)
    if option_type is OptionType.CALL:
        value = spot * norm.cdf(d1) - strike * df * norm.cdf(d2)
    elif option_type is OptionType.PUT:
        value = strike * df * norm.cdf(-d2) - spot * norm.cdf(-d1)
    elif option_type is OptionType.BINARY_CALL:
        value = df * norm.cdf(d2)
    else:
        value = df * norm.cdf(-d2)
    return float(value)


def _intrinsic(spot: float, strike: float, option_type: OptionType) -> float:
    if option_type is OptionType.CALL:
        return max(spot - strike, 0.0)
    if option_type is OptionType.PUT:
        return max(strike - spot, 0.0)
    if option_type is OptionType.BINARY_CALL:
        return 1.0 if spot >= strike else 0.0
    return 1.0 if spot <= strike else 0.0


class BlackScholesPricer:
    """Closed-form pricer for European options and European call spreads.

    Reads spot, volatility and rate from the market the same way the tree
    pricer does, which makes it the reference for lattice convergence.
    """

    def price_unit(self, market: Market, instrument) -> float:
        """Signed value per unit notional."""
        if not isinstance(instrument, (EuropeanOption, EuropeanCallSpread)):
            raise UnsupportedFeatureError(
                f"Black-Scholes cannot price {type(instrument).__name__}; "
                "only European options and call spreads are supported"
            )

        spot = market.get_stock_price(instrument.underlying)
        T = calculate_year_fraction(market.as_of, instrument.expiry)
        sigma = market.get_vol_curve(instrument.vol_curve).vol(instrument.expiry)
        rate = market.get_curve(instrument.rate_curve).rate(instrument.expiry)

        if isinstance(instrument, EuropeanCallSpread):
            width = instrument.strike2 - instrument.strike1
            low = black_scholes_price(spot, instrument.strike1, T, rate, sigma, OptionType.CALL)
            high = black_scholes_price(spot, instrument.strike2, T, rate, sigma, OptionType.CALL)
            value = (low - high) / width
        else:
            value = black_scholes_price(
                spot, instrument.strike, T, rate, sigma, instrument.option_type
            )
        logger.debug("Black-Scholes %s value=%.6f", instrument.instrument_type, value)
        return instrument.sign * value

    def price(self, market: Market, instrument) -> float:
        """Signed value scaled by notional."""
        return instrument.notional * self.price_unit(market, instrument)
