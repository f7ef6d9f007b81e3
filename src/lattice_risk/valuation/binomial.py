"""Valuation of lattice instruments on a recombining binomial tree.

A single backward-induction routine serves European and early-exercise
products: the instrument's ``value_at_node`` hook decides what each node is
worth given its discounted continuation value.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging
import numpy as np
from ..exceptions import ConfigurationError
from ..instruments import TreeProduct
from ..utils import calculate_year_fraction, log_timing
from .lattice_models import lattice_parameters
from .params import BinomialParams

if TYPE_CHECKING:
    from ..market_environment import Market


logger = logging.getLogger(__name__)


class BinomialTreePricer:
    """Backward-induction pricer for :class:`~lattice_risk.instruments.TreeProduct`.

    Parameters
    ==========
    params: BinomialParams, optional
        step count, lattice model and timing flag; defaults to
        ``BinomialParams()`` (50 CRR steps)

    The pricer holds no mutable state. Every call allocates its own
    ``num_steps + 1`` node array, so one instance may be shared by threads.
    """

    def __init__(self, params: BinomialParams | None = None) -> None:
        if params is None:
            params = BinomialParams()
        if not isinstance(params, BinomialParams):
            raise ConfigurationError(
                f"BinomialTreePricer requires BinomialParams, got {type(params).__name__}"
            )
        self.params = params

    def price_tree(self, market: Market, instrument: TreeProduct) -> float:
        """Signed value per unit notional of ``instrument`` under ``market``.

        Spot, volatility and rate are read from ``market``; volatility and
        rate are sampled at the instrument's expiry. An instrument at or past
        expiry is worth its immediate payoff.
        """
        spot = market.get_stock_price(instrument.underlying)
        T = calculate_year_fraction(market.as_of, instrument.expiry)
        if T <= 0.0:
            logger.debug("Instrument expired (T=%.6f); returning intrinsic payoff", T)
            return float(instrument.payoff(spot))

        sigma = market.get_vol_curve(instrument.vol_curve).vol(instrument.expiry)
        rate = market.get_curve(instrument.rate_curve).rate(instrument.expiry)

        num_steps = int(self.params.num_steps)
        dt = T / num_steps
        logger.debug(
            "Binomial %s num_steps=%d T=%.6f sigma=%.6f rate=%.6f",
            self.params.model.value,
            num_steps,
            T,
            sigma,
            rate,
        )
        with log_timing(logger, "Binomial price_tree", self.params.log_timings):
            u, d, p = lattice_parameters(self.params.model, sigma, rate, dt)
            return self._backward_induction(instrument, spot, u, d, p, rate, dt, num_steps)

    @staticmethod
    def _backward_induction(
        instrument: TreeProduct,
        spot: float,
        u: float,
        d: float,
        p: float,
        rate: float,
        dt: float,
        num_steps: int,
    ) -> float:
        # node index i counts up-moves: spot(k, i) = S0 * u^i * d^(k-i)
        ups = np.arange(num_steps + 1)
        state = np.array(
            instrument.payoff(spot * u**ups * d ** (num_steps - ups)), dtype=float
        )
        discount = np.exp(-rate * dt)

        for k in range(num_steps - 1, -1, -1):
            i = ups[: k + 1]
            continuation = discount * (p * state[1 : k + 2] + (1.0 - p) * state[: k + 1])
            node_spots = spot * u**i * d ** (k - i)
            state[: k + 1] = instrument.value_at_node(node_spots, k * dt, continuation)

        return float(state[0])
