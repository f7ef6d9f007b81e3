"""Valuation facade: one ``price(market, instrument)`` entry point."""

from __future__ import annotations

from typing import TYPE_CHECKING
import logging

from ..exceptions import ConfigurationError, UnsupportedFeatureError
from ..instruments import TreeProduct
from .binomial import BinomialTreePricer
from .params import BinomialParams

if TYPE_CHECKING:
    from ..market_environment import Market

logger = logging.getLogger(__name__)


class Pricer:
    """Route an instrument to the tree engine or to its own closed form.

    Instruments satisfying :class:`~lattice_risk.instruments.TreeProduct` are
    valued on the binomial lattice; the signed unit value (direction is
    applied inside ``payoff``) is scaled by the notional magnitude. Any other
    instrument must expose ``pv(market)``.

    Parameters
    ==========
    params: BinomialParams, optional
        tree configuration; ignored when ``tree_pricer`` is given
    tree_pricer: BinomialTreePricer, optional
        pre-built tree engine to share between facades
    """

    def __init__(
        self,
        params: BinomialParams | None = None,
        *,
        tree_pricer: BinomialTreePricer | None = None,
    ) -> None:
        self.tree_pricer = tree_pricer if tree_pricer is not None else BinomialTreePricer(params)

    @property
    def params(self) -> BinomialParams:
        return self.tree_pricer.params

    def price(self, market: Market, instrument) -> float:
        """Present value of ``instrument`` under ``market`` (signed by direction)."""
        if instrument is None:
            raise ConfigurationError("instrument must not be None")
        if isinstance(instrument, TreeProduct):
            pv = instrument.notional * self.tree_pricer.price_tree(market, instrument)
        elif callable(getattr(instrument, "pv", None)):
            pv = float(instrument.pv(market))
        else:
            raise UnsupportedFeatureError(
                f"{type(instrument).__name__} is neither lattice-priceable nor exposes pv(market)"
            )
        logger.debug(
            "Priced %s %s pv=%.6f",
            getattr(instrument, "instrument_type", type(instrument).__name__),
            getattr(instrument, "underlying", ""),
            pv,
        )
        return pv
