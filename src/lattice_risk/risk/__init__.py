"""Bump-and-reprice risk.

Public API
----------
RiskEngine: dv01 / vega / delta by risk factor, sequential or threaded
RiskParams: risk configuration
MarketShock, CurveDecorator, VolDecorator, PriceDecorator: shocked snapshots
"""

from .engine import RiskEngine
from .params import RiskParams
from .shocks import CurveDecorator, MarketShock, PriceDecorator, VolDecorator

__all__ = [
    "RiskEngine",
    "RiskParams",
    "MarketShock",
    "CurveDecorator",
    "VolDecorator",
    "PriceDecorator",
]
