"""Instrument valuation engines.

Public API
----------
Core classes:
    Pricer: Valuation facade routing instruments to the tree or closed form
    BinomialTreePricer: Backward-induction lattice engine
    BlackScholesPricer: Closed-form European pricer

Lattice models:
    LatticeParameters: (u, d, p) triple
    crr_parameters / jarrow_rudd_parameters: parameterizations

Parameter classes:
    BinomialParams: Configuration for binomial tree pricing
"""

from .core import Pricer
from .binomial import BinomialTreePricer
from .bsm import BlackScholesPricer, black_scholes_price
from .lattice_models import (
    LatticeParameters,
    crr_parameters,
    jarrow_rudd_parameters,
    lattice_parameters,
)
from .params import BinomialParams

__all__ = [
    # Core valuation classes
    "Pricer",
    "BinomialTreePricer",
    "BlackScholesPricer",
    "black_scholes_price",
    # Lattice models
    "LatticeParameters",
    "crr_parameters",
    "jarrow_rudd_parameters",
    "lattice_parameters",
    # Parameter classes
    "BinomialParams",
]
