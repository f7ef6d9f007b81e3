from .exceptions import (
    LatticeRiskError,
    ValidationError,
    ConfigurationError,
    DataNotFoundError,
    NumericalError,
    ArbitrageViolationError,
    UnsupportedFeatureError,
)
from .enums import OptionType, PositionSide, ExerciseType, TreeModel, RiskType
from .rates import RateCurve
from .volatility import VolCurve
from .market_environment import Market
from .instruments import (
    TreeProduct,
    EuropeanOption,
    AmericanOption,
    EuropeanCallSpread,
    AmericanCallSpread,
    Bond,
    Swap,
)
from .valuation import Pricer, BinomialTreePricer, BinomialParams, BlackScholesPricer
from .risk import RiskEngine, RiskParams
from .loaders import load_market, load_trades


__all__ = [
    "LatticeRiskError",
    "ValidationError",
    "ConfigurationError",
    "DataNotFoundError",
    "NumericalError",
    "ArbitrageViolationError",
    "UnsupportedFeatureError",
    "OptionType",
    "PositionSide",
    "ExerciseType",
    "TreeModel",
    "RiskType",
    "RateCurve",
    "VolCurve",
    "Market",
    "TreeProduct",
    "EuropeanOption",
    "AmericanOption",
    "EuropeanCallSpread",
    "AmericanCallSpread",
    "Bond",
    "Swap",
    "Pricer",
    "BinomialTreePricer",
    "BinomialParams",
    "BlackScholesPricer",
    "RiskEngine",
    "RiskParams",
    "load_market",
    "load_trades",
]
