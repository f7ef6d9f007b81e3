"""Enums for instruments, lattice models and risk."""

from enum import Enum

__all__ = [
    "OptionType",
    "PositionSide",
    "ExerciseType",
    "TreeModel",
    "RiskType",
    "DayCountConvention",
]


class OptionType(Enum):
    CALL = "call"
    PUT = "put"
    BINARY_CALL = "binary_call"
    BINARY_PUT = "binary_put"


class PositionSide(Enum):
    LONG = "long"
    SHORT = "short"


class ExerciseType(Enum):
    EUROPEAN = "european"
    AMERICAN = "american"


class TreeModel(Enum):
    CRR = "crr"
    JARROW_RUDD = "jarrow_rudd"


class RiskType(Enum):
    DV01 = "dv01"
    VEGA = "vega"
    DELTA = "delta"


class DayCountConvention(Enum):
    ACT_360 = "ACT/360"
    ACT_365F = "ACT/365F"
    ACT_365_25 = "ACT/365.25"
    THIRTY_360_US = "30/360 US"
