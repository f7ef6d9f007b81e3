"""Risk engine configuration."""

from dataclasses import dataclass
import datetime as dt

import numpy as np

from ..exceptions import ConfigurationError, LatticeRiskError, ValidationError
from ..utils import add_tenor

_TENOR_PROBE_DATE = dt.date(2000, 1, 31)


def _shock_size(value, label: str) -> float:
    if isinstance(value, bool):
        raise ConfigurationError(f"{label} must be numeric, got bool")
    try:
        size = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"{label} must be numeric, got {value!r}") from exc
    if not np.isfinite(size):
        raise ValidationError(f"{label} must be finite, got {size}")
    if size < 0.0:
        raise ValidationError(f"{label} must be >= 0, got {size}")
    return size


@dataclass(frozen=True, slots=True)
class RiskParams:
    """Parameters for bump-and-reprice risk.

    Attributes
    ==========
    curve_shock:
        Absolute bump applied to a rate curve at ``shock_tenor`` (dv01).
    vol_shock:
        Absolute bump applied to a vol curve at ``shock_tenor`` (vega).
    price_shock:
        Relative spot bump for delta, e.g. 0.01 for 1%. None disables
        the price factors.
    shock_tenor:
        Tenor, relative to the market date, of the point that is bumped.
        Default: "1Y".
    concurrent_workers:
        Thread pool size for concurrent risk. None means one worker per
        risk factor.
    log_timings:
        Emit a DEBUG timing record for every risk computation.
    """

    curve_shock: float
    vol_shock: float
    price_shock: float | None = None
    shock_tenor: str = "1Y"
    concurrent_workers: int | None = None
    log_timings: bool = False

    def __post_init__(self):
        object.__setattr__(self, "curve_shock", _shock_size(self.curve_shock, "curve_shock"))
        object.__setattr__(self, "vol_shock", _shock_size(self.vol_shock, "vol_shock"))
        if self.price_shock is not None:
            object.__setattr__(self, "price_shock", _shock_size(self.price_shock, "price_shock"))

        try:
            add_tenor(_TENOR_PROBE_DATE, self.shock_tenor)
        except LatticeRiskError as exc:
            raise ConfigurationError(f"invalid shock_tenor {self.shock_tenor!r}") from exc

        if self.concurrent_workers is not None:
            if isinstance(self.concurrent_workers, bool) or not isinstance(
                self.concurrent_workers, int
            ):
                raise ConfigurationError("concurrent_workers must be an int or None")
            if self.concurrent_workers < 1:
                raise ValidationError(
                    f"concurrent_workers must be >= 1, got {self.concurrent_workers}"
                )
