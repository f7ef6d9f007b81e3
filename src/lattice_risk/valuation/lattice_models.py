"""Recombining binomial lattice parameterizations.

Each model maps ``(sigma, rate, dt)`` to the up factor ``u``, down factor
``d`` and risk-neutral up probability ``p = (exp(rate*dt) - d) / (u - d)``.

- Cox-Ross-Rubinstein: ``u = exp(sigma*sqrt(dt))``, ``d = 1/u``.
- Jarrow-Rudd: ``u, d = exp((rate - sigma^2/2)*dt +/- sigma*sqrt(dt))``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import NamedTuple
import logging

import numpy as np

from ..enums import TreeModel
from ..exceptions import ArbitrageViolationError, ConfigurationError, NumericalError

logger = logging.getLogger(__name__)


class LatticeParameters(NamedTuple):
    u: float
    d: float
    p: float


def _check_inputs(sigma: float, rate: float, dt: float) -> None:
    if not (np.isfinite(sigma) and np.isfinite(rate) and np.isfinite(dt)):
        raise NumericalError(
            f"lattice inputs must be finite (sigma={sigma}, rate={rate}, dt={dt})"
        )
    if dt <= 0.0:
        raise NumericalError(f"time step must be positive, got dt={dt}")
    if sigma <= 0.0:
        raise NumericalError(f"volatility must be positive, got sigma={sigma}")


def _risk_neutral(u: float, d: float, rate: float, dt: float) -> LatticeParameters:
    growth = np.exp(rate * dt)
    p = (growth - d) / (u - d)
    if not (0.0 <= p <= 1.0):
        raise ArbitrageViolationError(
            "Arbitrage condition violated: risk-neutral probability outside [0, 1] "
            f"(p={p:.6f}, u={u:.6f}, d={d:.6f}, dt={dt:.6f})"
        )
    return LatticeParameters(float(u), float(d), float(p))


def crr_parameters(sigma: float, rate: float, dt: float) -> LatticeParameters:
    """Cox-Ross-Rubinstein up/down factors and probability."""
    _check_inputs(sigma, rate, dt)
    u = np.exp(sigma * np.sqrt(dt))
    d = 1.0 / u
    return _risk_neutral(u, d, rate, dt)


def jarrow_rudd_parameters(sigma: float, rate: float, dt: float) -> LatticeParameters:
    """Jarrow-Rudd (drift-adjusted) up/down factors and probability."""
    _check_inputs(sigma, rate, dt)
    drift = (rate - 0.5 * sigma**2) * dt
    diffusion = sigma * np.sqrt(dt)
    u = np.exp(drift + diffusion)
    d = np.exp(drift - diffusion)
    return _risk_neutral(u, d, rate, dt)


_MODEL_REGISTRY: dict[TreeModel, Callable[[float, float, float], LatticeParameters]] = {
    TreeModel.CRR: crr_parameters,
    TreeModel.JARROW_RUDD: jarrow_rudd_parameters,
}


def lattice_parameters(
    model: TreeModel, sigma: float, rate: float, dt: float
) -> LatticeParameters:
    """Dispatch to the parameterization registered for ``model``."""
    try:
        builder = _MODEL_REGISTRY[model]
    except KeyError as exc:
        raise ConfigurationError(f"no lattice parameterization for {model!r}") from exc
    params = builder(float(sigma), float(rate), float(dt))
    logger.debug(
        "Lattice %s: u=%.6f d=%.6f p=%.6f dt=%.6f", model.value, params.u, params.d, params.p, dt
    )
    return params
