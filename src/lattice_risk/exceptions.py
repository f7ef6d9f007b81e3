"""Custom exception hierarchy for the lattice_risk library.

All library-specific exceptions inherit from :class:`LatticeRiskError`,
enabling callers to catch *any* library error with a single ``except`` clause::

    try:
        pv = Pricer().price(market, option)
    except LatticeRiskError as exc:
        log.error("Library error: %s", exc)
"""

from __future__ import annotations


class LatticeRiskError(Exception):
    """Base exception for all library errors."""


# ── Input validation ────────────────────────────────────────────────


class ValidationError(LatticeRiskError):
    """Invalid input values (negative strike, expiry before trade date, bad frequency, etc.)."""


class ConfigurationError(LatticeRiskError):
    """Wrong types passed to a public API, or a malformed shock specification."""


# ── Market data ─────────────────────────────────────────────────────


class DataNotFoundError(LatticeRiskError, KeyError):
    """A requested curve, vol curve, spot or bond price is absent from the market."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


# ── Feature support ─────────────────────────────────────────────────


class UnsupportedFeatureError(LatticeRiskError):
    """Requested feature combination is not (yet) supported."""


# ── Numerical issues ────────────────────────────────────────────────


class NumericalError(LatticeRiskError):
    """Base for errors arising from numerical computation."""


class ArbitrageViolationError(NumericalError):
    """Model parameters imply an arbitrage (e.g. risk-neutral probability outside [0, 1])."""
