"""Bump-and-reprice risk engine.

For each configured risk factor the engine reprices an instrument under that
factor's shocked markets and normalizes the PV difference:

- dv01 (per rate curve): ``(PV(up) - PV(down)) / (2 * curve_shock)``
- vega (per vol curve):  ``(PV(bumped) - PV(origin)) / vol_shock``
- delta (per stock):     ``(PV(up) - PV(down)) / (2 * price_shock * spot)``

A zero shock size yields exactly 0 for every factor of that type.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
import logging

from ..enums import RiskType
from ..exceptions import ConfigurationError, NumericalError
from ..market_environment import Market
from ..utils import add_tenor, log_timing
from ..valuation.core import Pricer
from .params import RiskParams
from .shocks import CurveDecorator, MarketShock, PriceDecorator, VolDecorator

logger = logging.getLogger(__name__)


def _coerce_risk_type(risk_type: RiskType | str) -> RiskType:
    if isinstance(risk_type, RiskType):
        return risk_type
    if isinstance(risk_type, str):
        try:
            return RiskType(risk_type.strip().lower())
        except ValueError as exc:
            valid = [r.value for r in RiskType]
            raise ConfigurationError(
                f"unknown risk type {risk_type!r}; expected one of {valid}"
            ) from exc
    raise ConfigurationError(f"risk_type must be RiskType or str, got {type(risk_type).__name__}")


class RiskEngine:
    """Finite-difference sensitivities by factor.

    Shocked markets are built once, at construction, from ``market``: one
    :class:`CurveDecorator` per rate curve, one :class:`VolDecorator` per vol
    curve and, when ``price_shock`` is set, one :class:`PriceDecorator` per
    stock. Each decorator owns deep copies, so factor repricings share no
    mutable state and may run on separate threads.

    Parameters
    ==========
    market: Market
        base snapshot (never mutated)
    curve_shock: float
        absolute rate bump at the shock tenor
    vol_shock: float
        absolute vol bump at the shock tenor
    price_shock: float, optional
        relative spot bump enabling delta
    pricer: Pricer, optional
        valuation facade; a default ``Pricer()`` when omitted
    params: RiskParams, optional
        full configuration, used instead of the shock arguments
    """

    def __init__(
        self,
        market: Market,
        curve_shock: float | None = None,
        vol_shock: float | None = None,
        price_shock: float | None = None,
        *,
        pricer: Pricer | None = None,
        params: RiskParams | None = None,
    ) -> None:
        if not isinstance(market, Market):
            raise ConfigurationError(f"market must be a Market, got {type(market).__name__}")
        if params is None:
            if curve_shock is None or vol_shock is None:
                raise ConfigurationError("curve_shock and vol_shock are required")
            params = RiskParams(curve_shock, vol_shock, price_shock)
        elif not isinstance(params, RiskParams):
            raise ConfigurationError(f"params must be RiskParams, got {type(params).__name__}")
        elif curve_shock is not None or vol_shock is not None or price_shock is not None:
            raise ConfigurationError("pass shock sizes either directly or through params, not both")

        self.market = market
        self.params = params
        self.pricer = pricer if pricer is not None else Pricer()
        self.shock_date = add_tenor(market.as_of, params.shock_tenor)
        self._result: dict[str, float] = {}

        self._curve_decorators = {
            name: CurveDecorator(market, MarketShock(name, params.curve_shock, self.shock_date))
            for name in market.curve_names
        }
        self._vol_decorators = {
            name: VolDecorator(market, MarketShock(name, params.vol_shock, self.shock_date))
            for name in market.vol_curve_names
        }
        self._price_decorators: dict[str, PriceDecorator] = {}
        if params.price_shock is not None:
            self._price_decorators = {
                symbol: PriceDecorator(market, MarketShock(symbol, params.price_shock))
                for symbol in market.stock_symbols
            }
        logger.debug(
            "RiskEngine built: %d rate, %d vol, %d price factors (shock date %s)",
            len(self._curve_decorators),
            len(self._vol_decorators),
            len(self._price_decorators),
            self.shock_date,
        )

    # ------------------------------------------------------------------
    # Factor tasks
    # ------------------------------------------------------------------

    def _dv01(self, decorator: CurveDecorator, instrument) -> float:
        size = decorator.shock.size
        if size == 0.0:
            return 0.0
        pv_up = self.pricer.price(decorator.market_up, instrument)
        pv_down = self.pricer.price(decorator.market_down, instrument)
        return (pv_up - pv_down) / (2.0 * size)

    def _vega(self, decorator: VolDecorator, instrument) -> float:
        size = decorator.shock.size
        if size == 0.0:
            return 0.0
        pv_bumped = self.pricer.price(decorator.market_bumped, instrument)
        pv_origin = self.pricer.price(decorator.market_origin, instrument)
        return (pv_bumped - pv_origin) / size

    def _delta(self, decorator: PriceDecorator, instrument) -> float:
        size = decorator.shock.size
        if size == 0.0:
            return 0.0
        spot = decorator.spot
        if spot == 0.0:
            raise NumericalError(f"delta undefined for zero spot on {decorator.factor}")
        pv_up = self.pricer.price(decorator.market_up, instrument)
        pv_down = self.pricer.price(decorator.market_down, instrument)
        return (pv_up - pv_down) / (2.0 * size * spot)

    def _tasks(self, risk_type: RiskType) -> list[tuple[str, Callable[[object], float]]]:
        if risk_type is RiskType.DV01:
            table, fn = self._curve_decorators, self._dv01
        elif risk_type is RiskType.VEGA:
            table, fn = self._vol_decorators, self._vega
        else:
            if self.params.price_shock is None:
                raise ConfigurationError("delta risk requires price_shock")
            table, fn = self._price_decorators, self._delta
        return [
            (factor, lambda inst, deco=table[factor]: fn(deco, inst)) for factor in sorted(table)
        ]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def factors(self, risk_type: RiskType | str) -> list[str]:
        """Factor ids (sorted) that ``compute_risk`` reports for ``risk_type``."""
        return [factor for factor, _ in self._tasks(_coerce_risk_type(risk_type))]

    @property
    def result(self) -> dict[str, float]:
        """Copy of the map produced by the last ``compute_risk`` call."""
        return dict(self._result)

    def compute_risk(
        self, risk_type: RiskType | str, instrument, concurrent: bool = False
    ) -> dict[str, float]:
        """Sensitivity of ``instrument`` to every factor of ``risk_type``.

        The result map is rebuilt on every call. Any failure while repricing
        (e.g. a missing market key) propagates and leaves the map empty.

        Parameters
        ==========
        risk_type: RiskType or str
            ``"dv01"``, ``"vega"`` or ``"delta"``
        instrument:
            any instrument the pricer accepts; shared read-only across tasks
        concurrent: bool
            reprice factors on a thread pool instead of sequentially

        Returns
        =======
        dict mapping factor id to sensitivity, in sorted factor order
        """
        risk_type = _coerce_risk_type(risk_type)
        if instrument is None:
            raise ConfigurationError("instrument must not be None")
        self._result.clear()
        tasks = self._tasks(risk_type)

        label = f"Risk {risk_type.value} ({'concurrent' if concurrent else 'sequential'})"
        with log_timing(logger, label, self.params.log_timings):
            if concurrent and tasks:
                values = self._run_concurrent(tasks, instrument)
            else:
                values = {factor: task(instrument) for factor, task in tasks}

        self._result.update(values)
        for factor, value in self._result.items():
            logger.debug("%s %s = %.10g", risk_type.value, factor, value)
        return dict(self._result)

    def _run_concurrent(self, tasks, instrument) -> dict[str, float]:
        workers = self.params.concurrent_workers or len(tasks)
        logger.debug("Submitting %d risk tasks to %d workers", len(tasks), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [(factor, pool.submit(task, instrument)) for factor, task in tasks]
            # join in factor order; the first failure propagates
            return {factor: future.result() for factor, future in futures}
