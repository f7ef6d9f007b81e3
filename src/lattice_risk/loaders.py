"""Flat-file loaders for market data and trades.

Market files are ``key: value`` text files:

- rate curve: first line is the curve name, then ``3M: 5.56%`` lines
- vol curve: ``1Y: 20%`` lines (the curve name is passed in)
- stock / bond prices: ``AAPL: 180.5`` lines

Trade files are ``;``-separated with a header row and the columns
``id;type;trade_date;start_date;end_date;notional;instrument;rate;strike;freq;option_type``.

Malformed rows are logged and skipped; a missing file raises
:class:`~lattice_risk.exceptions.DataNotFoundError`.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import datetime as dt
import logging

import pandas as pd

from .enums import OptionType, PositionSide
from .exceptions import DataNotFoundError, LatticeRiskError, ValidationError
from .instruments import (
    DEFAULT_RATE_CURVE,
    AmericanOption,
    Bond,
    EuropeanOption,
    Instrument,
    Swap,
)
from .market_environment import Market
from .rates import RateCurve
from .utils import add_tenor, as_date, parse_percentage
from .volatility import VolCurve

logger = logging.getLogger(__name__)

TRADE_COLUMNS = [
    "id",
    "type",
    "trade_date",
    "start_date",
    "end_date",
    "notional",
    "instrument",
    "rate",
    "strike",
    "freq",
    "option_type",
]


def _require_file(path: str | Path) -> Path:
    path = Path(path)
    if not path.is_file():
        logger.error("Market data file not found: %s", path)
        raise DataNotFoundError(f"File not found: {path}", key=str(path))
    return path


def _read_key_values(path: Path, skiprows: int = 0) -> pd.DataFrame:
    """Read ``key: value`` lines into a two-column frame of stripped strings."""

    def _bad_line(fields: list[str]) -> None:
        logger.warning("Skipping malformed line in %s: %s", path, ":".join(fields))
        return None

    try:
        frame = pd.read_csv(
            path,
            sep=":",
            header=None,
            names=["key", "value"],
            dtype=str,
            keep_default_na=False,
            skiprows=skiprows,
            skip_blank_lines=True,
            engine="python",
            on_bad_lines=_bad_line,
        )
    except pd.errors.EmptyDataError:
        return pd.DataFrame(columns=["key", "value"], dtype=str)

    frame["key"] = frame["key"].str.strip()
    frame["value"] = frame["value"].str.strip()
    invalid = frame["value"].isna() | (frame["value"] == "") | frame["key"].isna()
    for key in frame.loc[invalid, "key"]:
        logger.warning("Skipping line without value in %s: %r", path, key)
    return frame.loc[~invalid].reset_index(drop=True)


def _load_tenor_points(curve, frame: pd.DataFrame, as_of: dt.date, path: Path):
    for tenor, text in zip(frame["key"], frame["value"]):
        try:
            curve.add_point(add_tenor(as_of, tenor), parse_percentage(text))
        except LatticeRiskError as exc:
            logger.error(
                "Invalid %s row in %s (%s: %s): %s", curve.value_label, path, tenor, text, exc
            )
    return curve


def load_rate_curve(path: str | Path, as_of: dt.date) -> RateCurve:
    """Load a rate curve; percentages are converted to decimals."""
    path = _require_file(path)
    with path.open() as fh:
        name = fh.readline().strip()
    if not name:
        raise ValidationError(f"Rate curve file {path} has no curve name on its first line")

    frame = _read_key_values(path, skiprows=1)
    curve = _load_tenor_points(RateCurve(name, reference_date=as_of), frame, as_date(as_of), path)
    logger.debug("Loaded rate curve %s with %d points from %s", name, len(curve), path)
    return curve


def load_vol_curve(path: str | Path, as_of: dt.date, name: str = "LOGVOL") -> VolCurve:
    """Load a volatility curve; percentages are converted to decimals."""
    path = _require_file(path)
    frame = _read_key_values(path)
    curve = _load_tenor_points(VolCurve(name, reference_date=as_of), frame, as_date(as_of), path)
    logger.debug("Loaded vol curve %s with %d points from %s", name, len(curve), path)
    return curve


def load_prices(path: str | Path) -> dict[str, float]:
    """Load ``symbol: price`` lines into an upper-cased symbol -> price map."""
    path = _require_file(path)
    frame = _read_key_values(path)
    prices = pd.to_numeric(frame["value"], errors="coerce")
    bad = prices.isna()
    for key, text in zip(frame.loc[bad, "key"], frame.loc[bad, "value"]):
        logger.error("Invalid price for %s in %s: %r", key, path, text)
    symbols = frame.loc[~bad, "key"].str.upper()
    return dict(zip(symbols, prices[~bad].astype(float)))


def load_market(
    as_of: dt.date,
    curve_paths: Iterable[str | Path] = (),
    vol_paths: Iterable[str | Path] = (),
    stock_path: str | Path | None = None,
    bond_path: str | Path | None = None,
    name: str = "",
) -> Market:
    """Assemble a :class:`Market` from flat files.

    Vol curve files are named after their file stem (``logvol.txt`` ->
    ``LOGVOL``).
    """
    market = Market(as_of, name)
    for path in curve_paths:
        curve = load_rate_curve(path, market.as_of)
        market.add_curve(curve.name, curve)
    for path in vol_paths:
        vol = load_vol_curve(path, market.as_of, name=Path(path).stem.upper())
        market.add_vol_curve(vol.name, vol)
    if stock_path is not None:
        for symbol, price in load_prices(stock_path).items():
            market.add_stock_price(symbol, price)
    if bond_path is not None:
        for bond, price in load_prices(bond_path).items():
            market.add_bond_price(bond, price)
    logger.info("Loaded market %r as of %s", market.name, market.as_of)
    return market


# ── Trades ──────────────────────────────────────────────────────────


def _trade_from_row(row: pd.Series) -> Instrument:
    kind = row["type"].strip().lower()
    trade_date = pd.Timestamp(row["trade_date"]).date()
    start_date = pd.Timestamp(row["start_date"]).date()
    end_date = pd.Timestamp(row["end_date"]).date()
    notional = float(row["notional"])
    side = PositionSide.LONG if notional >= 0 else PositionSide.SHORT
    underlying = (row["instrument"] or "").strip()

    if kind == "swap":
        return Swap(
            underlying=underlying or DEFAULT_RATE_CURVE,
            trade_date=trade_date,
            start_date=start_date,
            expiry=end_date,
            notional=abs(notional),
            side=side,
            fixed_rate=float(row["rate"]),
            frequency=float(row["freq"]),
        )
    if kind == "bond":
        return Bond(
            underlying=underlying,
            trade_date=trade_date,
            start_date=start_date,
            expiry=end_date,
            notional=abs(notional),
            side=side,
            coupon_rate=float(row["rate"]),
            frequency=float(row["freq"]),
        )
    if kind in ("european", "american"):
        option_type = OptionType(row["option_type"].strip().lower())
        cls = EuropeanOption if kind == "european" else AmericanOption
        return cls(
            underlying=underlying,
            trade_date=trade_date,
            expiry=end_date,
            notional=abs(notional),
            side=side,
            option_type=option_type,
            strike=float(row["strike"]),
        )
    raise ValidationError(f"unknown trade type {row['type']!r}")


def load_trades(path: str | Path) -> list[Instrument]:
    """Build instruments from a ``;``-separated trade file.

    A negative notional books a short position of the same magnitude.
    """
    path = _require_file(path)
    frame = pd.read_csv(path, sep=";", dtype=str, keep_default_na=False)
    missing = [c for c in TRADE_COLUMNS if c not in frame.columns]
    if missing:
        raise ValidationError(f"Trade file {path} is missing columns {missing}")

    trades: list[Instrument] = []
    for idx, row in frame.iterrows():
        try:
            trades.append(_trade_from_row(row))
        except (LatticeRiskError, ValueError, TypeError) as exc:
            logger.error("Trade row %s skipped (%s): %s", row.get("id", idx), path, exc)
    logger.debug("Loaded %d of %d trades from %s", len(trades), len(frame), path)
    return trades
