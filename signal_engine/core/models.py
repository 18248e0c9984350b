"""
Value objects flowing through the engine.

Candles enter as :class:`Candle` models (or plain mappings) and are turned
into a time-indexed DataFrame by :func:`to_frame`.  Signals, trades and
the backtest summaries are plain dataclasses; ``to_dict`` renders them
with the camelCase keys the dashboard collaborators expect.
"""
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Mapping, Optional, Union

import pandas as pd
from pydantic import BaseModel

SignalType = Literal["buy", "sell"]

OHLCV_COLUMNS = ["open", "high", "low", "close", "volume"]


class Candle(BaseModel):
    """OHLCV candle; ``time`` is in seconds since the epoch."""
    time: int
    open: float
    high: float
    low: float
    close: float
    volume: float


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _camel_dict(obj: Any) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for f in dataclasses.fields(obj):
        value = getattr(obj, f.name)
        if isinstance(value, list):
            value = [v.to_dict() if hasattr(v, "to_dict") else v for v in value]
        out[_camel(f.name)] = value
    return out


@dataclass
class Signal:
    time: int
    type: SignalType
    price: float
    reason: str = ""
    strength: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return _camel_dict(self)


@dataclass
class Trade:
    entry_price: float
    exit_price: float
    entry_time: int
    exit_time: int
    quantity: float
    profit: float
    profit_percentage: float
    capital_after_trade: float
    entry_reason: str = ""
    exit_reason: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return _camel_dict(self)


@dataclass
class PerformanceStats:
    final_capital: float
    total_profit: float = 0.0
    profit_percentage: float = 0.0
    win_rate: float = 0.0
    total_trades: int = 0
    winning_trades: int = 0
    max_drawdown: float = 0.0
    hold_final_capital: float = 0.0
    hold_profit_percentage: float = 0.0
    trades: List[Trade] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return _camel_dict(self)


@dataclass
class HoldComparison:
    """Active strategy vs. holding the asset from the first to the last candle."""
    total_profit: float = 0.0
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    win_rate: float = 0.0
    average_gain: float = 0.0
    max_drawdown: float = 0.0
    hold_performance: float = 0.0
    hold_profit: float = 0.0
    outperforms_hold: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return _camel_dict(self)


CandleLike = Union[Candle, Mapping[str, Any]]


def to_frame(candles: Union[pd.DataFrame, Iterable[CandleLike]]) -> pd.DataFrame:
    """
    Build the engine's candle frame: float OHLCV columns indexed by the
    integer ``time`` of each bar, sorted ascending with duplicate
    timestamps removed (the last occurrence wins).  Rows with a missing
    price are dropped.
    """
    if isinstance(candles, pd.DataFrame):
        df = candles.copy()
        if "time" in df.columns:
            df = df.set_index("time")
    else:
        rows = [c.model_dump() if isinstance(c, Candle) else dict(c) for c in candles]
        if not rows:
            return pd.DataFrame(columns=OHLCV_COLUMNS, index=pd.Index([], name="time", dtype="int64"), dtype=float)
        df = pd.DataFrame(rows).set_index("time")
    df = df[OHLCV_COLUMNS].astype(float)
    df.index = df.index.astype("int64")
    df.index.name = "time"
    df = df[~df.index.duplicated(keep="last")].sort_index()
    return df.dropna(subset=["open", "high", "low", "close"])
