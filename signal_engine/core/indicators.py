"""Implement the engine's technical indicators using pure pandas.

All functions take the close-price column of a candle frame (indexed by
candle time) and return a Series/DataFrame indexed by the times for
which the indicator is defined.  Inputs that are too short produce an
empty result rather than a partially warmed-up one.
"""

from __future__ import annotations

from typing import Any, Dict, List, Union

import pandas as pd

MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9


def _empty(columns: List[str] | None = None) -> Union[pd.Series, pd.DataFrame]:
    if columns is None:
        return pd.Series(dtype=float)
    return pd.DataFrame(columns=columns, dtype=float)


def compute_sma(close: pd.Series, window: int) -> pd.Series:
    """
    Compute the simple moving average (SMA) over the given window.  The
    first value sits on the ``window``-th candle; the warm-up is dropped.
    """
    if len(close) < window:
        return _empty()
    return close.rolling(window=window, min_periods=window).mean().dropna()


def compute_ema(close: pd.Series, window: int) -> pd.Series:
    """
    Compute the exponential moving average (EMA) seeded with the first
    close, ``k = 2 / (window + 1)``.  ``adjust=False`` gives exactly the
    recurrence ``ema[i] = close[i] * k + ema[i-1] * (1 - k)`` and there is
    no warm-up gap: one value per candle.
    """
    return close.ewm(span=window, adjust=False).mean()


def _wilder_average(values: pd.Series, window: int) -> pd.Series:
    # seed with the simple mean of the first `window` values, then
    # avg = (avg * (window - 1) + new) / window
    seed = pd.Series([values.iloc[:window].mean()], index=values.index[window - 1:window])
    seeded = pd.concat([seed, values.iloc[window:]])
    return seeded.ewm(alpha=1.0 / window, adjust=False).mean()


def compute_rsi(close: pd.Series, window: int = 14) -> pd.Series:
    """
    Compute the Relative Strength Index (RSI) using Wilder’s method.
    RSI oscillates between 0 and 100. Oversold <30, overbought >70.
    A bar with zero average loss reports 100.  The first value belongs to
    candle index ``window``; fewer than ``window + 1`` closes gives an
    empty series.
    """
    if len(close) < window + 1:
        return _empty()
    delta = close.diff().iloc[1:]
    gain = delta.clip(lower=0.0)
    loss = (-delta).clip(lower=0.0)
    avg_gain = _wilder_average(gain, window)
    avg_loss = _wilder_average(loss, window)
    rs = avg_gain / avg_loss
    rsi = 100 - (100 / (1 + rs))
    return rsi.where(avg_loss != 0, 100.0)


def compute_macd(close: pd.Series) -> pd.DataFrame:
    """
    Compute the Moving Average Convergence Divergence (MACD) with the
    fixed 12/26/9 periods.  The signal line is an EMA of the MACD line
    seeded with its first value.  Returns a DataFrame with columns
    macd, signal and histogram, one row per candle; fewer than 26 closes
    gives an empty frame.
    """
    if len(close) < MACD_SLOW:
        return _empty(["macd", "signal", "histogram"])
    macd_line = compute_ema(close, MACD_FAST) - compute_ema(close, MACD_SLOW)
    signal_line = compute_ema(macd_line, MACD_SIGNAL)
    return pd.DataFrame(
        {"macd": macd_line, "signal": signal_line, "histogram": macd_line - signal_line}
    )


def to_points(indicator: Union[pd.Series, pd.DataFrame]) -> List[Dict[str, Any]]:
    """Render an indicator as ``[{time, value}]`` (or one key per MACD column)."""
    if isinstance(indicator, pd.DataFrame):
        return [
            {"time": int(ts), **{col: float(row[col]) for col in indicator.columns}}
            for ts, row in indicator.iterrows()
        ]
    if isinstance(indicator, pd.Series):
        return [{"time": int(ts), "value": float(v)} for ts, v in indicator.items()]
    raise TypeError(f"cannot export {type(indicator).__name__} as indicator points")
