"""
Signal detectors built on the indicator series.

Each detector takes a candle frame (see :func:`core.models.to_frame`)
and returns the list of :class:`Signal` it fires, in time order.  The
crossing and confirmation conditions are evaluated as boolean Series
over the whole frame; a frame shorter than the detector's history
requirement yields no signals.
"""
from __future__ import annotations

from typing import List, Optional

import pandas as pd

from .indicators import MACD_SLOW, compute_ema, compute_macd, compute_rsi, compute_sma
from .models import Signal
from .settings import get_logger

logger = get_logger("signal_engine.rules")

TREND_EMA_WINDOW = 99
RSI_TREND_SMA_WINDOW = 20


def _cross_up(series1: pd.Series, series2: pd.Series) -> pd.Series:
    """Return True when series1 moves from at-or-below series2 to above it."""
    return (series1.shift(1) <= series2.shift(1)) & (series1 > series2)


def _cross_down(series1: pd.Series, series2: pd.Series) -> pd.Series:
    """Return True when series1 moves from at-or-above series2 to below it."""
    return (series1.shift(1) >= series2.shift(1)) & (series1 < series2)


def _emit(
    df: pd.DataFrame,
    buy: pd.Series,
    sell: pd.Series,
    buy_reason: str,
    sell_reason: str,
    strength: Optional[pd.Series] = None,
) -> List[Signal]:
    signals: List[Signal] = []
    fired = buy | sell
    for ts in df.index[fired.reindex(df.index, fill_value=False).to_numpy(dtype=bool)]:
        power = float(strength.loc[ts]) if strength is not None else None
        price = float(df.at[ts, "close"])
        if buy.loc[ts]:
            signals.append(Signal(int(ts), "buy", price, buy_reason, power))
        if sell.loc[ts]:
            signals.append(Signal(int(ts), "sell", price, sell_reason, power))
    return signals


def ema_cross_signals(df: pd.DataFrame, fast: int, slow: int) -> List[Signal]:
    """
    Buy when the fast EMA crosses above the slow EMA while the close is
    above the 99-period trend EMA on a bullish candle; sell on the
    mirror image (cross below, close under the trend EMA, bearish candle).
    """
    if len(df) < max(fast, slow, TREND_EMA_WINDOW):
        logger.debug("ema_cross: %d candles, need %d", len(df), max(fast, slow, TREND_EMA_WINDOW))
        return []
    close = df["close"]
    fast_ema = compute_ema(close, fast)
    slow_ema = compute_ema(close, slow)
    trend_up = close > compute_ema(close, TREND_EMA_WINDOW)
    buy = _cross_up(fast_ema, slow_ema) & trend_up & (close > df["open"])
    sell = _cross_down(fast_ema, slow_ema) & ~trend_up & (close < df["open"])
    return _emit(
        df,
        buy,
        sell,
        f"EMA {fast} crossed above EMA {slow} with trend confirmation",
        f"EMA {fast} crossed below EMA {slow} with trend confirmation",
    )


def rsi_divergence_signals(
    df: pd.DataFrame, window: int = 14, overbought: float = 70.0, oversold: float = 30.0
) -> List[Signal]:
    """
    Bullish divergence (buy): RSI stays oversold on two consecutive bars
    and rises while the low makes a lower low.  Bearish divergence (sell):
    RSI stays overbought and falls while the high makes a higher high.
    """
    if len(df) < window + RSI_TREND_SMA_WINDOW:
        logger.debug("rsi_divergence: %d candles, need %d", len(df), window + RSI_TREND_SMA_WINDOW)
        return []
    close = df["close"]
    rsi = compute_rsi(close, window).reindex(df.index)
    prev_rsi = rsi.shift(1)
    sma = compute_sma(close, RSI_TREND_SMA_WINDOW).reindex(df.index)
    # TODO: trend is not part of the entry rule; decide whether buys should require close > SMA20
    trend = close > sma  # noqa: F841
    aligned = rsi.notna() & prev_rsi.notna()
    buy = (
        aligned
        & (rsi < oversold)
        & (prev_rsi < oversold)
        & (df["low"] < df["low"].shift(1))
        & (rsi > prev_rsi)
    )
    sell = (
        aligned
        & (rsi > overbought)
        & (prev_rsi > overbought)
        & (df["high"] > df["high"].shift(1))
        & (rsi < prev_rsi)
    )
    return _emit(df, buy, sell, "RSI bullish divergence", "RSI bearish divergence")


def macd_cross_signals(df: pd.DataFrame, min_strength: float = 0.0) -> List[Signal]:
    """
    Buy when MACD crosses above its signal line with a positive
    histogram, sell when it crosses below with a negative one.  The
    signal's strength is ``|macd - signal|`` on the crossing bar; crosses
    not stronger than ``min_strength`` are ignored.
    """
    if len(df) < MACD_SLOW:
        logger.debug("macd_cross: %d candles, need %d", len(df), MACD_SLOW)
        return []
    macd = compute_macd(df["close"])
    strength = (macd["macd"] - macd["signal"]).abs()
    strong = strength > min_strength
    buy = _cross_up(macd["macd"], macd["signal"]) & (macd["histogram"] > 0) & strong
    sell = _cross_down(macd["macd"], macd["signal"]) & (macd["histogram"] < 0) & strong
    return _emit(
        df,
        buy,
        sell,
        "MACD crossed above signal line with positive momentum",
        "MACD crossed below signal line with negative momentum",
        strength=strength,
    )
