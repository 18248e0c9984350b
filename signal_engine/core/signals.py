"""
Turn a candle series and a strategy configuration into a clean signal
stream.

``generate_signals`` restricts the candles to the configured timeframe,
runs the selected detector(s), optionally keeps only signals fired on
volume surges and finally validates the stream so that it alternates
buy/sell starting with a buy.  The result is always a fresh list; the
generator keeps no state between calls.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Union

import pandas as pd

from .models import CandleLike, Signal, to_frame
from .settings import get_logger
from .strategies import TIMEFRAME_SECONDS, StrategyConfig, Timeframe

logger = get_logger("signal_engine.signals")


def filter_by_timeframe(
    df: pd.DataFrame, timeframe: Timeframe, now: Optional[int] = None
) -> pd.DataFrame:
    """
    Keep the candles younger than the timeframe window, measured back
    from ``now`` (seconds; defaults to the last candle's time).
    """
    if timeframe != "all" and timeframe not in TIMEFRAME_SECONDS:
        raise ValueError(
            f"timeframe must be one of 'all', {', '.join(map(repr, TIMEFRAME_SECONDS))}; got {timeframe!r}"
        )
    if timeframe == "all" or df.empty:
        return df
    if now is None:
        now = int(df.index[-1])
    return df[now - df.index < TIMEFRAME_SECONDS[timeframe]]


def apply_volume_filter(
    signals: List[Signal], df: pd.DataFrame, threshold: float
) -> List[Signal]:
    """Drop signals whose candle volume does not exceed ``threshold`` × mean volume."""
    if not signals:
        return signals
    avg_volume = df["volume"].mean()
    volume = df["volume"]
    return [
        s for s in signals
        if s.time in volume.index and volume.loc[s.time] > avg_volume * threshold
    ]


def validate_alternation(signals: Iterable[Signal]) -> List[Signal]:
    """
    Sort by time (stable, so simultaneous signals keep detector order)
    and keep a strict buy, sell, buy, ... sequence.  A leading sell and
    any signal repeating the previously kept type are dropped.
    """
    validated: List[Signal] = []
    for signal in sorted(signals, key=lambda s: s.time):
        expected = "buy" if not validated or validated[-1].type == "sell" else "sell"
        if signal.type == expected:
            validated.append(signal)
    return validated


def generate_signals(
    candles: Union[pd.DataFrame, Iterable[CandleLike]],
    config: Optional[StrategyConfig] = None,
    now: Optional[int] = None,
) -> List[Signal]:
    """Run the configured strategy over ``candles`` and return validated signals."""
    config = config or StrategyConfig()
    df = to_frame(candles)
    if len(df) < 2:
        return []

    df = filter_by_timeframe(df, config.timeframe, now)
    if len(df) < 2:
        logger.debug("timeframe %s left %d candles", config.timeframe, len(df))
        return []

    signals = config.strategy.detect(df)
    if config.volume_filter.enabled:
        signals = apply_volume_filter(signals, df, config.volume_filter.threshold)

    validated = validate_alternation(signals)
    logger.debug(
        "%s: %d raw signals, %d after validation",
        config.strategy.type, len(signals), len(validated),
    )
    return validated
