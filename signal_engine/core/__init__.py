"""Core of the signal engine.

This package computes technical indicators from a candle series, turns
them into buy/sell signals according to a strategy configuration and
backtests the resulting signal stream against buy-and-hold.  All
functions are side‑effect free and deterministic when given the same
inputs.
"""

from .models import (
    Candle,
    Signal,
    Trade,
    PerformanceStats,
    HoldComparison,
    to_frame,
)
from .indicators import (
    compute_sma,
    compute_ema,
    compute_rsi,
    compute_macd,
    to_points,
)
from .rules import (
    ema_cross_signals,
    rsi_divergence_signals,
    macd_cross_signals,
)
from .strategies import (
    EmaCross,
    RsiDivergence,
    MacdCross,
    Multi,
    VolumeFilter,
    StrategyConfig,
)
from .signals import (
    filter_by_timeframe,
    apply_volume_filter,
    validate_alternation,
    generate_signals,
)
from .backtester import calculate_trading_stats, compare_with_hold

__all__ = [
    "Candle",
    "Signal",
    "Trade",
    "PerformanceStats",
    "HoldComparison",
    "to_frame",
    "compute_sma",
    "compute_ema",
    "compute_rsi",
    "compute_macd",
    "to_points",
    "ema_cross_signals",
    "rsi_divergence_signals",
    "macd_cross_signals",
    "EmaCross",
    "RsiDivergence",
    "MacdCross",
    "Multi",
    "VolumeFilter",
    "StrategyConfig",
    "filter_by_timeframe",
    "apply_volume_filter",
    "validate_alternation",
    "generate_signals",
    "calculate_trading_stats",
    "compare_with_hold",
]
