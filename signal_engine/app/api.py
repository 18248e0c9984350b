"""
FastAPI application exposing endpoints for indicator computation,
signal generation and backtesting.  The API is stateless: every request
carries its own candles and strategy configuration.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List

import pandas as pd
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from signal_engine.core import (
    Candle,
    StrategyConfig,
    to_frame,
    compute_sma,
    compute_ema,
    compute_rsi,
    compute_macd,
    to_points,
    generate_signals,
    calculate_trading_stats,
    compare_with_hold,
)
from signal_engine.core.settings import (
    DEFAULT_COMPARE_CAPITAL,
    DEFAULT_INITIAL_CAPITAL,
    get_logger,
)

logger = get_logger("signal_engine.api")
app = FastAPI(title="Indicator, Signal & Backtesting API")

_INDICATOR_RE = re.compile(r"^(sma|ema|rsi)(\d*)$")


# ----------------------------------------------------------------------
# Models
# ----------------------------------------------------------------------
class IndicatorRequest(BaseModel):
    candles: List[Candle]
    indicators: List[str] = Field(
        ..., description="Indicators: sma20, ema7, ema25, ema99, rsi14, macd"
    )


class SignalRequest(BaseModel):
    candles: List[Candle]
    config: StrategyConfig = Field(default_factory=StrategyConfig)


class BacktestRequest(SignalRequest):
    """
    Request payload for running a backtest: the candles, the strategy
    configuration and the starting capital.
    """
    initial_capital: float = Field(DEFAULT_INITIAL_CAPITAL, gt=0, description="Starting capital")


class CompareRequest(SignalRequest):
    initial_capital: float = Field(DEFAULT_COMPARE_CAPITAL, gt=0, description="Starting capital")


def _frame_or_404(candles: List[Candle]) -> pd.DataFrame:
    df = to_frame(candles)
    if df.empty:
        raise HTTPException(404, detail="No candles supplied")
    return df


def _compute_indicator(df: pd.DataFrame, name: str) -> List[Dict[str, Any]]:
    key = name.lower()
    if key == "macd":
        return to_points(compute_macd(df["close"]))
    match = _INDICATOR_RE.match(key)
    if not match or (not match.group(2) and match.group(1) != "rsi"):
        raise HTTPException(400, detail=f"Unknown indicator {name}")
    kind, window = match.group(1), int(match.group(2) or 14)
    if window < 1:
        raise HTTPException(400, detail=f"Unknown indicator {name}")
    if kind == "sma":
        return to_points(compute_sma(df["close"], window))
    if kind == "ema":
        return to_points(compute_ema(df["close"], window))
    return to_points(compute_rsi(df["close"], window))


def _run(func, *args):
    try:
        return func(*args)
    except HTTPException:
        raise
    except Exception:
        logger.exception("Unhandled error in %s", getattr(func, "__name__", func))
        raise HTTPException(status_code=500, detail="Internal server error")


# ----------------------------------------------------------------------
# Endpoints
# ----------------------------------------------------------------------
@app.post("/indicators/compute")
async def compute_indicators(req: IndicatorRequest):
    df = _frame_or_404(req.candles)
    if not req.indicators:
        raise HTTPException(400, detail="No indicators requested")
    return {ind.lower(): _run(_compute_indicator, df, ind) for ind in req.indicators}


@app.post("/signals/generate")
async def signals_generate(req: SignalRequest):
    df = _frame_or_404(req.candles)
    signals = _run(generate_signals, df, req.config)
    return {"signals": [s.to_dict() for s in signals]}


@app.post("/backtest/run")
async def run_backtest(req: BacktestRequest):
    """
    Run a signal-driven backtest: generate the validated signal stream
    for the configured strategy and simulate it with compounding capital.
    """
    df = _frame_or_404(req.candles)
    signals = _run(generate_signals, df, req.config)
    stats = _run(calculate_trading_stats, signals, req.initial_capital)
    logger.info(
        "backtest %s: %d signals, %d trades, pnl %.2f%%",
        req.config.strategy.type, len(signals), stats.total_trades, stats.profit_percentage,
    )
    return {
        "signals": [s.to_dict() for s in signals],
        "stats": stats.to_dict(),
    }


@app.post("/backtest/compare")
async def backtest_compare(req: CompareRequest):
    """Compare the strategy against holding from the first to the last candle."""
    df = _frame_or_404(req.candles)
    signals = _run(generate_signals, df, req.config)
    comparison = _run(compare_with_hold, df, signals, req.initial_capital)
    return comparison.to_dict()
