"""
Strategy configuration.

A :class:`StrategyConfig` selects exactly one strategy variant through
its ``type`` tag and carries the timeframe window and volume filter
applied around it.  Every variant implements ``detect(df)`` so callers
never have to inspect which optional parameters are present.
"""
from __future__ import annotations

from typing import Annotated, List, Literal, Union

import pandas as pd
from pydantic import BaseModel, Field, field_validator

from .models import Signal
from .rules import ema_cross_signals, macd_cross_signals, rsi_divergence_signals
from .settings import DEFAULT_VOLUME_THRESHOLD

EmaPeriod = Literal[7, 25, 99]
RsiPeriod = Literal[14, 21]
Timeframe = Literal["1m", "3m", "6m", "all"]

TIMEFRAME_SECONDS = {
    "1m": 30 * 24 * 60 * 60,
    "3m": 90 * 24 * 60 * 60,
    "6m": 180 * 24 * 60 * 60,
}


class EmaCross(BaseModel):
    type: Literal["ema_cross"] = "ema_cross"
    fast_period: EmaPeriod = 7
    slow_period: EmaPeriod = 25

    def detect(self, df: pd.DataFrame) -> List[Signal]:
        return ema_cross_signals(df, self.fast_period, self.slow_period)


class RsiDivergence(BaseModel):
    type: Literal["rsi_oversold"] = "rsi_oversold"
    period: RsiPeriod = 14
    overbought: float = Field(70.0, ge=0, le=100)
    oversold: float = Field(30.0, ge=0, le=100)

    def detect(self, df: pd.DataFrame) -> List[Signal]:
        return rsi_divergence_signals(df, self.period, self.overbought, self.oversold)


class MacdCross(BaseModel):
    type: Literal["macd_cross"] = "macd_cross"
    min_strength: float = Field(0.0, ge=0, description="Minimum |macd - signal| on the crossing bar")

    def detect(self, df: pd.DataFrame) -> List[Signal]:
        return macd_cross_signals(df, self.min_strength)


Detector = Annotated[Union[EmaCross, RsiDivergence, MacdCross], Field(discriminator="type")]

# union members always run in this order; equal timestamps keep it
_DETECTOR_ORDER = {"ema_cross": 0, "rsi_oversold": 1, "macd_cross": 2}


class Multi(BaseModel):
    type: Literal["multi"] = "multi"
    strategies: List[Detector] = Field(
        default_factory=lambda: [EmaCross(), RsiDivergence(), MacdCross()]
    )

    @field_validator("strategies")
    @classmethod
    def _order_members(cls, v):
        return sorted(v, key=lambda s: _DETECTOR_ORDER[s.type])

    def detect(self, df: pd.DataFrame) -> List[Signal]:
        signals: List[Signal] = []
        for strategy in self.strategies:
            signals.extend(strategy.detect(df))
        return signals


class VolumeFilter(BaseModel):
    enabled: bool = False
    threshold: float = Field(DEFAULT_VOLUME_THRESHOLD, gt=0)


class StrategyConfig(BaseModel):
    strategy: Annotated[
        Union[EmaCross, RsiDivergence, MacdCross, Multi], Field(discriminator="type")
    ] = Field(default_factory=EmaCross)
    timeframe: Timeframe = "all"
    volume_filter: VolumeFilter = Field(default_factory=VolumeFilter)
