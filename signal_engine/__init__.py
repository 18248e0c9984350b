"""Indicator, signal and backtesting engine for a single instrument's candles."""

__version__ = "0.1.0"
