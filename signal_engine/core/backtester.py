"""
Signal-driven backtesting.

Long-only and fee-free: a position is opened on a buy signal and closed
on the next sell, investing the whole running capital each time so that
results compound from trade to trade.  Drawdown is the largest fall of
capital from its running peak, in percent.  Both entry points compare
the strategy against simply holding the asset over the same span.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Tuple, Union

import pandas as pd

from .models import CandleLike, HoldComparison, PerformanceStats, Signal, Trade, to_frame
from .settings import DEFAULT_COMPARE_CAPITAL, DEFAULT_INITIAL_CAPITAL, get_logger
from .signals import validate_alternation

logger = get_logger("signal_engine.backtester")


def _close_trade(buy: Signal, sell: Signal, capital: float) -> Trade:
    quantity = capital / buy.price
    profit = quantity * (sell.price - buy.price)
    return Trade(
        entry_price=buy.price,
        exit_price=sell.price,
        entry_time=buy.time,
        exit_time=sell.time,
        quantity=quantity,
        profit=profit,
        profit_percentage=(sell.price - buy.price) / buy.price * 100,
        capital_after_trade=capital + profit,
        entry_reason=buy.reason,
        exit_reason=sell.reason,
    )


def _max_drawdown(initial_capital: float, trades: List[Trade]) -> float:
    peak = initial_capital
    max_drawdown = 0.0
    for trade in trades:
        capital = trade.capital_after_trade
        if capital > peak:
            peak = capital
        elif peak > 0:
            max_drawdown = max(max_drawdown, (peak - capital) / peak * 100)
    return max_drawdown


def _hold_return(first_price: float, last_price: float) -> float:
    if not first_price:
        return 0.0
    return (last_price - first_price) / first_price * 100


def calculate_trading_stats(
    signals: List[Signal], initial_capital: float = DEFAULT_INITIAL_CAPITAL
) -> PerformanceStats:
    """
    Pair the validated stream two at a time (0/1, 2/3, ...) into trades.
    A pair that is not buy→sell is skipped and a trailing buy stays
    open.  Buy-and-hold runs from the first to the last signal price.
    """
    valid = validate_alternation(signals)
    capital = initial_capital
    trades: List[Trade] = []
    for i in range(0, len(valid) - 1, 2):
        buy, sell = valid[i], valid[i + 1]
        if buy.type != "buy" or sell.type != "sell" or buy.price <= 0:
            continue
        trade = _close_trade(buy, sell, capital)
        capital = trade.capital_after_trade
        trades.append(trade)

    if not trades:
        logger.debug("no completed trades in %d signals", len(signals))
        return PerformanceStats(final_capital=initial_capital, hold_final_capital=initial_capital)

    winning = sum(1 for t in trades if t.profit > 0)
    hold_pct = _hold_return(valid[0].price, valid[-1].price)
    return PerformanceStats(
        final_capital=capital,
        total_profit=capital - initial_capital,
        profit_percentage=(capital - initial_capital) / initial_capital * 100 if initial_capital else 0.0,
        win_rate=winning / len(trades) * 100,
        total_trades=len(trades),
        winning_trades=winning,
        max_drawdown=_max_drawdown(initial_capital, trades),
        hold_final_capital=initial_capital * (1 + hold_pct / 100),
        hold_profit_percentage=hold_pct,
        trades=trades,
    )


def _walk_positions(signals: List[Signal], capital: float) -> Tuple[List[Trade], float]:
    # FLAT -> LONG on buy, LONG -> FLAT on sell; anything else is ignored
    trades: List[Trade] = []
    entry: Optional[Signal] = None
    for signal in signals:
        if signal.type == "buy" and entry is None and signal.price > 0:
            entry = signal
        elif signal.type == "sell" and entry is not None:
            trade = _close_trade(entry, signal, capital)
            capital = trade.capital_after_trade
            trades.append(trade)
            entry = None
    return trades, capital


def compare_with_hold(
    candles: Union[pd.DataFrame, Iterable[CandleLike]],
    signals: List[Signal],
    initial_capital: float = DEFAULT_COMPARE_CAPITAL,
) -> HoldComparison:
    """
    Compare the strategy with holding the asset from the first to the
    last candle close.  ``outperforms_hold`` is true when the strategy's
    absolute profit beats the hold profit.
    """
    df = to_frame(candles)
    if df.empty or not signals:
        return HoldComparison()

    trades, capital = _walk_positions(signals, initial_capital)
    total_profit = capital - initial_capital
    hold_performance = _hold_return(float(df["close"].iloc[0]), float(df["close"].iloc[-1]))
    hold_profit = hold_performance / 100 * initial_capital
    winning = sum(1 for t in trades if t.profit > 0)
    return HoldComparison(
        total_profit=total_profit,
        total_trades=len(trades),
        winning_trades=winning,
        losing_trades=len(trades) - winning,
        win_rate=winning / len(trades) * 100 if trades else 0.0,
        average_gain=sum(t.profit_percentage for t in trades) / len(trades) if trades else 0.0,
        max_drawdown=_max_drawdown(initial_capital, trades),
        hold_performance=hold_performance,
        hold_profit=hold_profit,
        outperforms_hold=total_profit > hold_profit,
    )
