from signal_engine.core import (
    ema_cross_signals,
    macd_cross_signals,
    rsi_divergence_signals,
    to_frame,
)


def _flat_then(closes_tail, opens_tail, bars=115):
    closes = [100.0] * bars + closes_tail
    opens = [100.0] * bars + opens_tail
    return closes, opens


def test_ema_cross_flat_market_has_no_signals(flat_candles, candles):
    assert ema_cross_signals(to_frame(flat_candles), 7, 25) == []
    # long enough for the trend EMA, still nothing crosses
    long_flat = candles([100.0] * 150, opens=[100.0] * 150)
    assert ema_cross_signals(to_frame(long_flat), 7, 25) == []


def test_ema_cross_needs_trend_history(candles):
    closes, opens = _flat_then([98.0, 104.0], [100.0, 98.0], bars=90)
    assert ema_cross_signals(to_frame(candles(closes, opens=opens)), 7, 25) == []


def test_ema_cross_buy_on_bullish_breakout(candles):
    closes, opens = _flat_then([98.0, 104.0], [100.0, 98.0])
    df = to_frame(candles(closes, opens=opens))
    buys = [s for s in ema_cross_signals(df, 7, 25) if s.type == "buy"]
    assert len(buys) == 1
    assert buys[0].time == int(df.index[-1])
    assert buys[0].price == 104.0
    assert buys[0].reason == "EMA 7 crossed above EMA 25 with trend confirmation"


def test_ema_cross_sell_on_bearish_breakdown(candles):
    closes, opens = _flat_then([102.0, 94.0], [100.0, 102.0])
    df = to_frame(candles(closes, opens=opens))
    sells = [s for s in ema_cross_signals(df, 7, 25) if s.type == "sell"]
    assert len(sells) == 1
    assert sells[0].time == int(df.index[-1])
    assert sells[0].price == 94.0


def test_ema_cross_requires_bullish_candle(candles):
    # same breakout but the bar closes below its open
    closes, opens = _flat_then([98.0, 104.0], [100.0, 105.0])
    df = to_frame(candles(closes, opens=opens))
    assert [s for s in ema_cross_signals(df, 7, 25) if s.type == "buy"] == []


def _decline_then_bar(close, open_, low=None, high=None):
    rows = [
        {
            "time": i,
            "open": 141.0 - i,
            "high": 142.0 - i,
            "low": 139.0 - i,
            "close": 140.0 - i,
            "volume": 1000.0,
        }
        for i in range(40)
    ]
    rows.append({
        "time": 40,
        "open": open_,
        "high": high if high is not None else max(open_, close) + 1.0,
        "low": low if low is not None else min(open_, close) - 1.0,
        "close": close,
        "volume": 1000.0,
    })
    return to_frame(rows)


def test_rsi_bullish_divergence():
    # RSI pinned at 0 by the decline, then ticks up while the low undercuts
    df = _decline_then_bar(close=101.5, open_=101.0, low=95.0)
    signals = rsi_divergence_signals(df, 14)
    assert len(signals) == 1
    assert signals[0].type == "buy"
    assert signals[0].time == 40
    assert signals[0].reason == "RSI bullish divergence"


def test_rsi_no_divergence_without_lower_low():
    df = _decline_then_bar(close=101.5, open_=101.0, low=100.5)
    assert rsi_divergence_signals(df, 14) == []


def test_rsi_bearish_divergence():
    rows = [
        {"time": i, "open": 99.0 + i, "high": 101.0 + i, "low": 98.0 + i, "close": 100.0 + i, "volume": 1.0}
        for i in range(40)
    ]
    rows.append({"time": 40, "open": 139.0, "high": 150.0, "low": 138.0, "close": 138.5, "volume": 1.0})
    signals = rsi_divergence_signals(to_frame(rows), 14)
    assert [(s.type, s.time) for s in signals] == [("sell", 40)]


def test_rsi_divergence_needs_period_plus_20():
    df = _decline_then_bar(close=101.5, open_=101.0, low=95.0).iloc[-33:]
    assert len(df) == 33
    assert rsi_divergence_signals(df, 14) == []


def test_macd_cross_signals(macd_reversal_candles):
    df = to_frame(macd_reversal_candles)
    signals = macd_cross_signals(df)
    # the first bar of the decline pulls MACD under its signal line
    assert (signals[0].type, signals[0].time) == ("sell", int(df.index[1]))
    buys = [s for s in signals if s.type == "buy"]
    assert len(buys) == 1
    assert buys[0].time == int(df.index[-1])
    assert buys[0].strength > 0
    assert buys[0].reason == "MACD crossed above signal line with positive momentum"


def test_macd_min_strength_drops_weak_crosses(macd_reversal_candles):
    df = to_frame(macd_reversal_candles)
    assert macd_cross_signals(df, min_strength=1e6) == []


def test_macd_needs_26_candles(macd_reversal_candles):
    assert macd_cross_signals(to_frame(macd_reversal_candles[:25])) == []


def test_rsi_divergence_fires_before_sma20_is_defined():
    # RSI(14) exists from bar 14, SMA-20 only from bar 19
    rows = [
        {"time": i, "open": 141.0 - i, "high": 142.0 - i, "low": 139.0 - i, "close": 140.0 - i, "volume": 1.0}
        for i in range(16)
    ]
    rows.append({"time": 16, "open": 125.0, "high": 126.5, "low": 110.0, "close": 125.5, "volume": 1.0})
    rows.extend(
        {"time": i, "open": 125.5, "high": 126.5, "low": 124.5, "close": 125.5, "volume": 1.0}
        for i in range(17, 40)
    )
    signals = rsi_divergence_signals(to_frame(rows), 14)
    assert ("buy", 16) in [(s.type, s.time) for s in signals]
