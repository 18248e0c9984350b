from typing import List, Optional

import pytest

DAY = 24 * 60 * 60
START = 1_700_000_000


def make_candles(
    closes: List[float],
    opens: Optional[List[float]] = None,
    volumes: Optional[List[float]] = None,
    start: int = START,
    step: int = DAY,
) -> List[dict]:
    """Candles with the given closes; by default each bar opens at the previous close."""
    if opens is None:
        opens = [closes[0]] + list(closes[:-1])
    if volumes is None:
        volumes = [1000.0] * len(closes)
    return [
        {
            "time": start + i * step,
            "open": float(o),
            "high": max(o, c) + 1.0,
            "low": min(o, c) - 1.0,
            "close": float(c),
            "volume": float(v),
        }
        for i, (o, c, v) in enumerate(zip(opens, closes, volumes))
    ]


@pytest.fixture
def flat_candles():
    # 30 identical bars
    return [
        {"time": START + i * DAY, "open": 100.0, "high": 101.0, "low": 99.0, "close": 100.0, "volume": 1000.0}
        for i in range(30)
    ]


@pytest.fixture
def uptrend_candles():
    # closes 100..199, each bar opening at the previous close
    return make_candles([100.0 + i for i in range(100)])


@pytest.fixture
def macd_reversal_candles():
    # steady decline of 0.5 per bar, then a +20 jump on the last bar
    closes = [120.0 - 0.5 * i for i in range(40)]
    closes.append(closes[-1] + 20.0)
    return make_candles(closes)


@pytest.fixture
def candles():
    return make_candles
