"""Tests for EMA, RSI, MACD difference and ATR."""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from confluence.engine.indicators import atr, ema, macd_diff, rsi, true_range
from tests.factories import closes, make_candle

# --- EMA ---


class TestEMA:
    """EMA seeded with the first close, k = 2 / (period + 1)."""

    def test_returns_zero_when_shorter_than_period(self) -> None:
        assert ema(closes([1.0, 2.0, 3.0]), 4) == 0.0

    def test_empty_sequence(self) -> None:
        assert ema([], 5) == 0.0

    @given(
        length=st.integers(min_value=1, max_value=60),
        data=st.data(),
    )
    def test_constant_series_is_constant(self, length: int, data: st.DataObject) -> None:
        period = data.draw(st.integers(min_value=1, max_value=length))
        assert ema(closes([100.0] * length), period) == pytest.approx(100.0)

    def test_known_values(self) -> None:
        # period 3 -> k = 0.5; seed 10
        # 10 -> (20-10)*.5+10 = 15 -> (30-15)*.5+15 = 22.5 -> (40-22.5)*.5+22.5 = 31.25
        assert ema(closes([10.0, 20.0, 30.0, 40.0]), 3) == pytest.approx(31.25)

    def test_seed_is_first_close_not_sma(self) -> None:
        """With exactly ``period`` candles the seed still counts as the first close."""
        # period 2 -> k = 2/3; seed 1 -> (5-1)*2/3+1 = 3.6667
        assert ema(closes([1.0, 5.0]), 2) == pytest.approx(1 + 4 * 2 / 3)

    def test_period_one_is_last_close(self) -> None:
        assert ema(closes([3.0, 7.0, 11.0]), 1) == pytest.approx(11.0)


# --- RSI ---


class TestRSI:
    """Simple-average RSI over the last ``period`` transitions."""

    def test_neutral_when_too_short(self) -> None:
        assert rsi(closes([float(i) for i in range(14)]), 14) == 50.0

    def test_exactly_period_plus_one_is_enough(self) -> None:
        assert rsi(closes([float(i) for i in range(15)]), 14) == 100.0

    def test_strictly_rising_is_100(self) -> None:
        assert rsi(closes([100.0 + i for i in range(40)]), 14) == 100.0

    def test_flat_series_is_100(self) -> None:
        """No losses (and no gains) hits the avg_loss == 0 branch."""
        assert rsi(closes([100.0] * 20), 14) == 100.0

    def test_strictly_falling_is_0(self) -> None:
        assert rsi(closes([100.0 - i for i in range(20)]), 14) == pytest.approx(0.0)

    def test_known_mixed_series(self) -> None:
        # Deltas over last 4: +2, -1, +3, -2 -> gains 5, losses 3
        values = [50.0, 10.0, 12.0, 11.0, 14.0, 12.0]
        expected = 100 - 100 / (1 + (5 / 4) / (3 / 4))
        assert rsi(closes(values), 4) == pytest.approx(expected)

    def test_only_last_period_transitions_count(self) -> None:
        """A huge early drop outside the window does not matter."""
        values = [1000.0, 10.0] + [10.0 + i for i in range(1, 16)]
        assert rsi(closes(values), 14) == 100.0

    def test_sixty_rsi(self) -> None:
        # 14 transitions: 9 x +2 and 4 x -3 and 1 x 0 -> gains 18, losses 12
        deltas = [2.0] * 9 + [-3.0] * 4 + [0.0]
        values = [100.0]
        for d in deltas:
            values.append(values[-1] + d)
        assert rsi(closes(values), 14) == pytest.approx(60.0)


# --- MACD difference ---


class TestMACDDiff:
    """EMA12 - EMA26, no signal line."""

    def test_zero_when_too_short_for_both(self) -> None:
        assert macd_diff(closes([1.0] * 11)) == 0.0

    def test_equals_ema12_when_only_ema12_warm(self) -> None:
        seq = closes([float(i) for i in range(20)])
        assert macd_diff(seq) == pytest.approx(ema(seq, 12))

    def test_positive_in_uptrend(self) -> None:
        assert macd_diff(closes([100.0 + i for i in range(60)])) > 0

    def test_negative_in_downtrend(self) -> None:
        assert macd_diff(closes([200.0 - i for i in range(60)])) < 0

    def test_matches_definition(self) -> None:
        seq = closes([100.0 + (i % 7) - (i % 3) for i in range(50)])
        assert macd_diff(seq) == pytest.approx(ema(seq, 12) - ema(seq, 26))


# --- ATR ---


class TestATR:
    """Simple mean of the last ``period`` true ranges."""

    def test_zero_when_too_short(self) -> None:
        assert atr(closes([1.0] * 14), 14) == 0.0

    def test_true_range_uses_gap_from_previous_close(self) -> None:
        candle = make_candle(open=110.0, high=112.0, low=109.0, close=111.0)
        assert true_range(candle, prev_close=100.0) == 12.0
        assert true_range(candle, prev_close=120.0) == 11.0
        assert true_range(candle, prev_close=110.0) == 3.0

    def test_constant_range(self) -> None:
        seq = [
            make_candle(timestamp=i, open=100.0, high=101.0, low=99.0, close=100.0)
            for i in range(20)
        ]
        assert atr(seq, 14) == pytest.approx(2.0)

    def test_only_last_period_bars_count(self) -> None:
        wide = make_candle(timestamp=0, open=100.0, high=150.0, low=50.0, close=100.0)
        narrow = [
            make_candle(timestamp=i, open=100.0, high=100.5, low=99.5, close=100.0)
            for i in range(1, 4)
        ]
        assert atr([wide, *narrow], 2) == pytest.approx(1.0)
        assert atr([wide, *narrow], 3) == pytest.approx(1.0)
