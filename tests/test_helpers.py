"""Tests for helper utility functions."""

import math

import pytest

from utils.helpers import (
    Percentiles,
    format_currency,
    round_half_up,
    safe_num,
    weighted_sum,
)


class TestFormatCurrency:
    """Tests for currency formatting."""

    def test_man_yen(self):
        """Amounts below 1 oku are shown in man-yen."""
        assert format_currency(1000) == "1,000万円"

    def test_rounding(self):
        """Fractions are rounded."""
        assert format_currency(1234.4) == "1,234万円"

    def test_oku(self):
        """Large amounts switch to oku with two decimals."""
        assert format_currency(25_000) == "2.50億円"

    def test_zero(self):
        """Zero formats correctly."""
        assert format_currency(0) == "0万円"

    def test_negative(self):
        """Negative numbers keep their sign."""
        result = format_currency(-1000)
        assert "-" in result
        assert "1,000" in result


class TestRoundHalfUp:
    """Tests for half-up rounding."""

    def test_half_rounds_up(self):
        """0.5 goes up, unlike banker's rounding."""
        assert round_half_up(2.5) == 3
        assert round_half_up(0.5) == 1

    def test_negative_half_rounds_toward_positive(self):
        """-2.5 rounds to -2."""
        assert round_half_up(-2.5) == -2

    def test_returns_int(self):
        """Result is an int."""
        assert isinstance(round_half_up(1.2), int)


class TestSafeNum:
    """Tests for non-finite sanitizing."""

    def test_finite_passthrough(self):
        """Finite values are returned unchanged."""
        assert safe_num(3.5) == 3.5

    def test_nan_and_inf(self):
        """NaN and infinities fall back."""
        assert safe_num(math.nan) == 0.0
        assert safe_num(math.inf) == 0.0
        assert safe_num(-math.inf, fallback=1.0) == 1.0


class TestWeightedSum:
    """Tests for weighted sum calculation."""

    def test_equal_weights(self):
        """Equal weights gives simple sum."""
        assert weighted_sum([10, 20, 30], [1, 1, 1]) == 60

    def test_weighted_calculation(self):
        """Weighted sum is correct."""
        assert weighted_sum([100, 200], [0.3, 0.7]) == pytest.approx(170)


class TestPercentiles:
    """Tests for Percentiles dataclass."""

    def test_frozen(self):
        """Percentiles is immutable (frozen)."""
        p = Percentiles(p10=[1.0], p25=[2.0], p50=[3.0], p75=[4.0], p90=[5.0])
        with pytest.raises(AttributeError):
            p.p10 = [10.0]
