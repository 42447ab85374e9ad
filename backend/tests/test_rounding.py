"""Tests for half-up rounding helpers (no DB dependency)."""

from coursehub.rounding import percent, round_half_up


class TestRoundHalfUp:
    """Half values round away from zero, unlike round()."""

    def test_half_rounds_up(self):
        assert round_half_up(12.5) == 13
        assert round_half_up(0.5) == 1

    def test_two_decimals(self):
        assert round_half_up(4.333333, 2) == 4.33
        assert round_half_up(4.125, 2) == 4.13


class TestPercent:
    """Integer percentages clamped to [0, 100]."""

    def test_basic(self):
        assert percent(1, 2) == 50
        assert percent(2, 3) == 67
        assert percent(1, 8) == 13

    def test_zero_total(self):
        assert percent(0, 0) == 0

    def test_clamped(self):
        assert percent(5, 4) == 100
