"""Unit tests for fixed-point helpers."""

import pytest
from decimal import Decimal

from src.core.fixed_point import (
    USD_SCALE,
    collateral_for_size,
    parse_fixed,
    saturating_sub,
    to_decimal,
    usd_value,
)


class TestSaturatingSub:
    """Tests for saturating_sub."""

    def test_regular_subtraction(self):
        """Should subtract when amount is smaller."""
        assert saturating_sub(50, 10) == 40

    def test_clamps_at_zero(self):
        """Should floor at zero when amount exceeds value."""
        assert saturating_sub(10, 50) == 0

    def test_exact(self):
        """Should reach zero exactly."""
        assert saturating_sub(10, 10) == 0


class TestUsdValue:
    """Tests for usd_value."""

    def test_whole_units(self):
        """Should value 100 ETH at 1800 USD as 180000 USD."""
        assert usd_value(100 * 10**18, 1800 * USD_SCALE, 18) == 180000 * USD_SCALE

    def test_sub_unit_quantity(self):
        """Should keep precision for one wei."""
        assert usd_value(1, 1800 * USD_SCALE, 18) == 1800 * 10**12

    def test_floors(self):
        """Should floor-divide the product."""
        assert usd_value(1, 3, 1) == 0
        assert usd_value(7, 3, 1) == 2

    def test_zero_quantity(self):
        """Should be zero for zero quantity."""
        assert usd_value(0, 1800 * USD_SCALE, 18) == 0

    def test_rejects_negative(self):
        """Should reject negative inputs."""
        with pytest.raises(ValueError):
            usd_value(-1, 1, 18)
        with pytest.raises(ValueError):
            usd_value(1, -1, 18)
        with pytest.raises(ValueError):
            usd_value(1, 1, -1)


class TestCollateralForSize:
    """Tests for collateral_for_size."""

    def test_floor_plus_one(self):
        """Should take whole USD units plus one."""
        assert collateral_for_size(180000 * USD_SCALE) == 180001

    def test_dust(self):
        """Should allocate one unit for dust-sized increases."""
        assert collateral_for_size(1) == 1

    def test_partial_unit(self):
        """Should floor fractional units."""
        assert collateral_for_size(USD_SCALE + USD_SCALE // 2) == 2

    def test_rejects_non_positive(self):
        """Should reject zero and negative sizes."""
        with pytest.raises(ValueError):
            collateral_for_size(0)
        with pytest.raises(ValueError):
            collateral_for_size(-USD_SCALE)


class TestToDecimal:
    """Tests for to_decimal."""

    def test_usd_scale(self):
        """Should render USD fixed point."""
        assert to_decimal(1800 * USD_SCALE) == Decimal("1800")

    def test_custom_decimals(self):
        """Should honour the decimals argument."""
        assert to_decimal(15, 1) == Decimal("1.5")

    def test_exact_for_large_values(self):
        """Should not round long values."""
        value = 123456789012345678901234567890123456789
        assert to_decimal(value, 0) == Decimal(value)


class TestParseFixed:
    """Tests for parse_fixed."""

    def test_scientific(self):
        """Should parse exponent notation exactly."""
        assert parse_fixed("1800e30") == 1800 * USD_SCALE
        assert parse_fixed("100e18") == 100 * 10**18

    def test_negative(self):
        """Should parse signed values."""
        assert parse_fixed("-50e18") == -50 * 10**18

    def test_plain_and_underscores(self):
        """Should accept plain digits with separators."""
        assert parse_fixed("42") == 42
        assert parse_fixed("1_000") == 1000

    def test_int_passthrough(self):
        """Should return ints unchanged."""
        assert parse_fixed(7) == 7

    def test_integral_after_scaling(self):
        """Should accept decimals that scale to an integer."""
        assert parse_fixed("1.5e1") == 15

    def test_rejects_fraction(self):
        """Should reject fractional amounts."""
        with pytest.raises(ValueError):
            parse_fixed("1.5")

    def test_rejects_garbage(self):
        """Should reject non-numeric text."""
        with pytest.raises(ArithmeticError):
            parse_fixed("abc")
