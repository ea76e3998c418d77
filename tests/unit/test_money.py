"""
Unit tests for the Money value object.

Verifies:
- Decimal-only construction
- Currency-precision rounding (ROUND_HALF_UP)
- Same-currency arithmetic
- Non-finite amounts rejected
"""

from decimal import Decimal

import pytest

from utility_kernel.domain.values import Currency, Money, sum_money


class TestMoneyConstruction:
    """Tests for Money construction and normalization."""

    def test_of_string(self):
        money = Money.of("100.50", "EUR")
        assert money.amount == Decimal("100.50")
        assert money.currency == Currency("EUR")

    def test_of_int(self):
        assert Money.of(7, "EUR").amount == Decimal("7")

    def test_currency_string_normalized(self):
        money = Money(amount=Decimal("1"), currency=" eur ")
        assert money.currency.code == "EUR"

    def test_invalid_currency_rejected(self):
        with pytest.raises(ValueError, match="Invalid ISO 4217"):
            Money.of("1", "XXX")

    def test_invalid_amount_rejected(self):
        with pytest.raises(ValueError, match="Invalid amount"):
            Money(amount="not a number", currency="EUR")

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity"])
    def test_non_finite_rejected(self, value):
        with pytest.raises(ValueError):
            Money(amount=Decimal(value), currency="EUR")

    def test_currency_type_checked(self):
        with pytest.raises(TypeError):
            Money(amount=Decimal("1"), currency=978)

    def test_zero(self):
        zero = Money.zero("EUR")
        assert zero.is_zero
        assert not zero.is_positive
        assert not zero.is_negative

    def test_hashable(self):
        assert len({Money.of("1.00", "EUR"), Money.of("1.00", "EUR")}) == 1


class TestMoneyRounding:
    """Rounding follows the currency's decimal places."""

    def test_half_up_two_places(self):
        assert Money.of("2.345", "EUR").round().amount == Decimal("2.35")

    def test_half_up_negative(self):
        assert Money.of("-2.345", "EUR").round().amount == Decimal("-2.35")

    def test_zero_decimal_currency(self):
        assert Money.of("1234.5", "JPY").round().amount == Decimal("1235")

    def test_three_decimal_currency(self):
        assert Money.of("1.2345", "KWD").round().amount == Decimal("1.235")

    def test_round_returns_new_instance(self):
        original = Money.of("1.005", "EUR")
        rounded = original.round()
        assert original.amount == Decimal("1.005")
        assert rounded.amount == Decimal("1.01")


class TestMoneyArithmetic:
    """Arithmetic stays in Decimal and refuses to mix currencies."""

    def test_add(self):
        assert Money.of("1.10", "EUR") + Money.of("2.20", "EUR") == Money.of("3.30", "EUR")

    def test_sub(self):
        assert Money.of("5", "EUR") - Money.of("1.5", "EUR") == Money.of("3.5", "EUR")

    def test_add_different_currency_raises(self):
        with pytest.raises(ValueError, match="different currencies"):
            Money.of("1", "EUR") + Money.of("1", "USD")

    def test_mul_by_decimal(self):
        assert (Money.of("1.2", "EUR") * Decimal("5.2")).amount == Decimal("6.24")

    def test_rmul(self):
        assert (3 * Money.of("1.5", "EUR")).amount == Decimal("4.5")

    def test_mul_by_float_unsupported(self):
        with pytest.raises(TypeError):
            Money.of("1", "EUR") * 1.5

    def test_div(self):
        assert (Money.of("100", "EUR") / 4).amount == Decimal("25")

    def test_neg_and_abs(self):
        money = Money.of("3", "EUR")
        assert (-money).amount == Decimal("-3")
        assert abs(-money) == money

    def test_comparison(self):
        assert Money.of("1", "EUR") < Money.of("2", "EUR")
        assert Money.of("2", "EUR") >= Money.of("2", "EUR")

    def test_comparison_different_currency_raises(self):
        with pytest.raises(ValueError):
            Money.of("1", "EUR") < Money.of("2", "USD")

    def test_sum_money(self):
        total = sum_money([Money.of("1.10", "EUR"), Money.of("2.20", "EUR")], "EUR")
        assert total == Money.of("3.30", "EUR")

    def test_sum_money_empty_is_zero(self):
        assert sum_money([], "EUR").is_zero
