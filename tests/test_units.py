from __future__ import annotations

from decimal import Decimal

import pytest

from gazelle.errors import DivisionByZero, MalformedNumber
from gazelle.units import DIVISION_SCALE, HUNDRED, ZERO, DecimalValue


def test_of_integer_string_shifts_by_decimals():
    value = DecimalValue.of_integer_string("1500000", 6)
    assert value == DecimalValue.of("1.5")
    assert value.scale == 0


@pytest.mark.parametrize("raw", ["abc", "1e5", "NaN", "Infinity", "", " ", "1,000"])
def test_of_integer_string_rejects_non_literals(raw):
    with pytest.raises(MalformedNumber):
        DecimalValue.of_integer_string(raw)


def test_of_integer_string_rejects_unrepresentable_shift():
    with pytest.raises(MalformedNumber):
        DecimalValue.of_integer_string("5", 10_000_000)


def test_of_integer_string_refuses_to_round_wide_magnitudes():
    with pytest.raises(MalformedNumber):
        DecimalValue.of_integer_string("9" * 125, 18)

    exact = DecimalValue.of_integer_string("9" * 78, 18)
    assert exact.amount == Decimal("9" * 60 + "." + "9" * 18)


def test_rescale_rounds_half_away_from_zero():
    assert str(DecimalValue.of("2.345").rescale(2)) == "2.35"
    assert str(DecimalValue.of("-2.345").rescale(2)) == "-2.35"
    assert str(DecimalValue.of("2.344").rescale(2)) == "2.34"


def test_rescale_zero_pads():
    assert str(DecimalValue.of(5).rescale(2)) == "5.00"


def test_rescale_is_idempotent():
    value = DecimalValue.of_integer_string("123456789123456789123", 18)
    once = value.rescale(0)
    assert once.rescale(0) == once
    assert str(once) == "123"


def test_from_float_fixes_three_digits():
    value = DecimalValue.from_float(1.23456)
    assert value.scale == 3
    assert str(value) == "1.235"


def test_from_float_rejects_nan():
    with pytest.raises(MalformedNumber):
        DecimalValue.from_float(float("nan"))


def test_division_by_zero_is_also_zero_division_error():
    with pytest.raises(DivisionByZero):
        DecimalValue.of(1) / ZERO
    with pytest.raises(ZeroDivisionError):
        DecimalValue.of(1) / ZERO


def test_division_is_carried_at_fixed_scale():
    third = DecimalValue.of(1) / DecimalValue.of(3)
    assert third.amount.as_tuple().exponent == -DIVISION_SCALE
    assert str(third.with_scale(2)) == "0.33"


def test_arithmetic_only_between_decimal_values():
    with pytest.raises(TypeError):
        DecimalValue.of(1) + 1  # type: ignore[operator]
    with pytest.raises(TypeError):
        DecimalValue.of(1) * 2.5  # type: ignore[operator]


def test_result_scale_is_widest_operand_scale():
    total = DecimalValue.of("1.5", 1) + DecimalValue.of("2.25", 2)
    assert total.scale == 2
    assert str(total) == "3.75"


def test_comparison_and_max():
    assert max(ZERO, DecimalValue.of(-3)) == ZERO
    assert DecimalValue.of(2) < HUNDRED
    assert DecimalValue.of("1.0") == DecimalValue.of(1)


def test_to_decimal_returns_display_value():
    assert DecimalValue.of("1.005", 2).to_decimal() == Decimal("1.01")
