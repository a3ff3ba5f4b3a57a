"""Tests for the currency helpers."""

import random
from decimal import Decimal

from runeforge.engine.economy import clamp_non_negative, debit, format_number, format_percent_increase


def test_format_number_small():
    assert format_number(0) == "0"
    assert format_number(5) == "5"
    assert format_number(99.5) == "99.5"
    assert format_number(1.25) == "1.25"


def test_format_number_thousands():
    result = format_number(1500)
    assert "K" in result
    assert "1.5" in result


def test_format_number_millions():
    result = format_number(2_300_000)
    assert "M" in result


def test_format_number_scientific():
    assert format_number(1e21) == "1.00e21"
    assert format_number(3.5e120) == "3.50e120"


def test_format_number_decimal_beyond_float_range():
    assert format_number(Decimal("4.2e500")) == "4.20e500"
    assert format_number(Decimal("1500")) == format_number(1500)


def test_format_number_negative():
    assert format_number(-1500) == "-" + format_number(1500)


def test_format_percent_increase():
    assert format_percent_increase(1.25) == "+25.0%"


def test_clamp_non_negative():
    assert clamp_non_negative(5.0) == 5.0
    assert clamp_non_negative(-1e-9) == 0
    assert clamp_non_negative(float("nan")) == 0
    assert clamp_non_negative(Decimal("-3")) == Decimal(0)


def test_debit_never_negative_under_adversarial_costs():
    rng = random.Random(1234)
    balance = 2.9992198253874083e47
    for _ in range(500):
        cost = rng.choice([
            balance,
            balance * (1 + 1e-16),
            rng.uniform(0, 2) * max(balance, 1.0),
            (balance // 1e20) * 1e20,
            1e20,
        ])
        balance = debit(balance, cost)
        assert balance >= 0
        if balance == 0:
            balance = rng.uniform(1, 1e48)
