from decimal import Decimal

from bson import Decimal128

from growvest.core.money import daily_profit, money_str, percent_of, quantize, to_bson, to_decimal


def test_daily_profit_simple_interest():
    assert daily_profit(Decimal("500"), Decimal("3.00")) == Decimal("15.00")
    assert daily_profit(Decimal("1000.00"), Decimal("1.00")) == Decimal("10.00")


def test_daily_profit_rounds_half_even():
    # 0.125 -> 0.12, 0.135 -> 0.14
    assert daily_profit(Decimal("12.50"), Decimal("1.00")) == Decimal("0.12")
    assert daily_profit(Decimal("13.50"), Decimal("1.00")) == Decimal("0.14")


def test_daily_profit_zero_for_non_positive_inputs():
    assert daily_profit(Decimal("0"), Decimal("3.00")) == Decimal("0.00")
    assert daily_profit(Decimal("100"), Decimal("0")) == Decimal("0.00")


def test_percent_of():
    assert percent_of(Decimal("200.00"), Decimal("5.00")) == Decimal("10.00")
    assert percent_of(Decimal("33.33"), Decimal("5.00")) == Decimal("1.67")


def test_to_decimal_accepts_bson_and_float():
    assert to_decimal(Decimal128("12.34")) == Decimal("12.34")
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("7") == Decimal("7")


def test_to_bson_quantizes():
    assert to_bson(Decimal("1.005")) == Decimal128("1.00")
    assert to_bson(Decimal("2")) == Decimal128("2.00")


def test_money_str():
    assert money_str(Decimal("10")) == "10.00"
    assert money_str(Decimal128("3.5")) == "3.50"
    assert money_str(None) is None
    assert quantize(Decimal("2.675")) == Decimal("2.68")
