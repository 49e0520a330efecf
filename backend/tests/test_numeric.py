"""Money and percentage helper tests."""

from decimal import Decimal

from cashflow.core.numeric import display_percentage, divide_money, percentage, to_money


def test_percentage_rounds_ratio_half_up_to_four_places():
    assert percentage(Decimal("2"), Decimal("3")) == Decimal("66.67")
    assert percentage(Decimal("1"), Decimal("8")) == Decimal("12.50")
    # 0.00005 rounds up at the fourth place
    assert percentage(Decimal("0.5"), Decimal("10000")) == Decimal("0.01")


def test_percentage_with_zero_or_negative_whole_is_zero():
    assert percentage(Decimal("10"), Decimal("0")) == 0
    assert percentage(Decimal("10"), Decimal("-5")) == 0


def test_percentage_can_be_negative():
    assert percentage(Decimal("-10"), Decimal("20")) == Decimal("-50")


def test_to_money_accepts_collaborator_values():
    assert to_money(None) == Decimal("0.00")
    assert to_money(3) == Decimal("3.00")
    assert to_money(2.675) == Decimal("2.68")
    assert to_money("10.005") == Decimal("10.01")


def test_divide_money_half_up():
    assert divide_money(Decimal("100"), 30) == Decimal("3.33")
    assert divide_money(Decimal("0.05"), 2) == Decimal("0.03")
    assert divide_money(Decimal("10"), 0) == Decimal("0.00")


def test_display_percentage_one_decimal():
    assert str(display_percentage(Decimal("120.00"))) == "120.0"
    assert str(display_percentage(Decimal("20.05"))) == "20.1"
