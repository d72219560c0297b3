"""Tests for discount aggregation"""

import pytest
from datetime import date
from decimal import Decimal

from discount_engine.models.order import Order
from discount_engine.rules.aggregator import average_top_discounts, get_order_with_discount
from discount_engine.rules.discount_rules import DiscountRule


@pytest.fixture
def cheese_wheel_order():
    """Order scoring expiry 28, cheese 10, special date 50, quantity 5"""
    return Order(
        timestamp="2024-03-23T10:00:00",
        product_name="Cheese Wheel",
        expiry_date=date(2024, 3, 25),
        quantity=8,
        unit_price=Decimal("10.00"),
        channel="store",
        payment_method="cash",
    )


@pytest.fixture
def plain_order():
    return Order(
        timestamp="2024-01-01T12:00:00",
        product_name="Bread",
        expiry_date=date(2024, 6, 1),
        quantity=2,
        unit_price=Decimal("3.25"),
        channel="Store",
        payment_method="Cash",
    )


def test_average_of_two_highest():
    values = [Decimal(v) for v in (50, 10, 7, 5, 5, 0)]
    assert average_top_discounts(values) == Decimal(30)


def test_order_of_inputs_does_not_matter():
    values = [Decimal(v) for v in (0, 5, 7, 50, 5, 10)]
    assert average_top_discounts(values) == Decimal(30)


def test_single_firing_rule_is_halved():
    values = [Decimal(10), Decimal(0), Decimal(0), Decimal(0), Decimal(0), Decimal(0)]
    assert average_top_discounts(values) == Decimal(5)


def test_duplicate_values_are_kept():
    values = [Decimal(5), Decimal(5), Decimal(0)]
    assert average_top_discounts(values) == Decimal(5)


def test_no_firing_rules_gives_zero():
    assert average_top_discounts([Decimal(0)] * 6) == Decimal(0)


def test_half_percent_result():
    values = [Decimal(28), Decimal(5), Decimal(0)]
    assert average_top_discounts(values) == Decimal("16.5")


def test_end_to_end_cheese_wheel(cheese_wheel_order):
    enriched = get_order_with_discount(cheese_wheel_order)

    assert enriched.discount == Decimal(39)
    assert enriched.original_price == Decimal("80.00")
    assert enriched.final_price == Decimal("48.80")


def test_input_order_is_not_mutated(cheese_wheel_order):
    enriched = get_order_with_discount(cheese_wheel_order)

    assert cheese_wheel_order.discount == Decimal(0)
    assert enriched is not cheese_wheel_order
    assert enriched.model_dump(exclude={"discount"}) == cheese_wheel_order.model_dump(exclude={"discount"})


def test_aggregation_is_idempotent(cheese_wheel_order):
    enriched = get_order_with_discount(cheese_wheel_order)
    again = get_order_with_discount(enriched)
    assert again.discount == enriched.discount


def test_final_price_identity(cheese_wheel_order, plain_order):
    for order in (cheese_wheel_order, plain_order):
        enriched = get_order_with_discount(order)
        assert enriched.final_price == enriched.original_price * (1 - enriched.discount / 100)
        assert enriched.final_price <= enriched.original_price


def test_plain_order_gets_no_discount(plain_order):
    enriched = get_order_with_discount(plain_order)
    assert enriched.discount == Decimal(0)
    assert enriched.final_price == enriched.original_price


def test_large_app_order_can_exceed_100_percent(plain_order):
    order = plain_order.model_copy(update={"channel": "App", "quantity": 300})
    enriched = get_order_with_discount(order)

    # app rule scores 300, quantity rule scores 10
    assert enriched.discount == Decimal(155)


def test_custom_rule_list(plain_order):
    rules = [
        DiscountRule("flat_20", lambda order: Decimal(20)),
        DiscountRule("flat_10", lambda order: Decimal(10)),
        DiscountRule("flat_40", lambda order: Decimal(40)),
    ]
    assert get_order_with_discount(plain_order, rules).discount == Decimal(30)
