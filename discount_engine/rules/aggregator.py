"""Combine rule outputs into one final discount per order"""

from decimal import Decimal
from typing import Iterable, Sequence

from discount_engine.constants import TOP_DISCOUNTS_AVERAGED
from discount_engine.models.order import Order
from discount_engine.rules.discount_rules import DISCOUNT_RULES, DiscountRule, score_rule


def average_top_discounts(discounts: Iterable[Decimal], top_n: int = TOP_DISCOUNTS_AVERAGED) -> Decimal:
    """
    Average the top_n highest discounts.

    Zeros and duplicates count like any other value and the sum is always
    divided by top_n, so a single firing rule is halved.

    Args:
        discounts: Percent scored by each rule
        top_n: How many of the highest values to average

    Returns:
        Final discount percent
    """
    highest = sorted(discounts, reverse=True)[:top_n]
    return sum(highest, Decimal(0)) / top_n


def get_order_with_discount(order: Order, rules: Sequence[DiscountRule] = DISCOUNT_RULES) -> Order:
    """Score an order against every rule and return a copy carrying the final discount"""
    discounts = [score_rule(rule, order) for rule in rules]
    return order.with_discount(average_top_discounts(discounts))

