"""Discount rules and aggregation"""

from .discount_rules import DISCOUNT_RULES, DiscountRule, evaluate_rules
from .aggregator import average_top_discounts, get_order_with_discount

__all__ = [
    "DISCOUNT_RULES",
    "DiscountRule",
    "evaluate_rules",
    "average_top_discounts",
    "get_order_with_discount",
]
