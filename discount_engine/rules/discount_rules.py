"""Discount rules - pure functions.

Each rule takes an Order and returns the discount percent it scores as a
Decimal. Rules hold no state and never look at other orders, so they can be
tested with a single Order and evaluated in any order.
"""

from decimal import Decimal
from typing import Callable, Dict, NamedTuple, Sequence

from discount_engine.constants import (
    APP_CHANNEL,
    APP_QUANTITY_STEP,
    CHEESE_DISCOUNT,
    EXPIRY_WINDOW_DAYS,
    QUANTITY_BULK_ABOVE,
    QUANTITY_BULK_DISCOUNT,
    QUANTITY_TIERS,
    SPECIAL_DATE_DAY,
    SPECIAL_DATE_DISCOUNT,
    SPECIAL_DATE_MONTH,
    VISA_DISCOUNT,
    VISA_PAYMENT_METHOD,
    WINE_DISCOUNT,
    RuleName,
)
from discount_engine.models.order import Order
from discount_engine.utils.errors import RuleEvaluationError

NO_DISCOUNT = Decimal(0)


class DiscountRule(NamedTuple):
    """A named discount rule"""

    name: str
    calculate: Callable[[Order], Decimal]


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------

def days_until_expiry(order: Order) -> int:
    """Whole days from the transaction date to the expiry date (negative once expired)"""
    return (order.expiry_date - order.transaction_date).days


def expiry_based_discount(order: Order) -> Decimal:
    """1% for each day under 30 days to expiry.

    Only 1-29 remaining days qualify; 30 or more, the expiry day itself and
    already expired products all score 0.
    """
    days_remaining = days_until_expiry(order)
    if 1 <= days_remaining <= EXPIRY_WINDOW_DAYS - 1:
        return Decimal(EXPIRY_WINDOW_DAYS - days_remaining)
    return NO_DISCOUNT


def cheese_wine_discount(order: Order) -> Decimal:
    """Cheese and wine products are on sale; cheese wins when both match"""
    product = order.product_name.lower()
    if "cheese" in product:
        return CHEESE_DISCOUNT
    if "wine" in product:
        return WINE_DISCOUNT
    return NO_DISCOUNT


def special_date_discount(order: Order) -> Decimal:
    """50% on transactions made on 23 March of any year"""
    transaction_date = order.transaction_date
    if transaction_date.month == SPECIAL_DATE_MONTH and transaction_date.day == SPECIAL_DATE_DAY:
        return SPECIAL_DATE_DISCOUNT
    return NO_DISCOUNT


def quantity_based_discount(order: Order) -> Decimal:
    """Tiered discount on units of the same product.

    6-9 units: 5%, 10-14 units: 7%, more than 15 units: 10%.
    Exactly 15 units falls between the tiers and scores 0.
    """
    for low, high, percent in QUANTITY_TIERS:
        if low <= order.quantity <= high:
            return percent
    if order.quantity > QUANTITY_BULK_ABOVE:
        return QUANTITY_BULK_DISCOUNT
    return NO_DISCOUNT


def app_channel_discount(order: Order) -> Decimal:
    """App sales: quantity rounded up to a multiple of 5, each multiple adds 5%.

    The result is not capped, so large app orders can score above 100.
    """
    if order.channel.lower() != APP_CHANNEL:
        return NO_DISCOUNT
    rounded_quantity = ((order.quantity + APP_QUANTITY_STEP - 1) // APP_QUANTITY_STEP) * APP_QUANTITY_STEP
    return Decimal((rounded_quantity // APP_QUANTITY_STEP) * 5)


def visa_card_discount(order: Order) -> Decimal:
    """5% when paying with Visa"""
    if order.payment_method.lower() == VISA_PAYMENT_METHOD:
        return VISA_DISCOUNT
    return NO_DISCOUNT


# ---------------------------------------------------------------------------
# Rule list
# ---------------------------------------------------------------------------

DISCOUNT_RULES: Sequence[DiscountRule] = (
    DiscountRule(RuleName.EXPIRY.value, expiry_based_discount),
    DiscountRule(RuleName.CHEESE_WINE.value, cheese_wine_discount),
    DiscountRule(RuleName.SPECIAL_DATE.value, special_date_discount),
    DiscountRule(RuleName.QUANTITY.value, quantity_based_discount),
    DiscountRule(RuleName.APP_CHANNEL.value, app_channel_discount),
    DiscountRule(RuleName.VISA_CARD.value, visa_card_discount),
)


def evaluate_rules(order: Order, rules: Sequence[DiscountRule] = DISCOUNT_RULES) -> Dict[str, Decimal]:
    """
    Score an order against every rule

    Args:
        order: Order to score
        rules: Rules to apply, in order

    Returns:
        Mapping of rule name to percent, in rule order

    Raises:
        RuleEvaluationError: If a rule raises
    """
    return {rule.name: score_rule(rule, order) for rule in rules}


def score_rule(rule: DiscountRule, order: Order) -> Decimal:
    """Apply one rule, wrapping any failure in RuleEvaluationError"""
    try:
        return Decimal(rule.calculate(order))
    except Exception as e:
        raise RuleEvaluationError(f"Rule '{rule.name}' failed for order {order.timestamp}: {e}") from e
