"""Constants and enums for the discount engine"""

from decimal import Decimal
from enum import Enum


class EventLevel(str, Enum):
    """Event sink levels"""
    INFO = "INFO"
    ERROR = "ERROR"


class RuleName(str, Enum):
    """Discount rule identifiers"""
    EXPIRY = "expiry"
    CHEESE_WINE = "cheese_wine"
    SPECIAL_DATE = "special_date"
    QUANTITY = "quantity"
    APP_CHANNEL = "app_channel"
    VISA_CARD = "visa_card"


class RunStatus(str, Enum):
    """Pipeline run outcome"""
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"


# Calendar dates in the order source and in timestamps
ISO_DATE_FORMAT = "%Y-%m-%d"

# CSV layout, in column order
ORDER_FIELDS = [
    "timestamp",
    "product_name",
    "expiry_date",
    "quantity",
    "unit_price",
    "channel",
    "payment_method",
]

# Expiry rule: 1% per day under 30 days to expiry
EXPIRY_WINDOW_DAYS = 30

# Product rule
CHEESE_DISCOUNT = Decimal(10)
WINE_DISCOUNT = Decimal(5)

# Special date rule (23 March)
SPECIAL_DATE_MONTH = 3
SPECIAL_DATE_DAY = 23
SPECIAL_DATE_DISCOUNT = Decimal(50)

# Quantity rule: (min, max, percent), inclusive bounds; 15 is not covered
QUANTITY_TIERS = [
    (6, 9, Decimal(5)),
    (10, 14, Decimal(7)),
]
QUANTITY_BULK_ABOVE = 15
QUANTITY_BULK_DISCOUNT = Decimal(10)

# App channel rule
APP_CHANNEL = "app"
APP_QUANTITY_STEP = 5

# Payment rule
VISA_PAYMENT_METHOD = "visa"
VISA_DISCOUNT = Decimal(5)

# Aggregation: average of the N highest rule outputs
TOP_DISCOUNTS_AVERAGED = 2

# Persisted monetary precision
MONEY_QUANTUM = Decimal("0.01")
