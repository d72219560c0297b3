"""Order data model"""

import re
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discount_engine.constants import ISO_DATE_FORMAT

ISO_DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


def parse_iso_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD date (no basic or week-date forms)"""
    if not ISO_DATE_PATTERN.fullmatch(value):
        raise ValueError(f"expected a YYYY-MM-DD date: {value!r}")
    return datetime.strptime(value, ISO_DATE_FORMAT).date()


class Order(BaseModel):
    """One sales transaction with its pricing and final discount.

    Immutable: the aggregator produces an enriched copy through
    with_discount() instead of changing the discount in place.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "timestamp": "2023-04-18T18:18:40Z",
                "product_name": "Wine - White Colubia Cresh",
                "expiry_date": "2023-06-04",
                "quantity": 8,
                "unit_price": "34.72",
                "channel": "Store",
                "payment_method": "Visa",
                "discount": "0"
            }
        },
    )

    timestamp: str = Field(..., description="Transaction date-time; first 10 chars are the ISO date")
    product_name: str = Field(..., description="Product name (free text)")
    expiry_date: date = Field(..., description="Product expiry date")
    quantity: int = Field(..., gt=0, description="Units bought")
    unit_price: Decimal = Field(..., ge=0, description="Price per unit")
    channel: str = Field(..., description="Sales channel, e.g. Store or App")
    payment_method: str = Field(..., description="Payment method, e.g. Visa or Cash")
    # Not capped at 100: the app channel rule is unbounded
    discount: Decimal = Field(default=Decimal(0), ge=0, description="Final discount percent")

    @field_validator("timestamp")
    @classmethod
    def _timestamp_starts_with_date(cls, value: str) -> str:
        try:
            parse_iso_date(value[:10])
        except ValueError as e:
            raise ValueError(f"timestamp must start with an ISO date (YYYY-MM-DD): {value!r}") from e
        return value

    @field_validator("expiry_date", mode="before")
    @classmethod
    def _strict_expiry_date(cls, value):
        if isinstance(value, str):
            return parse_iso_date(value)
        return value

    @property
    def transaction_date(self) -> date:
        return parse_iso_date(self.timestamp[:10])

    @property
    def original_price(self) -> Decimal:
        """Price before discount: quantity * unit price"""
        return self.quantity * self.unit_price

    @property
    def final_price(self) -> Decimal:
        """Price after applying the discount percent"""
        return self.original_price * (1 - self.discount / 100)

    def with_discount(self, discount: Decimal) -> "Order":
        """Return a copy of this order carrying the given discount"""
        return self.model_copy(update={"discount": Decimal(discount)})
