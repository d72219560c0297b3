"""SQLAlchemy models for persisted orders.

OrderRecord mirrors the orders table: the transaction date, the order's raw
fields, and the discount with original and final prices fixed at two
fractional digits.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import Date, Integer, Numeric, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from discount_engine.constants import MONEY_QUANTUM
from discount_engine.models.order import Order


class Base(DeclarativeBase):
    """Declarative base for discount engine tables"""
    pass


def to_money(value: Decimal) -> Decimal:
    """Round to two fractional digits, half up"""
    return Decimal(value).quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


class OrderRecord(Base):
    """An enriched order row"""

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    order_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    product_name: Mapped[str] = mapped_column(String(255), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    channel: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_method: Mapped[str] = mapped_column(String(50), nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    original_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    final_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    @classmethod
    def from_order(cls, order: Order) -> "OrderRecord":
        return cls(
            order_date=order.transaction_date,
            expiry_date=order.expiry_date,
            product_name=order.product_name,
            quantity=order.quantity,
            unit_price=to_money(order.unit_price),
            channel=order.channel,
            payment_method=order.payment_method,
            discount=to_money(order.discount),
            original_price=to_money(order.original_price),
            final_price=to_money(order.final_price),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_date": self.order_date.isoformat() if self.order_date else None,
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "product_name": self.product_name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "channel": self.channel,
            "payment_method": self.payment_method,
            "discount": self.discount,
            "original_price": self.original_price,
            "final_price": self.final_price,
        }
