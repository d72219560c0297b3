"""Relational persistence for enriched orders"""

from .models import Base, OrderRecord
from .order_writer import OrderWriter

__all__ = ["Base", "OrderRecord", "OrderWriter"]
