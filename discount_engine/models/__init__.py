"""Data models for the discount engine"""

from .order import Order
from .persist_result import PersistFailure, PersistResult
from .event_record import EventRecord

__all__ = ["Order", "PersistFailure", "PersistResult", "EventRecord"]
