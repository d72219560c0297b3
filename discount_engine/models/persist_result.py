"""Persistence outcome models"""

from typing import List

from pydantic import BaseModel, Field

from .order import Order


class PersistFailure(BaseModel):
    """An order the writer could not insert"""

    order: Order = Field(..., description="Order that failed to insert")
    error: str = Field(..., description="Database error message")


class PersistResult(BaseModel):
    """Outcome of writing a batch of orders"""

    success_count: int = Field(default=0, ge=0, description="Orders inserted")
    failures: List[PersistFailure] = Field(default_factory=list, description="Orders that failed")

    @property
    def failure_count(self) -> int:
        return len(self.failures)
