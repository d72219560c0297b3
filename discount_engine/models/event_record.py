"""Event record data model"""

from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, Field

from discount_engine.constants import EventLevel


class EventRecord(BaseModel):
    """One entry recorded by an event sink"""

    timestamp: datetime = Field(default_factory=datetime.now, description="When the event was recorded")
    level: EventLevel = Field(..., description="INFO or ERROR")
    message: str = Field(..., description="Human-readable message")
    context: Dict[str, Any] = Field(default_factory=dict, description="Structured context")
