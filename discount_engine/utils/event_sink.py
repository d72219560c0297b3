"""Event sinks for pipeline observability.

The pipeline reports what it does (counts loaded, processed, persisted) and
every failure through an injected EventSink instead of a process-wide log
file, so tests can capture events in memory.
"""

from typing import Any, List, Optional, Protocol, Union

from discount_engine.constants import EventLevel
from discount_engine.models.event_record import EventRecord
from discount_engine.utils.logging import StructuredLogger, get_logger


class EventSink(Protocol):
    """Append-only, timestamped event target. record() must never raise."""

    def record(self, level: Union[EventLevel, str], message: str, **context: Any) -> None:
        ...

    def info(self, message: str, **context: Any) -> None:
        ...

    def error(self, message: str, **context: Any) -> None:
        ...


class _EventSinkBase:
    """Shared level helpers"""

    def record(self, level: Union[EventLevel, str], message: str, **context: Any) -> None:
        raise NotImplementedError

    def info(self, message: str, **context: Any) -> None:
        self.record(EventLevel.INFO, message, **context)

    def error(self, message: str, **context: Any) -> None:
        self.record(EventLevel.ERROR, message, **context)


def _coerce_level(level: Union[EventLevel, str]) -> EventLevel:
    # Unknown labels are kept as errors rather than dropped
    try:
        return EventLevel(str(getattr(level, "value", level)).upper())
    except ValueError:
        return EventLevel.ERROR


class LoggingEventSink(_EventSinkBase):
    """Writes events through the structured logger (console, plus the engine log file if set)"""

    def __init__(
        self,
        logger: Optional[StructuredLogger] = None,
        log_file: Optional[str] = None,
        level: Optional[str] = None,
    ):
        self.logger = logger or get_logger("discount_engine.events", log_file=log_file, level=level)
        if logger is not None and log_file:
            self.logger.add_file_handler(log_file)

    def record(self, level: Union[EventLevel, str], message: str, **context: Any) -> None:
        self.logger.log(_coerce_level(level).value, message, **context)


class MemoryEventSink(_EventSinkBase):
    """Keeps events in a list"""

    def __init__(self):
        self.events: List[EventRecord] = []

    def record(self, level: Union[EventLevel, str], message: str, **context: Any) -> None:
        self.events.append(EventRecord(level=_coerce_level(level), message=message, context=context))

    def messages(self, level: Optional[EventLevel] = None) -> List[str]:
        """Recorded messages, optionally only those at one level"""
        return [e.message for e in self.events if level is None or e.level == level]

    def clear(self) -> None:
        self.events = []
