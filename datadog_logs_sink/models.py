"""Sink record model."""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class LogRecord:
    """A single record handed over by the upstream pipeline.

    Only ``value`` is shipped; topic, partition, key and offset belong to the
    upstream framework and are kept so callers can do their own bookkeeping.
    """

    value: Any
    topic: str = ""
    partition: int = 0
    key: Optional[Any] = None
    offset: int = 0


def create_record(
    value: Any,
    topic: str = "",
    partition: int = 0,
    key: Optional[Any] = None,
    offset: int = 0,
) -> LogRecord:
    """Factory function that creates a LogRecord."""
    return LogRecord(
        value=value,
        topic=topic,
        partition=partition,
        key=key,
        offset=offset,
    )


def record_value(record: Any) -> Any:
    """Return the shippable value of a LogRecord, or the object itself."""
    if isinstance(record, LogRecord):
        return record.value
    return record
