"""Envelope serializer — wraps a batch of log values and shared metadata in JSON."""

import json
from typing import Any, Sequence

from datadog_logs_sink.errors import SerializationError
from datadog_logs_sink.models import record_value

# Identifies this producer to the intake
DDSOURCE = "kafka-connect"


def format_tags(tags: str) -> str:
    """Normalize a comma-separated tag string.

    Whitespace around each tag is stripped and empty entries are dropped,
    so ``"team:agent-core, author:berzan"`` becomes
    ``"team:agent-core,author:berzan"``.
    """
    if not tags:
        return ""
    return ",".join(tag.strip() for tag in tags.split(",") if tag.strip())


def to_message(value: Any) -> str:
    """Convert a record value to the string placed in the ``message`` array."""
    if value is None:
        raise SerializationError("Record value is None and cannot be shipped")
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SerializationError(f"Record value is not valid UTF-8: {exc}") from exc
    return str(value)


def build_envelope(
    batch: Sequence[Any],
    tags: str = "",
    hostname: str = "",
    service: str = "",
) -> dict:
    """Build the envelope dict for one batch.

    Key order is fixed: ``message``, ``ddsource``, then ``ddtags``,
    ``hostname`` and ``service``, each present only when configured.
    """
    envelope: dict = {
        "message": [to_message(record_value(record)) for record in batch],
        "ddsource": DDSOURCE,
    }

    formatted_tags = format_tags(tags)
    if formatted_tags:
        envelope["ddtags"] = formatted_tags
    if hostname:
        envelope["hostname"] = hostname
    if service:
        envelope["service"] = service

    return envelope


def serialize_envelope(envelope: dict) -> bytes:
    """Serialize an envelope to compact UTF-8 JSON bytes."""
    try:
        return json.dumps(
            envelope, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")
    except (TypeError, ValueError, UnicodeEncodeError) as exc:
        raise SerializationError(f"Cannot serialize envelope: {exc}") from exc


def deserialize_envelope(data: bytes) -> dict:
    """Parse bytes produced by *serialize_envelope* back into a dict."""
    return json.loads(data.decode("utf-8"))
