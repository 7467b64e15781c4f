"""Logs API writer — batches records, builds envelopes and posts them to the intake."""

import logging
import time
from typing import Any, Sequence

from datadog_logs_sink.batcher import split_into_batches
from datadog_logs_sink.compression import compress_payload
from datadog_logs_sink.config import WriterConfig, validate_config
from datadog_logs_sink.errors import DeliveryError, SerializationError, TransportError
from datadog_logs_sink.metrics import WriterMetrics
from datadog_logs_sink.serializer import build_envelope, serialize_envelope
from datadog_logs_sink.transport import (
    HTTPTransport,
    Transport,
    build_headers,
    build_url,
    redact_url,
)

logger = logging.getLogger(__name__)


class LogsApiWriter:
    """Delivers record values to the logs intake in ordered, bounded batches.

    Each call to :meth:`write` sends its batches one at a time and stops at
    the first failure. Nothing is retried or kept between calls.

    A transport passed in is shared across calls and left open; without one,
    a fresh HTTPTransport is opened per call and closed before returning.
    Calls on the same instance must not overlap.
    """

    def __init__(
        self,
        config: WriterConfig,
        transport: Transport | None = None,
        metrics: WriterMetrics | None = None,
    ):
        self._config = validate_config(config)
        self._transport = transport
        self._metrics = metrics if metrics is not None else WriterMetrics()
        self._url = build_url(config)
        self._headers = build_headers()

    @property
    def config(self) -> WriterConfig:
        return self._config

    @property
    def url(self) -> str:
        return self._url

    @property
    def metrics(self) -> WriterMetrics:
        return self._metrics

    def write(self, records: Sequence[Any]) -> int:
        """Send *records* and return the number of batches delivered.

        Raises:
            SerializationError: a record value could not be turned into JSON.
            DeliveryError: a batch was rejected or could not be sent; no
                later batches from this call were attempted.
        """
        batches = split_into_batches(records, self._config.max_batch_length)
        if not batches:
            return 0

        if self._transport is not None:
            return self._send_batches(batches, self._transport)

        with HTTPTransport.from_config(self._config) as transport:
            return self._send_batches(batches, transport)

    def _send_batches(self, batches: list[list[Any]], transport: Transport) -> int:
        records_sent = 0
        for index, batch in enumerate(batches):
            try:
                body = self._build_body(batch)
            except SerializationError as exc:
                logger.error(
                    "Batch %d/%d could not be serialized after %d record(s) were sent: %s",
                    index + 1,
                    len(batches),
                    records_sent,
                    exc,
                )
                raise SerializationError(
                    f"Could not serialize batch {index + 1} of {len(batches)}: {exc}",
                    batch_index=index,
                    batches_sent=index,
                    records_sent=records_sent,
                ) from exc

            start = time.monotonic()
            try:
                status = transport.send(self._url, body, self._headers)
            except TransportError as exc:
                self._metrics.record_failure()
                logger.error(
                    "Batch %d/%d to %s failed: %s",
                    index + 1,
                    len(batches),
                    redact_url(self._url),
                    exc,
                )
                raise DeliveryError(
                    f"Could not deliver batch {index + 1} of {len(batches)}: {exc}",
                    batch_index=index,
                    batches_sent=index,
                    records_sent=records_sent,
                ) from exc
            elapsed_ms = (time.monotonic() - start) * 1000

            if not 200 <= status < 300:
                self._metrics.record_failure()
                logger.error(
                    "Batch %d/%d rejected by %s with HTTP %d",
                    index + 1,
                    len(batches),
                    redact_url(self._url),
                    status,
                )
                raise DeliveryError(
                    f"Intake rejected batch {index + 1} of {len(batches)} "
                    f"with HTTP status {status}",
                    batch_index=index,
                    batches_sent=index,
                    records_sent=records_sent,
                    status_code=status,
                )

            records_sent += len(batch)
            self._metrics.record_batch(len(batch), len(body), elapsed_ms)
            logger.debug(
                "Sent batch %d/%d: %d record(s), %d bytes, HTTP %d in %.1fms",
                index + 1,
                len(batches),
                len(batch),
                len(body),
                status,
                elapsed_ms,
            )

        logger.info(
            "Delivered %d record(s) in %d batch(es)", records_sent, len(batches)
        )
        return len(batches)

    def _build_body(self, batch: list[Any]) -> bytes:
        envelope = build_envelope(
            batch,
            tags=self._config.tags,
            hostname=self._config.hostname,
            service=self._config.service,
        )
        return compress_payload(serialize_envelope(envelope))
