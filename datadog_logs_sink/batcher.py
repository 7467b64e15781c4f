"""Batch assembler — splits a record sequence into bounded, ordered batches."""

import logging
from typing import Sequence, TypeVar

from datadog_logs_sink.errors import ConfigurationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def split_into_batches(records: Sequence[T], max_batch_length: int) -> list[list[T]]:
    """Split *records* into contiguous batches of at most *max_batch_length*.

    Every batch is non-empty, order is preserved, and concatenating the
    returned batches reproduces *records* exactly. An empty input yields no
    batches.
    """
    if isinstance(max_batch_length, bool) or not isinstance(max_batch_length, int):
        raise ConfigurationError(
            f"max_batch_length must be an integer, got {max_batch_length!r}"
        )
    if max_batch_length < 1:
        raise ConfigurationError(
            f"max_batch_length must be positive, got {max_batch_length}"
        )

    records = list(records)
    batches = [
        records[start:start + max_batch_length]
        for start in range(0, len(records), max_batch_length)
    ]

    logger.debug(
        "Split %d record(s) into %d batch(es) of at most %d",
        len(records),
        len(batches),
        max_batch_length,
    )
    return batches
