"""Metrics collector — thread-safe counters for intake deliveries."""

import math
import threading
import time


class WriterMetrics:
    """Collects metrics about batches delivered by a LogsApiWriter."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._batches_sent: int = 0
        self._records_sent: int = 0
        self._bytes_sent: int = 0
        self._failures: int = 0
        self._send_times: list[float] = []
        self._start_time = time.monotonic()

    def record_batch(self, batch_size: int, bytes_sent: int, send_time_ms: float) -> None:
        """Record one accepted batch.

        Args:
            batch_size: Number of records in the batch.
            bytes_sent: Compressed payload size in bytes.
            send_time_ms: Duration of the HTTP exchange, in milliseconds.
        """
        with self._lock:
            self._batches_sent += 1
            self._records_sent += batch_size
            self._bytes_sent += bytes_sent
            self._send_times.append(send_time_ms)

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1

    @property
    def batches_sent(self) -> int:
        with self._lock:
            return self._batches_sent

    @property
    def failures(self) -> int:
        with self._lock:
            return self._failures

    def snapshot(self) -> dict:
        """Return a point-in-time snapshot of all collected metrics."""
        with self._lock:
            send_times = list(self._send_times)
            avg_send = sum(send_times) / len(send_times) if send_times else 0.0

            return {
                "batches_sent": self._batches_sent,
                "records_sent": self._records_sent,
                "bytes_sent": self._bytes_sent,
                "failures": self._failures,
                "avg_send_time_ms": avg_send,
                "p95_send_time_ms": self._send_time_rank(send_times, 95),
                "max_send_time_ms": max(send_times, default=0.0),
                "uptime_seconds": time.monotonic() - self._start_time,
            }

    @staticmethod
    def _send_time_rank(send_times: list[float], pct: float) -> float:
        """Nearest-rank percentile of the recorded send times, 0.0 when none."""
        if not send_times:
            return 0.0
        ordered = sorted(send_times)
        rank = max(1, math.ceil(pct * len(ordered) / 100))
        return float(ordered[rank - 1])
