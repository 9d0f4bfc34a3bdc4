"""Metrics collection for the fetch client."""

import threading
from dataclasses import dataclass, field
from typing import ClassVar

from src.fetch.errors import TransportErrorClass


@dataclass
class FetchMetrics:
    """Metrics for fetch operations.

    Tracks request counts per status, not-modified outcomes, transferred
    bytes and transport failures. Each FetchClient owns an instance unless
    one is injected; get_instance() provides a process-wide instance for
    callers that want to aggregate across clients. Updates hold a lock,
    so one instance may be shared between threads.
    """

    http_requests_total: dict[int, int] = field(default_factory=dict)
    http_not_modified_total: int = 0
    http_unchecked_total: int = 0
    http_failures_total: dict[str, int] = field(default_factory=dict)
    http_bytes_total: int = 0
    http_duration_ms_total: float = 0.0
    http_request_count: int = 0
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    _instance: ClassVar["FetchMetrics | None"] = None
    _instance_lock: ClassVar[threading.Lock] = threading.Lock()

    @classmethod
    def get_instance(cls) -> "FetchMetrics":
        """Get the process-wide metrics instance."""
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the process-wide instance (primarily for testing)."""
        with cls._instance_lock:
            cls._instance = None

    def record_request(self, status_code: int, bytes_received: int) -> None:
        """Record a completed HTTP request.

        Args:
            status_code: HTTP status code.
            bytes_received: Number of body bytes received.
        """
        with self._lock:
            self.http_requests_total[status_code] = (
                self.http_requests_total.get(status_code, 0) + 1
            )
            self.http_bytes_total += bytes_received
            self.http_request_count += 1

    def record_not_modified(self) -> None:
        """Record a fetch whose resource was not modified."""
        with self._lock:
            self.http_not_modified_total += 1

    def record_unchecked(self) -> None:
        """Record a fetch where no modification check was possible."""
        with self._lock:
            self.http_unchecked_total += 1

    def record_failure(self, error_class: TransportErrorClass) -> None:
        """Record a transport failure.

        Args:
            error_class: Classification of the failure.
        """
        key = error_class.value
        with self._lock:
            self.http_failures_total[key] = self.http_failures_total.get(key, 0) + 1

    def record_duration(self, duration_ms: float) -> None:
        """Record request duration in milliseconds."""
        with self._lock:
            self.http_duration_ms_total += duration_ms

    def to_dict(self) -> dict[str, int | float | dict[str, int] | dict[int, int]]:
        """Convert metrics to dictionary.

        Returns:
            Dictionary of metric name to value.
        """
        with self._lock:
            return {
                "http_requests_total": dict(self.http_requests_total),
                "http_not_modified_total": self.http_not_modified_total,
                "http_unchecked_total": self.http_unchecked_total,
                "http_failures_total": dict(self.http_failures_total),
                "http_bytes_total": self.http_bytes_total,
                "http_duration_ms_total": self.http_duration_ms_total,
                "http_request_count": self.http_request_count,
            }

    @property
    def avg_duration_ms(self) -> float:
        """Calculate average request duration.

        Returns:
            Average duration in milliseconds.
        """
        with self._lock:
            if self.http_request_count == 0:
                return 0.0
            return self.http_duration_ms_total / self.http_request_count
