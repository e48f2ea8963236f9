import logging
import threading
import time
from typing import Optional

from prometheus_client import Histogram, Counter, start_http_server

logger = logging.getLogger(__name__)


_server_started = False
_server_lock = threading.Lock()


def start_metrics_server(port: Optional[int]) -> None:
    global _server_started
    if port is None or _server_started:
        return
    with _server_lock:
        if _server_started:
            return
        try:
            start_http_server(port)
        except OSError as e:
            # best-effort; a busy port must not block the buy
            logger.warning(f"Metrics server not started on port {port}: {e}")
        _server_started = True


FETCH_MS = Histogram(
    "antibot_fetch_latency_ms",
    "Latency of the antibot transaction request (ms)",
    buckets=(50, 100, 200, 300, 500, 800, 1200, 2000, 5000, 10000),
)

SIGN_MS = Histogram(
    "antibot_sign_latency_ms",
    "Latency to decode and sign the transaction (ms)",
    buckets=(0.1, 0.5, 1, 2, 5, 10, 20, 50),
)

SUBMIT_MS = Histogram(
    "antibot_submit_latency_ms",
    "Latency of the sendTransaction RPC call (ms)",
    buckets=(50, 100, 200, 300, 500, 800, 1200, 2000, 5000, 10000),
)

RUNS_STARTED = Counter("antibot_runs_started_total", "Buy pipeline runs started")
RUNS_SUBMITTED = Counter("antibot_runs_submitted_total", "Transactions accepted by the RPC node")
RUNS_FAILED = Counter("antibot_runs_failed_total", "Buy pipeline runs that failed", ["stage"])
SLOTS_ALREADY_SIGNED = Counter(
    "antibot_slots_already_signed_total",
    "Runs where our signature slot was already filled",
)


class LatencyTracker:
    """High-resolution latency tracker for a single buy run."""

    def __init__(self) -> None:
        self.started_ts = self._now()
        self.fetch_started_ts: Optional[float] = None
        self.fetched_ts: Optional[float] = None
        self.signed_ts: Optional[float] = None
        self.submitted_ts: Optional[float] = None

    @staticmethod
    def _now() -> float:
        return time.perf_counter()

    def mark_fetch_started(self) -> None:
        self.fetch_started_ts = self._now()

    def mark_fetched(self) -> None:
        self.fetched_ts = self._now()
        if self.fetch_started_ts is not None:
            FETCH_MS.observe((self.fetched_ts - self.fetch_started_ts) * 1000.0)

    def mark_signed(self) -> None:
        self.signed_ts = self._now()
        if self.fetched_ts is not None:
            SIGN_MS.observe((self.signed_ts - self.fetched_ts) * 1000.0)

    def mark_submitted(self) -> None:
        self.submitted_ts = self._now()
        if self.signed_ts is not None:
            SUBMIT_MS.observe((self.submitted_ts - self.signed_ts) * 1000.0)

    def total_ms(self) -> float:
        return (self._now() - self.started_ts) * 1000.0
