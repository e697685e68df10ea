"""Result aggregation for bulk assignment runs.

ResultAggregator owns the per-request state machine and the running
counters. Every state change goes through it, so the finished report
always satisfies succeeded + failed == total and holds exactly one
outcome per request.

Updates are serialised by a lock, which makes the aggregator safe to
share between concurrently processed sites (and threads, if a caller
ever drives it from an executor).
"""

import logging
import threading
import time
from typing import Optional

from ..domain.entities import (
    ALLOWED_TRANSITIONS,
    AssignmentMode,
    AssignmentOutcome,
    AssignmentRequest,
    BulkAssignmentReport,
    DeviceKind,
    RequestState,
    SiteSummary,
)

logger = logging.getLogger(__name__)


class ResultAggregator:
    """Tracks requests through PENDING -> ... -> SUCCEEDED | FAILED.

    Usage:
        aggregator = ResultAggregator(AssignmentMode.SINGLE_TARGET)
        aggregator.start()
        aggregator.register(requests)
        aggregator.mark_resolved(requests, site_id)
        aggregator.mark_dispatched(requests)
        aggregator.mark_succeeded(requests)
        report = aggregator.build_report()
    """

    def __init__(self, mode: AssignmentMode, device_kind: DeviceKind = DeviceKind.AP):
        self.mode = mode
        self.device_kind = device_kind

        self._lock = threading.Lock()
        self._requests: dict[int, AssignmentRequest] = {}
        self._states: dict[int, RequestState] = {}
        self._site_ids: dict[int, str] = {}
        self._errors: dict[int, Exception] = {}
        self._sites: dict[str, SiteSummary] = {}

        # Running counters
        self.attempted = 0
        self.succeeded = 0
        self.failed = 0

        self._started: Optional[float] = None
        self._stopped: Optional[float] = None

    # ----------------------------------------
    # Stopwatch
    # ----------------------------------------

    def start(self) -> None:
        self._started = time.monotonic()
        self._stopped = None

    def stop(self) -> None:
        if self._started is not None and self._stopped is None:
            self._stopped = time.monotonic()

    @property
    def elapsed_seconds(self) -> float:
        if self._started is None:
            return 0.0
        end = self._stopped if self._stopped is not None else time.monotonic()
        return end - self._started

    # ----------------------------------------
    # State machine
    # ----------------------------------------

    def register(self, requests: list[AssignmentRequest]) -> None:
        """Add requests in PENDING state.

        Raises:
            ValueError: If a request index is already registered
        """
        with self._lock:
            for request in requests:
                if request.index in self._requests:
                    raise ValueError(f"Request {request.index} registered twice")
                self._requests[request.index] = request
                self._states[request.index] = RequestState.PENDING
                summary = self._sites.setdefault(request.site, SiteSummary(site=request.site))
                summary.total += 1

    def state_of(self, request: AssignmentRequest) -> RequestState:
        with self._lock:
            return self._states[request.index]

    def _transition(self, request: AssignmentRequest, target: RequestState) -> None:
        # Caller holds the lock
        current = self._states.get(request.index)
        if current is None:
            raise ValueError(f"Request {request.index} was never registered")
        if target not in ALLOWED_TRANSITIONS[current]:
            raise ValueError(
                f"Illegal transition for request {request.index}: "
                f"{current.value} -> {target.value}"
            )
        self._states[request.index] = target

    def mark_resolved(self, requests: list[AssignmentRequest], site_id: str) -> None:
        with self._lock:
            for request in requests:
                self._transition(request, RequestState.RESOLVED)
                self._site_ids[request.index] = site_id
                self._sites[request.site].site_id = site_id

    def mark_dispatched(self, requests: list[AssignmentRequest]) -> None:
        with self._lock:
            for request in requests:
                self._transition(request, RequestState.DISPATCHED)
                self.attempted += 1

    def mark_succeeded(self, requests: list[AssignmentRequest]) -> None:
        with self._lock:
            for request in requests:
                self._transition(request, RequestState.SUCCEEDED)
                self.succeeded += 1
                self._sites[request.site].succeeded += 1

    def mark_failed(
        self,
        requests: list[AssignmentRequest],
        error: Exception,
    ) -> None:
        """Fail every request with the same error.

        Args:
            requests: Requests to fail (from PENDING, RESOLVED or DISPATCHED)
            error: Error recorded against each request and its site
        """
        with self._lock:
            for request in requests:
                self._transition(request, RequestState.FAILED)
                self._errors[request.index] = error
                self.failed += 1
                summary = self._sites[request.site]
                summary.failed += 1
                if summary.error is None:
                    summary.error = error

    # ----------------------------------------
    # Report
    # ----------------------------------------

    def build_report(self, error: Optional[Exception] = None) -> BulkAssignmentReport:
        """Stop the stopwatch and produce the report.

        Raises:
            ValueError: If any request is not in a terminal state
        """
        self.stop()
        with self._lock:
            pending = [i for i, state in self._states.items() if not state.is_terminal]
            if pending:
                raise ValueError(f"Requests not finished: {sorted(pending)}")

            outcomes = [
                AssignmentOutcome(
                    request=self._requests[index],
                    state=self._states[index],
                    site_id=self._site_ids.get(index),
                    error=self._errors.get(index),
                )
                for index in sorted(self._requests)
            ]
            sites = [
                SiteSummary(
                    site=s.site,
                    site_id=s.site_id,
                    total=s.total,
                    succeeded=s.succeeded,
                    failed=s.failed,
                    error=s.error,
                )
                for s in self._sites.values()
            ]

        report = BulkAssignmentReport(
            mode=self.mode,
            device_kind=self.device_kind,
            total=len(outcomes),
            succeeded=self.succeeded,
            failed=self.failed,
            elapsed_seconds=self.elapsed_seconds,
            outcomes=outcomes,
            sites=sites,
            error=error,
        )

        logger.info(
            f"Bulk assignment finished: {report.succeeded}/{report.total} succeeded, "
            f"{report.failed} failed in {report.elapsed_seconds:.2f}s"
        )
        return report
