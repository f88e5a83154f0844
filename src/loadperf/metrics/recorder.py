# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import threading
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass

from loadperf.common.enums import ErrorTag
from loadperf.common.exceptions import RecorderSealedError
from loadperf.common.mixins import LoadPerfLoggerMixin
from loadperf.metrics.histogram import LatencyHistogram
from loadperf.metrics.models import (
    AggregatedMetrics,
    CheckSummary,
    CounterStat,
    RateStat,
    RequestOutcome,
    TrendStat,
)


@dataclass(frozen=True, slots=True)
class LiveStats:
    """Point-in-time counters for progress reporting while a run is active."""

    requests: int
    failed_requests: int
    check_failures: int
    p95_estimate_ms: float | None


class OutcomeRecorder(LoadPerfLoggerMixin):
    """Collects every request outcome of one run.

    Appends are serialized by a lock, so it can be shared by every virtual
    user of the run. Once :meth:`seal` is called no further outcome is
    accepted, which guarantees the final aggregate sees a closed set.
    """

    def __init__(self, check_labels: Iterable[str] = (), **kwargs) -> None:
        super().__init__(**kwargs)
        self._lock = threading.Lock()
        self._sealed = False
        self._outcomes: list[RequestOutcome] = []
        self._check_labels = list(check_labels)
        self._check_passes: Counter[str] = Counter()
        self._check_fails: Counter[str] = Counter()
        self._status_counts: Counter[str] = Counter()
        self._error_counts: Counter[str] = Counter()
        self._failed_requests = 0
        self._check_failures = 0
        self._histogram = LatencyHistogram()

    @property
    def sealed(self) -> bool:
        return self._sealed

    @property
    def count(self) -> int:
        return len(self._outcomes)

    @property
    def outcomes(self) -> tuple[RequestOutcome, ...]:
        with self._lock:
            return tuple(self._outcomes)

    def record(self, outcome: RequestOutcome) -> None:
        """Append one outcome.

        Raises:
            RecorderSealedError: If the recorder was already sealed.
        """
        with self._lock:
            if self._sealed:
                raise RecorderSealedError(
                    f"Outcome for VU {outcome.vu_id} iteration {outcome.iteration} "
                    "arrived after the recorder was sealed"
                )
            self._outcomes.append(outcome)
            if outcome.error_tag != ErrorTag.CANCELLED:
                self._histogram.record(outcome.latency_ms)
            if outcome.request_failed:
                self._failed_requests += 1
            if not outcome.passed:
                self._check_failures += 1
            status = "none" if outcome.status_code is None else str(outcome.status_code)
            self._status_counts[status] += 1
            if outcome.error_tag is not None:
                self._error_counts[str(outcome.error_tag)] += 1
            for name, ok in outcome.checks.items():
                if name not in self._check_labels:
                    self._check_labels.append(name)
                (self._check_passes if ok else self._check_fails)[name] += 1

    def seal(self) -> None:
        """Close the recorder. Idempotent."""
        with self._lock:
            if not self._sealed:
                self._sealed = True
                self.debug(f"Recorder sealed with {len(self._outcomes)} outcomes")

    def live_stats(self) -> LiveStats:
        with self._lock:
            return LiveStats(
                requests=len(self._outcomes),
                failed_requests=self._failed_requests,
                check_failures=self._check_failures,
                p95_estimate_ms=self._histogram.percentile(95.0),
            )

    def aggregate(self, elapsed_s: float, vus_max: int = 0) -> AggregatedMetrics:
        """Derive the run metrics from every outcome recorded so far.

        Cancelled requests count as failed requests and failed iterations, but
        are left out of the duration trend and the iteration count since they
        never completed.
        """
        with self._lock:
            outcomes = list(self._outcomes)
            check_breakdown = [
                CheckSummary(
                    name=label,
                    passes=self._check_passes[label],
                    fails=self._check_fails[label],
                )
                for label in self._check_labels
            ]
            status_counts = dict(sorted(self._status_counts.items()))
            error_counts = dict(sorted(self._error_counts.items()))

        completed = [o for o in outcomes if o.error_tag != ErrorTag.CANCELLED]
        failed = sum(1 for o in outcomes if o.request_failed)
        errored = sum(1 for o in outcomes if not o.passed)
        check_passes = sum(c.passes for c in check_breakdown)
        check_fails = sum(c.fails for c in check_breakdown)

        def per_second(count: int) -> float:
            return count / elapsed_s if elapsed_s > 0 else 0.0

        return AggregatedMetrics(
            http_reqs=CounterStat(count=len(outcomes), rate=per_second(len(outcomes))),
            iterations=CounterStat(count=len(completed), rate=per_second(len(completed))),
            http_req_duration=TrendStat.from_samples([o.latency_ms for o in completed]),
            http_req_failed=RateStat(passes=failed, fails=len(outcomes) - failed),
            errors=RateStat(passes=errored, fails=len(outcomes) - errored),
            checks=RateStat(passes=check_passes, fails=check_fails),
            check_breakdown=check_breakdown,
            status_counts=status_counts,
            error_counts=error_counts,
            vus_max=vus_max,
            elapsed_s=elapsed_s,
        )
