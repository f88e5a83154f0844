# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Data contract emitted at the end of a run."""

from datetime import datetime

from pydantic import BaseModel, Field

from loadperf.common.enums import RunState
from loadperf.metrics import AggregatedMetrics, Verdict


class RunDiagnostics(BaseModel):
    """Conditions that may have skewed the measurements of a run."""

    event_loop_stalls: int = 0
    max_event_loop_stall_ms: float = 0.0
    cancelled_in_flight: int = Field(
        0, description="Requests interrupted by hard cancellation while draining or aborting."
    )
    worker_errors: list[str] = Field(default_factory=list)


class RunReport(BaseModel):
    """Final result of one load test run.

    ``metrics`` and ``verdict`` are ``None`` only when the run never started
    (state ``setup_failed``).
    """

    run_id: str
    state: RunState
    target_url: str
    started_at: datetime
    ended_at: datetime
    scheduled_duration_s: float
    elapsed_s: float = 0.0
    drain_s: float = 0.0
    workers_started: int = 0
    workers_completed: int = 0
    metrics: AggregatedMetrics | None = None
    verdict: Verdict | None = None
    diagnostics: RunDiagnostics = Field(default_factory=RunDiagnostics)
    error: str | None = None

    @property
    def passed(self) -> bool:
        return (
            self.state == RunState.COMPLETED
            and self.verdict is not None
            and self.verdict.passed
        )

    @property
    def exit_code(self) -> int:
        """0 when every threshold held, 1 on a breach, 2 when the run failed or was aborted."""
        if self.state != RunState.COMPLETED or self.verdict is None:
            return 2
        return 0 if self.verdict.passed else 1
