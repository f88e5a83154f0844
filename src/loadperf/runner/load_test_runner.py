# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import contextlib
import time
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

import httpx

from loadperf.checks import CheckSuite
from loadperf.common.config import RunConfig
from loadperf.common.enums import ErrorTag, RunState
from loadperf.common.environment import Environment
from loadperf.common.event_loop_monitor import EventLoopMonitor
from loadperf.common.exceptions import HealthCheckFailedError, RunStateError
from loadperf.common.mixins import LoadPerfLoggerMixin
from loadperf.metrics import OutcomeRecorder, ThresholdEvaluator, Verdict
from loadperf.runner.models import RunDiagnostics, RunReport
from loadperf.timing import StageScheduler
from loadperf.transport import TargetClient
from loadperf.workers import VirtualUser, VirtualUserPool

_ALLOWED_TRANSITIONS: dict[RunState, set[RunState]] = {
    RunState.PENDING: {RunState.RAMPING, RunState.SETUP_FAILED, RunState.ABORTED},
    RunState.RAMPING: {RunState.DRAINING},
    RunState.DRAINING: {RunState.COMPLETED, RunState.ABORTED},
}


def new_run_id() -> str:
    return f"{datetime.now(UTC):%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:6]}"


class LoadTestRunner(LoadPerfLoggerMixin):
    """Drives one load test run from health check to verdict.

    States: ``pending -> ramping -> draining -> completed``, or
    ``setup_failed`` when the health check fails (no VU is ever started) and
    ``aborted`` when :meth:`cancel` is called. The verdict is computed exactly
    once, after every VU has exited and the recorder has been sealed.
    """

    def __init__(
        self,
        config: RunConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        run_id: str | None = None,
        clock: Callable[[], float] = time.monotonic,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.config = config
        self.run_id = run_id or new_run_id()
        self._transport = transport
        self._clock = clock
        self._state = RunState.PENDING
        self._cancel_event = asyncio.Event()
        self._stage_index: int | None = None
        self._target_level = 0

        self.checks = CheckSuite.from_config(config)
        self.recorder = OutcomeRecorder(check_labels=self.checks.labels)
        self.scheduler = StageScheduler.from_config(config, clock=clock)
        self.evaluator = ThresholdEvaluator(config.thresholds)
        self.pool: VirtualUserPool | None = None
        self.diagnostics = RunDiagnostics()
        self._monitor = EventLoopMonitor(run_id=self.run_id)
        self._monitor.set_callback(self._on_event_loop_stall)
        self._verdict: Verdict | None = None
        self._report: RunReport | None = None

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def verdict(self) -> Verdict | None:
        return self._verdict

    @property
    def report(self) -> RunReport | None:
        return self._report

    def cancel(self) -> None:
        """Abort the run: stop scheduling, cancel every VU and report what was measured."""
        if self._state.is_terminal or self._cancel_event.is_set():
            return
        self.warning(f"Run {self.run_id} cancellation requested")
        self._cancel_event.set()

    def _transition(self, new_state: RunState) -> None:
        if new_state not in _ALLOWED_TRANSITIONS.get(self._state, set()):
            raise RunStateError(
                f"Invalid run state transition {self._state} -> {new_state}"
            )
        self.debug(f"Run {self.run_id}: {self._state} -> {new_state}")
        self._state = new_state

    def _on_event_loop_stall(self, delta_ms: float) -> None:
        self.diagnostics.event_loop_stalls += 1
        self.diagnostics.max_event_loop_stall_ms = max(
            self.diagnostics.max_event_loop_stall_ms, delta_ms
        )

    def _apply_level(self, stage_index: int, level: int) -> None:
        if stage_index != self._stage_index:
            self._stage_index = stage_index
            self.info(
                f"Stage {stage_index + 1}/{len(self.config.stages)}: "
                f"target {self.config.stages[stage_index].target} VUs"
            )
        self._target_level = level
        self.pool.scale_to(level)

    async def run(self) -> RunReport:
        """Execute the run and return its report.

        Raises:
            RunStateError: If this runner was already used.
        """
        if self._state != RunState.PENDING:
            raise RunStateError(f"Run {self.run_id} was already started ({self._state})")

        started_at = datetime.now(UTC)
        self.info(
            f"Starting run {self.run_id} against {self.config.signup_url} "
            f"({len(self.config.stages)} stages, {self.scheduler.total_duration:g}s, "
            f"up to {self.config.max_target} VUs)"
        )

        async with TargetClient(
            self.config.base_url,
            request_timeout=self.config.request_timeout,
            transport=self._transport,
        ) as client:
            try:
                await client.health_check(self.config.health_path)
            except HealthCheckFailedError as e:
                self.error(str(e))
                self._transition(RunState.SETUP_FAILED)
                return self._finish(started_at, error=str(e))

            if self._cancel_event.is_set():
                self._transition(RunState.ABORTED)
                return self._finish(started_at, error="Cancelled before start")

            self.pool = VirtualUserPool(
                factory=lambda vu_id: VirtualUser(
                    vu_id,
                    config=self.config,
                    client=client,
                    checks=self.checks,
                    recorder=self.recorder,
                )
            )
            return await self._execute(started_at)

    async def _execute(self, started_at: datetime) -> RunReport:
        self._transition(RunState.RAMPING)
        self._monitor.start()
        progress_task = asyncio.create_task(self._log_progress())
        run_start = self._clock()
        try:
            aborted = await self._run_stages()

            self._transition(RunState.DRAINING)
            drain_start = self._clock()
            cancelled_before = self._cancelled_count()
            if aborted:
                await self.pool.cancel_all()
            else:
                aborted = await self._drain()
            drain_s = self._clock() - drain_start
            self.diagnostics.cancelled_in_flight = (
                self._cancelled_count() - cancelled_before
            )
        finally:
            progress_task.cancel()
            self._monitor.stop()
            if self.pool.running_count:
                await self.pool.cancel_all()

        elapsed_s = self._clock() - run_start
        self.diagnostics.worker_errors = [repr(e) for e in self.pool.worker_errors]
        self.recorder.seal()
        metrics = self.recorder.aggregate(elapsed_s, vus_max=self.pool.max_active)
        self._verdict = self.evaluator.evaluate(metrics)
        self._transition(RunState.ABORTED if aborted else RunState.COMPLETED)
        return self._finish(
            started_at,
            elapsed_s=elapsed_s,
            drain_s=drain_s,
            metrics=metrics,
            error="Run aborted" if aborted else None,
        )

    async def _run_stages(self) -> bool:
        """Run the schedule to completion. Returns True if the run was cancelled."""
        scheduler_task = asyncio.create_task(self.scheduler.run(self._apply_level))
        cancel_task = asyncio.create_task(self._cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {scheduler_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (scheduler_task, cancel_task):
                if not task.done():
                    task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await cancel_task

        if scheduler_task in done:
            scheduler_task.result()
            return False
        with contextlib.suppress(asyncio.CancelledError):
            await scheduler_task
        return True

    async def _drain(self) -> bool:
        """Let in-flight iterations finish within the graceful stop.

        A cancel during the drain cuts it short. Returns True if that happened.
        """
        drain_task = asyncio.create_task(self.pool.drain(self.config.graceful_stop))
        cancel_task = asyncio.create_task(self._cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {drain_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (drain_task, cancel_task):
                if not task.done():
                    task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await cancel_task

        if drain_task in done:
            if not drain_task.result():
                self.warning(
                    f"Graceful stop of {self.config.graceful_stop:g}s expired with "
                    f"{self.pool.running_count} VUs still running"
                )
                await self.pool.cancel_all()
            return False

        self.warning(f"Run {self.run_id} cancelled while draining")
        with contextlib.suppress(asyncio.CancelledError):
            await drain_task
        await self.pool.cancel_all()
        return True

    def _cancelled_count(self) -> int:
        return sum(
            1 for o in self.recorder.outcomes if o.error_tag == ErrorTag.CANCELLED
        )

    async def _log_progress(self) -> None:
        interval = Environment.RUNNER.PROGRESS_INTERVAL
        total = self.scheduler.total_duration
        while True:
            await asyncio.sleep(interval)
            stats = self.recorder.live_stats()
            p95 = (
                f"{stats.p95_estimate_ms:,.1f}ms"
                if stats.p95_estimate_ms is not None
                else "n/a"
            )
            self.info(
                f"[{self.scheduler.elapsed:,.1f}s/{total:g}s] {self._state} | "
                f"VUs {self.pool.active_count}/{self._target_level} | "
                f"requests {stats.requests:,} | failed {stats.failed_requests:,} | "
                f"check failures {stats.check_failures:,} | p95~{p95}"
            )

    def _finish(self, started_at: datetime, **fields) -> RunReport:
        pool = self.pool
        self._report = RunReport(
            run_id=self.run_id,
            state=self._state,
            target_url=self.config.signup_url,
            started_at=started_at,
            ended_at=datetime.now(UTC),
            scheduled_duration_s=self.scheduler.total_duration,
            workers_started=pool.started_count if pool else 0,
            workers_completed=pool.completed_count if pool else 0,
            verdict=self._verdict,
            diagnostics=self.diagnostics,
            **fields,
        )
        self.info(f"Run {self.run_id} finished: {self._state}")
        return self._report
