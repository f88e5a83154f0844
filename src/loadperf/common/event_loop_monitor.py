# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Event loop stall detection for the load driver.

All virtual users share one event loop, so a blocked loop shows up as inflated
request latency. The monitor sleeps for a known interval, measures how long the
sleep actually took and reports the overhead when it exceeds a threshold.
"""

import asyncio
import time
from collections.abc import Callable

from loadperf.common.constants import (
    MILLIS_PER_SECOND,
    NANOS_PER_MILLIS,
    NANOS_PER_SECOND,
)
from loadperf.common.environment import Environment
from loadperf.common.mixins import LoadPerfLoggerMixin


class EventLoopMonitor(LoadPerfLoggerMixin):
    """Background task that probes event loop responsiveness during a run.

    Configurable via Environment.RUNNER:
    - LOADPERF_RUNNER_EVENT_LOOP_HEALTH_ENABLED: Enable/disable monitoring (default: True)
    - LOADPERF_RUNNER_EVENT_LOOP_HEALTH_INTERVAL: Sleep interval in seconds (default: 0.25)
    - LOADPERF_RUNNER_EVENT_LOOP_HEALTH_WARN_THRESHOLD_MS: Stall threshold in ms (default: 10)
    """

    def __init__(self, run_id: str, **kwargs) -> None:
        super().__init__(**kwargs)
        self._run_id = run_id
        self._task: asyncio.Task | None = None
        self._stop_requested = False
        self._callback: Callable[[float], None] | None = None
        self.stall_count = 0
        self.max_stall_ms = 0.0

    def set_callback(self, callback: Callable[[float], None]) -> None:
        """Set the callback to be called with the overhead (ms) of every stall."""
        self._callback = callback

    def start(self) -> None:
        self._stop_requested = False
        if self._task is None:
            self._task = asyncio.create_task(self._monitor_event_loop())

    def stop(self) -> None:
        if self._stop_requested:
            return
        self._stop_requested = True
        if self._task is not None:
            self._task.cancel()
        self._task = None

    async def _monitor_event_loop(self) -> None:
        if not Environment.RUNNER.EVENT_LOOP_HEALTH_ENABLED:
            return

        interval_sec = Environment.RUNNER.EVENT_LOOP_HEALTH_INTERVAL
        threshold_ns = (
            Environment.RUNNER.EVENT_LOOP_HEALTH_WARN_THRESHOLD_MS * NANOS_PER_MILLIS
        )
        expected_ns = round(interval_sec * NANOS_PER_SECOND)

        while not self._stop_requested:
            start_perf_ns = time.perf_counter_ns()
            await asyncio.sleep(interval_sec)
            elapsed_ns = time.perf_counter_ns() - start_perf_ns
            delta_ns = elapsed_ns - expected_ns
            if self.is_trace_enabled:
                self.trace(
                    f"Event loop probe: expected {interval_sec * MILLIS_PER_SECOND:.1f}ms, actual {elapsed_ns / NANOS_PER_MILLIS:.2f}ms"
                )
            if delta_ns > threshold_ns:
                delta_ms = delta_ns / NANOS_PER_MILLIS
                self.stall_count += 1
                self.max_stall_ms = max(self.max_stall_ms, delta_ms)
                self.warning(
                    f"Event loop for run {self._run_id} stalled for {delta_ms:,.2f}ms; measured latencies may be inflated"
                )
                if self._callback is not None:
                    self._callback(delta_ms)
