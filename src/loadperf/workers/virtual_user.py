# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import contextlib
import time
from collections.abc import Callable

import httpx

from loadperf.checks import CheckSuite
from loadperf.common.config import RunConfig
from loadperf.common.constants import NANOS_PER_MILLIS
from loadperf.common.enums import ErrorTag
from loadperf.common.mixins import LoadPerfLoggerMixin
from loadperf.dataset import SignupPayload, SignupPayloadGenerator
from loadperf.metrics import OutcomeRecorder, RequestOutcome
from loadperf.transport import TargetClient, classify_transport_error


class VirtualUser(LoadPerfLoggerMixin):
    """One simulated user: sign up, check the response, think, repeat.

    The loop runs until :meth:`request_stop` is called. A stop request lets the
    in-flight request finish and be recorded, but cuts the think time short.
    Cancelling the task instead interrupts the in-flight request, which is
    still recorded as a failed outcome tagged ``cancelled``.
    """

    def __init__(
        self,
        vu_id: int,
        config: RunConfig,
        client: TargetClient,
        checks: CheckSuite,
        recorder: OutcomeRecorder,
        time_ns: Callable[[], int] = time.time_ns,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.vu_id = vu_id
        self.config = config
        self._client = client
        self._checks = checks
        self._recorder = recorder
        self._time_ns = time_ns
        self._generator = SignupPayloadGenerator(
            config.payload, vu_id, seed=config.random_seed, time_ns=time_ns
        )
        self._stop_event = asyncio.Event()
        self.iterations = 0

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    def request_stop(self) -> None:
        self._stop_event.set()

    async def run(self) -> None:
        while not self.stop_requested:
            await self.run_iteration()
            if self.stop_requested:
                break
            await self._think()

    async def _think(self) -> None:
        if self.config.think_time <= 0:
            # Still yield, so a zero think time cannot starve the event loop.
            await asyncio.sleep(0)
            return
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(self._stop_event.wait(), self.config.think_time)

    async def run_iteration(self) -> RequestOutcome:
        """Send one signup request and record its classified outcome."""
        self.iterations += 1
        iteration = self.iterations
        payload = self._generator.next_payload()
        timestamp_ns = self._time_ns()
        start_ns = time.perf_counter_ns()

        try:
            response = await self._client.post_signup(self.config.signup_path, payload)
        except asyncio.CancelledError:
            self._record_failure(
                payload, iteration, timestamp_ns, start_ns, ErrorTag.CANCELLED
            )
            raise
        except httpx.HTTPError as e:
            tag = classify_transport_error(e)
            if self.is_debug_enabled:
                self.debug(
                    f"VU {self.vu_id} iteration {iteration}: {tag} error: {e!r}"
                )
            return self._record_failure(payload, iteration, timestamp_ns, start_ns, tag)

        result = self._checks.evaluate(response, payload)
        outcome = RequestOutcome(
            vu_id=self.vu_id,
            iteration=iteration,
            timestamp_ns=timestamp_ns,
            latency_ms=response.latency_ms,
            status_code=response.status_code,
            passed=result.passed,
            request_failed=result.request_failed,
            error_tag=result.error_tag,
            checks=result.checks,
        )
        if not result.passed and self.is_debug_enabled:
            self.debug(
                f"Failed request: {response.status_code} - {response.body_preview()}"
            )
        self._recorder.record(outcome)
        return outcome

    def _record_failure(
        self,
        payload: SignupPayload,
        iteration: int,
        timestamp_ns: int,
        start_ns: int,
        error_tag: ErrorTag,
    ) -> RequestOutcome:
        checks = dict.fromkeys(self._checks.labels, False)
        outcome = RequestOutcome(
            vu_id=self.vu_id,
            iteration=iteration,
            timestamp_ns=timestamp_ns,
            latency_ms=(time.perf_counter_ns() - start_ns) / NANOS_PER_MILLIS,
            status_code=None,
            passed=False,
            request_failed=True,
            error_tag=error_tag,
            checks=checks,
        )
        self._recorder.record(outcome)
        return outcome
