# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import re
from datetime import UTC, datetime

import pytest

from loadperf.common.enums import ErrorTag, RunState
from loadperf.common.exceptions import RunStateError
from loadperf.metrics import AggregatedMetrics, ThresholdResult, Verdict
from loadperf.runner import LoadTestRunner, RunReport, new_run_id

P95_UNDER_1S = {"http_req_duration": ["p(95)<1000"], "http_req_failed": ["rate<0.1"]}


class TestRunLifecycle:
    @pytest.mark.asyncio
    async def test_completed_run(self, run_config_factory, signup_service):
        config = run_config_factory(thresholds=P95_UNDER_1S)
        runner = LoadTestRunner(config, transport=signup_service.transport, run_id="r1")
        assert runner.state == RunState.PENDING

        report = await runner.run()

        assert report is runner.report
        assert report.run_id == "r1"
        assert report.state == RunState.COMPLETED == runner.state
        assert report.target_url == "http://signup.test/signup"
        assert report.scheduled_duration_s == pytest.approx(0.3)
        assert report.elapsed_s >= 0.3
        assert report.started_at <= report.ended_at
        assert report.workers_started == report.workers_completed == 3
        assert report.verdict is runner.verdict
        assert report.passed and report.exit_code == 0
        assert report.error is None
        assert report.metrics.http_reqs.count == len(signup_service.emails) > 0
        assert report.metrics.vus_max == 3
        assert runner.recorder.sealed
        assert signup_service.health_checks == 1

    @pytest.mark.asyncio
    async def test_runner_is_single_use(self, run_config_factory, signup_service):
        runner = LoadTestRunner(
            run_config_factory(stages=["0.05s:1"], start_vus=1),
            transport=signup_service.transport,
        )
        await runner.run()
        with pytest.raises(RunStateError, match="already started"):
            await runner.run()

    def test_invalid_transition_rejected(self, run_config_factory):
        runner = LoadTestRunner(run_config_factory())
        with pytest.raises(RunStateError, match="pending -> completed"):
            runner._transition(RunState.COMPLETED)


class TestSetupFailure:
    @pytest.mark.asyncio
    async def test_unhealthy_target_starts_no_workers(
        self, run_config_factory, signup_service_factory
    ):
        service = signup_service_factory(health_status=503)
        runner = LoadTestRunner(
            run_config_factory(thresholds=P95_UNDER_1S), transport=service.transport
        )

        report = await runner.run()

        assert report.state == RunState.SETUP_FAILED
        assert report.metrics is None
        assert report.verdict is None
        assert report.workers_started == 0
        assert report.exit_code == 2
        assert "status 503" in report.error
        assert service.payloads == []
        assert runner.recorder.count == 0


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_before_start(self, run_config_factory, signup_service):
        runner = LoadTestRunner(run_config_factory(), transport=signup_service.transport)
        runner.cancel()

        report = await runner.run()

        assert report.state == RunState.ABORTED
        assert report.metrics is None
        assert report.exit_code == 2
        assert signup_service.payloads == []

    @pytest.mark.asyncio
    async def test_cancel_mid_run_interrupts_in_flight_requests(
        self, run_config_factory, signup_service_factory
    ):
        service = signup_service_factory(delay=5.0)
        config = run_config_factory(stages=["10s:2"], start_vus=2, thresholds=P95_UNDER_1S)
        runner = LoadTestRunner(config, transport=service.transport)
        asyncio.get_running_loop().call_later(0.1, runner.cancel)

        report = await asyncio.wait_for(runner.run(), 3.0)

        assert report.state == RunState.ABORTED
        assert report.error == "Run aborted"
        assert report.exit_code == 2
        assert report.verdict is not None
        assert report.diagnostics.cancelled_in_flight == 2
        assert report.metrics.error_counts == {"cancelled": 2}
        assert report.workers_completed == report.workers_started == 2

    @pytest.mark.asyncio
    async def test_cancel_while_draining_cuts_graceful_stop_short(
        self, run_config_factory, signup_service_factory
    ):
        service = signup_service_factory(delay=3.0)
        config = run_config_factory(stages=["0.1s:2"], start_vus=2, graceful_stop=3.0)
        runner = LoadTestRunner(config, transport=service.transport)
        run_task = asyncio.create_task(runner.run())

        async def wait_for_draining() -> None:
            while runner.state != RunState.DRAINING:
                await asyncio.sleep(0.01)

        await asyncio.wait_for(wait_for_draining(), 2.0)
        runner.cancel()
        report = await asyncio.wait_for(run_task, 1.0)

        assert report.state == RunState.ABORTED
        assert report.error == "Run aborted"
        assert report.exit_code == 2
        assert report.diagnostics.cancelled_in_flight == 2
        assert report.drain_s < 1.0
        assert report.workers_completed == report.workers_started == 2

    @pytest.mark.asyncio
    async def test_cancel_after_finish_is_ignored(self, run_config_factory, signup_service):
        runner = LoadTestRunner(
            run_config_factory(stages=["0.05s:1"], start_vus=1),
            transport=signup_service.transport,
        )
        await runner.run()
        runner.cancel()
        assert runner.state == RunState.COMPLETED


class TestDrain:
    @pytest.mark.asyncio
    async def test_graceful_stop_expiry_cancels_stragglers(
        self, run_config_factory, signup_service_factory
    ):
        service = signup_service_factory(delay=2.0)
        config = run_config_factory(
            stages=["0.1s:2"],
            start_vus=2,
            graceful_stop=0.05,
            thresholds={"http_req_duration": ["p(95)<1000"]},
        )
        runner = LoadTestRunner(config, transport=service.transport)

        report = await asyncio.wait_for(runner.run(), 3.0)

        assert report.state == RunState.COMPLETED
        assert report.diagnostics.cancelled_in_flight == 2
        assert {o.error_tag for o in runner.recorder.outcomes} == {ErrorTag.CANCELLED}
        # Cancelled requests never completed, so the duration trend has no data.
        assert report.metrics.http_req_duration.count == 0
        assert report.verdict.results[0].observed is None
        assert report.exit_code == 1

    @pytest.mark.asyncio
    async def test_ramp_down_stops_workers(self, run_config_factory, signup_service):
        config = run_config_factory(
            stages=["0.15s:3", "0.15s:1"], start_vus=3, ramp_policy="step"
        )
        runner = LoadTestRunner(config, transport=signup_service.transport)

        report = await runner.run()

        assert report.metrics.vus_max == 3
        assert report.workers_started == 3
        last_seen = {}
        for outcome in runner.recorder.outcomes:
            last_seen[outcome.vu_id] = outcome.timestamp_ns
        assert max(last_seen, key=last_seen.get) == 1


def test_event_loop_stalls_are_counted(run_config_factory):
    runner = LoadTestRunner(run_config_factory())
    runner._on_event_loop_stall(25.0)
    runner._on_event_loop_stall(12.5)
    assert runner.diagnostics.event_loop_stalls == 2
    assert runner.diagnostics.max_event_loop_stall_ms == 25.0


def test_new_run_id_format():
    assert re.fullmatch(r"\d{8}-\d{6}-[0-9a-f]{6}", new_run_id())
    assert new_run_id() != new_run_id()


def _report(state: RunState, verdict: Verdict | None) -> RunReport:
    now = datetime.now(UTC)
    return RunReport(
        run_id="r",
        state=state,
        target_url="http://t/signup",
        started_at=now,
        ended_at=now,
        scheduled_duration_s=1.0,
        metrics=AggregatedMetrics() if verdict else None,
        verdict=verdict,
    )


_BREACH = ThresholdResult(metric="errors", expression="rate<0.1", observed=0.5, passed=False)


@pytest.mark.parametrize(
    "state,verdict,exit_code",
    [
        (RunState.COMPLETED, Verdict(passed=True), 0),
        (RunState.COMPLETED, Verdict(passed=False, results=(_BREACH,)), 1),
        (RunState.ABORTED, Verdict(passed=True), 2),
        (RunState.SETUP_FAILED, None, 2),
    ],
)  # fmt: skip
def test_exit_codes(state, verdict, exit_code):
    report = _report(state, verdict)
    assert report.exit_code == exit_code
    assert report.passed is (exit_code == 0)
