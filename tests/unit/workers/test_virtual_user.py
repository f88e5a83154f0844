# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio

import httpx
import pytest

from loadperf.checks import CheckSuite
from loadperf.common.enums import ErrorTag
from loadperf.metrics import OutcomeRecorder
from loadperf.transport import TargetClient
from loadperf.workers import VirtualUser


def make_vu(config, client, vu_id: int = 1) -> tuple[VirtualUser, OutcomeRecorder]:
    checks = CheckSuite.from_config(config)
    recorder = OutcomeRecorder(check_labels=checks.labels)
    return VirtualUser(vu_id, config, client, checks, recorder), recorder


def make_client(config, service) -> TargetClient:
    return TargetClient(config.base_url, config.request_timeout, transport=service.transport)


class TestRunIteration:
    @pytest.mark.asyncio
    async def test_successful_signup(self, run_config_factory, signup_service):
        config = run_config_factory()
        async with make_client(config, signup_service) as client:
            vu, recorder = make_vu(config, client, vu_id=4)
            outcome = await vu.run_iteration()

        assert outcome.passed
        assert not outcome.request_failed
        assert outcome.status_code == 201
        assert outcome.error_tag is None
        assert (outcome.vu_id, outcome.iteration) == (4, 1)
        assert outcome.checks == {
            "status is 201": True,
            "response has user": True,
            "has user data": True,
        }
        assert recorder.outcomes == (outcome,)
        assert signup_service.emails[0].split("@")[0].endswith(".4.1")

    @pytest.mark.asyncio
    async def test_error_status(self, run_config_factory, signup_service_factory):
        config = run_config_factory()
        service = signup_service_factory(signup_status=500)
        async with make_client(config, service) as client:
            vu, _ = make_vu(config, client)
            outcome = await vu.run_iteration()

        assert outcome.request_failed
        assert not outcome.passed
        assert outcome.error_tag == ErrorTag.STATUS
        assert outcome.status_code == 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc,tag",
        [(httpx.ConnectError("refused"), ErrorTag.CONNECTION), (httpx.ReadTimeout("slow"), ErrorTag.TIMEOUT)],
    )  # fmt: skip
    async def test_transport_error_is_recorded(
        self, run_config_factory, signup_service_factory, exc, tag
    ):
        config = run_config_factory()
        service = signup_service_factory(fail_with=exc)
        async with make_client(config, service) as client:
            vu, recorder = make_vu(config, client)
            outcome = await vu.run_iteration()

        assert outcome.error_tag == tag
        assert outcome.status_code is None
        assert outcome.request_failed
        assert set(outcome.checks.values()) == {False}
        assert recorder.count == 1

    @pytest.mark.asyncio
    async def test_transport_error_fails_without_checks(
        self, run_config_factory, signup_service_factory
    ):
        config = run_config_factory(checks=[])
        service = signup_service_factory(fail_with=httpx.ConnectError("refused"))
        async with make_client(config, service) as client:
            vu, recorder = make_vu(config, client)
            outcome = await vu.run_iteration()

        assert outcome.checks == {}
        assert outcome.error_tag == ErrorTag.CONNECTION
        assert not outcome.passed
        assert recorder.aggregate(1.0).errors.rate == 1.0

    @pytest.mark.asyncio
    async def test_created_user_without_id_fails_default_checks(
        self, run_config_factory, signup_service_factory
    ):
        config = run_config_factory()
        service = signup_service_factory(omit_user_id=True)
        async with make_client(config, service) as client:
            vu, _ = make_vu(config, client)
            outcome = await vu.run_iteration()

        assert outcome.status_code == 201
        assert not outcome.request_failed
        assert outcome.checks["has user data"] is False
        assert not outcome.passed
        assert outcome.error_tag == ErrorTag.CHECK

    @pytest.mark.asyncio
    async def test_cancel_records_in_flight_request(
        self, run_config_factory, signup_service_factory
    ):
        config = run_config_factory()
        service = signup_service_factory(delay=5.0)
        async with make_client(config, service) as client:
            vu, recorder = make_vu(config, client)
            task = asyncio.create_task(vu.run())
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        (outcome,) = recorder.outcomes
        assert outcome.error_tag == ErrorTag.CANCELLED
        assert outcome.request_failed
        assert not outcome.passed


class TestRunLoop:
    @pytest.mark.asyncio
    async def test_iterations_strictly_increase_until_stopped(
        self, run_config_factory, signup_service
    ):
        config = run_config_factory(think_time=0)
        async with make_client(config, signup_service) as client:
            vu, recorder = make_vu(config, client)
            task = asyncio.create_task(vu.run())
            await asyncio.sleep(0.05)
            vu.request_stop()
            await asyncio.wait_for(task, 1.0)

        iterations = [o.iteration for o in recorder.outcomes]
        assert len(iterations) > 1
        assert iterations == list(range(1, len(iterations) + 1))
        assert vu.iterations == len(iterations)
        assert all(o.passed for o in recorder.outcomes)
        assert len(set(signup_service.emails)) == len(iterations)

    @pytest.mark.asyncio
    async def test_stop_cuts_think_time_short(self, run_config_factory, signup_service):
        config = run_config_factory(think_time=30)
        async with make_client(config, signup_service) as client:
            vu, recorder = make_vu(config, client)
            task = asyncio.create_task(vu.run())
            await asyncio.sleep(0.05)
            assert recorder.count == 1
            vu.request_stop()
            await asyncio.wait_for(task, 1.0)

        assert vu.stop_requested
        assert recorder.count == 1

    @pytest.mark.asyncio
    async def test_stop_lets_in_flight_request_finish(
        self, run_config_factory, signup_service_factory
    ):
        config = run_config_factory()
        service = signup_service_factory(delay=0.1)
        async with make_client(config, service) as client:
            vu, recorder = make_vu(config, client)
            task = asyncio.create_task(vu.run())
            await asyncio.sleep(0.02)
            vu.request_stop()
            await asyncio.wait_for(task, 1.0)

        (outcome,) = recorder.outcomes
        assert outcome.passed
        assert outcome.latency_ms >= 90
