# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Shared fixtures: fast runner settings and an in-process fake signup service."""

import asyncio
import re
from datetime import UTC, datetime

import httpx
import orjson
import pytest

from loadperf.common.config import RunConfig
from loadperf.common.environment import Environment

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")


class FakeSignupService:
    """Mimics the signup service behind an :class:`httpx.MockTransport`.

    ``GET /`` answers ``health_status``. ``POST /signup`` validates the body,
    answers 409 for a duplicate email and otherwise ``signup_status`` after
    ``delay`` seconds. ``fail_with`` makes every signup raise a transport error.
    ``omit_user_id`` leaves ``id`` out of the created user.
    """

    def __init__(
        self,
        signup_status: int = 201,
        health_status: int = 200,
        delay: float = 0.0,
        raw_body: bytes | None = None,
        fail_with: Exception | None = None,
        omit_user_id: bool = False,
    ) -> None:
        self.signup_status = signup_status
        self.health_status = health_status
        self.delay = delay
        self.raw_body = raw_body
        self.fail_with = fail_with
        self.omit_user_id = omit_user_id
        self.health_checks = 0
        self.emails: list[str] = []
        self.payloads: list[dict] = []
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    async def handle(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET" and request.url.path == "/":
            self.health_checks += 1
            return httpx.Response(self.health_status, json={"status": "ok"})
        if request.method != "POST" or request.url.path != "/signup":
            return httpx.Response(404, json={"error": "not found"})

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            payload = orjson.loads(request.content)
            self.payloads.append(payload)
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail_with is not None:
                raise self.fail_with
            return self._signup_response(payload)
        finally:
            self.in_flight -= 1

    def _signup_response(self, payload: dict) -> httpx.Response:
        email = payload.get("email", "")
        if not _EMAIL_RE.match(email):
            return httpx.Response(400, json={"error": "invalid email format"})
        if email in self.emails:
            return httpx.Response(409, json={"error": "email already exists"})
        self.emails.append(email)
        if self.raw_body is not None:
            return httpx.Response(self.signup_status, content=self.raw_body)
        if self.signup_status != 201:
            return httpx.Response(self.signup_status, json={"error": "failed to create user"})
        now = datetime.now(UTC).isoformat()
        user = {
            "id": len(self.emails),
            "email": email,
            "first_name": payload.get("first_name"),
            "last_name": payload.get("last_name"),
            "created_at": now,
            "updated_at": now,
        }
        if self.omit_user_id:
            del user["id"]
        return httpx.Response(
            201, json={"message": "user created successfully", "user": user}
        )


@pytest.fixture(autouse=True)
def fast_runner_env(monkeypatch) -> None:
    """Tight scheduler ticks, frequent progress logs, no event loop probe."""
    monkeypatch.setattr(Environment.RUNNER, "SCHEDULER_TICK_INTERVAL", 0.01)
    monkeypatch.setattr(Environment.RUNNER, "PROGRESS_INTERVAL", 0.05)
    monkeypatch.setattr(Environment.RUNNER, "EVENT_LOOP_HEALTH_ENABLED", False)


@pytest.fixture
def signup_service() -> FakeSignupService:
    return FakeSignupService()


@pytest.fixture
def signup_service_factory():
    """Build a FakeSignupService with non-default behavior."""
    return FakeSignupService


@pytest.fixture
def run_config_factory():
    """Build a small, fast RunConfig. Keyword arguments override the defaults."""

    def _factory(**overrides) -> RunConfig:
        settings = {
            "base_url": "http://signup.test",
            "stages": [{"duration": 0.3, "target": 3}],
            "start_vus": 3,
            "think_time": 0.01,
            "request_timeout": 2.0,
            "graceful_stop": 1.0,
            "random_seed": 42,
        }
        settings.update(overrides)
        return RunConfig.model_validate(settings)

    return _factory
