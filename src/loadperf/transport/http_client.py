# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any

import httpx
import orjson

from loadperf.common.constants import HEALTH_CHECK_SUCCESS_STATUS, NANOS_PER_MILLIS
from loadperf.common.enums import ErrorTag
from loadperf.common.environment import Environment
from loadperf.common.exceptions import HealthCheckFailedError
from loadperf.common.mixins import LoadPerfLoggerMixin
from loadperf.dataset import SignupPayload

_JSON_HEADERS = {"Content-Type": "application/json"}


@dataclass(frozen=True, slots=True)
class ResponseSnapshot:
    """Immutable view of a completed HTTP response, as seen by the checks."""

    status_code: int
    body: bytes
    latency_ms: float
    headers: dict[str, str] = field(default_factory=dict)

    def parse_json(self) -> Any | None:
        """Decoded JSON body, or ``None`` when the body is empty or not JSON."""
        if not self.body:
            return None
        try:
            return orjson.loads(self.body)
        except orjson.JSONDecodeError:
            return None

    def body_preview(self, limit: int = 200) -> str:
        return self.body[:limit].decode("utf-8", errors="replace")


def classify_transport_error(exc: BaseException) -> ErrorTag:
    """Map an httpx exception to the error tag recorded on the outcome."""
    if isinstance(exc, httpx.TimeoutException):
        return ErrorTag.TIMEOUT
    return ErrorTag.CONNECTION


class TargetClient(LoadPerfLoggerMixin):
    """HTTP client for the service under test, shared by all virtual users.

    Wraps one pooled :class:`httpx.AsyncClient`. A custom ``transport`` can be
    injected, e.g. :class:`httpx.MockTransport` in tests.
    """

    def __init__(
        self,
        base_url: str,
        request_timeout: float,
        max_connections: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url
        self.request_timeout = request_timeout
        limits = httpx.Limits(
            max_connections=max_connections or Environment.HTTP.MAX_CONNECTIONS,
            max_keepalive_connections=max_connections
            or Environment.HTTP.MAX_CONNECTIONS,
        )
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=httpx.Timeout(request_timeout),
            limits=limits,
            transport=transport,
        )

    async def __aenter__(self) -> "TargetClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def health_check(self, path: str = "/") -> None:
        """Verify the service answers ``GET path`` with 200.

        Raises:
            HealthCheckFailedError: On any transport error or other status.
        """
        url = f"{self.base_url}{path}"
        try:
            response = await self._client.get(
                path, timeout=Environment.HTTP.HEALTH_CHECK_TIMEOUT
            )
        except httpx.HTTPError as e:
            raise HealthCheckFailedError(
                url, reason=str(e) or e.__class__.__name__
            ) from e
        if response.status_code != HEALTH_CHECK_SUCCESS_STATUS:
            raise HealthCheckFailedError(url, status_code=response.status_code)
        self.info(f"Server is reachable at {url}")

    async def post_signup(self, path: str, payload: SignupPayload) -> ResponseSnapshot:
        """POST one signup payload and capture the response.

        ``request_timeout`` bounds the whole exchange, not only each phase;
        exceeding it raises :class:`httpx.TimeoutException`. Transport failures
        propagate as :class:`httpx.HTTPError`; use
        :func:`classify_transport_error` to tag them.
        """
        start_ns = time.perf_counter_ns()
        try:
            async with asyncio.timeout(self.request_timeout):
                response = await self._client.post(
                    path, content=payload.to_json(), headers=_JSON_HEADERS
                )
        except TimeoutError as e:
            raise httpx.TimeoutException(
                f"Request exceeded {self.request_timeout:g}s"
            ) from e
        latency_ms = (time.perf_counter_ns() - start_ns) / NANOS_PER_MILLIS
        return ResponseSnapshot(
            status_code=response.status_code,
            body=response.content,
            latency_ms=latency_ms,
            headers=dict(response.headers),
        )
