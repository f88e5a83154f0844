# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Named response checks for the signup endpoint.

A check is a pure predicate over the response and the payload that was sent.
A body that is not valid JSON fails every body-shape check; it never raises.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from loadperf.common.constants import SIGNUP_SUCCESS_STATUS
from loadperf.common.enums import CheckName, ErrorTag
from loadperf.dataset import SignupPayload
from loadperf.transport import ResponseSnapshot


@dataclass(frozen=True, slots=True)
class CheckContext:
    response: ResponseSnapshot
    body: Any | None
    """Decoded JSON body, ``None`` when it could not be parsed."""
    payload: SignupPayload
    max_response_time_ms: float | None = None


@dataclass(frozen=True, slots=True)
class CheckResult:
    """Outcome of running every configured check on one response."""

    checks: dict[str, bool]
    passed: bool
    request_failed: bool
    error_tag: ErrorTag | None


def _user(body: Any) -> Any:
    return body.get("user") if isinstance(body, dict) else None


def check_status_is_201(ctx: CheckContext) -> bool:
    return ctx.response.status_code == SIGNUP_SUCCESS_STATUS


def check_response_has_user(ctx: CheckContext) -> bool:
    user = _user(ctx.body)
    return isinstance(user, dict) and user.get("email") == ctx.payload.email


def check_has_user_data(ctx: CheckContext) -> bool:
    user = _user(ctx.body)
    return isinstance(user, dict) and user.get("id") is not None


def check_has_valid_response(ctx: CheckContext) -> bool:
    if not isinstance(ctx.body, dict):
        return False
    return bool(ctx.body.get("user")) or bool(ctx.body.get("message"))


def check_response_time(ctx: CheckContext) -> bool:
    return (
        ctx.max_response_time_ms is not None
        and ctx.response.latency_ms < ctx.max_response_time_ms
    )


CHECK_REGISTRY: dict[CheckName, Callable[[CheckContext], bool]] = {
    CheckName.STATUS_IS_201: check_status_is_201,
    CheckName.RESPONSE_HAS_USER: check_response_has_user,
    CheckName.HAS_USER_DATA: check_has_user_data,
    CheckName.HAS_VALID_RESPONSE: check_has_valid_response,
    CheckName.RESPONSE_TIME: check_response_time,
}

BODY_CHECKS = frozenset(
    {CheckName.RESPONSE_HAS_USER, CheckName.HAS_USER_DATA, CheckName.HAS_VALID_RESPONSE}
)


def check_label(name: CheckName, max_response_time_ms: float | None = None) -> str:
    """Display label, e.g. ``status is 201`` or ``response time < 500ms``."""
    if name == CheckName.RESPONSE_TIME and max_response_time_ms is not None:
        return f"{name} < {max_response_time_ms:g}ms"
    return str(name)


class CheckSuite:
    """The ordered set of checks configured for a run."""

    def __init__(
        self, names: Iterable[CheckName], max_response_time_ms: float | None = None
    ) -> None:
        self.names = tuple(names)
        self.max_response_time_ms = max_response_time_ms
        self.labels = tuple(check_label(n, max_response_time_ms) for n in self.names)
        self._needs_body = any(n in BODY_CHECKS for n in self.names)

    @classmethod
    def from_config(cls, config) -> "CheckSuite":
        return cls(config.checks, config.max_response_time_ms)

    def evaluate(self, response: ResponseSnapshot, payload: SignupPayload) -> CheckResult:
        body = response.parse_json() if self._needs_body else None
        ctx = CheckContext(
            response=response,
            body=body,
            payload=payload,
            max_response_time_ms=self.max_response_time_ms,
        )
        results = {
            label: CHECK_REGISTRY[name](ctx)
            for name, label in zip(self.names, self.labels, strict=True)
        }
        request_failed = response.status_code != SIGNUP_SUCCESS_STATUS
        passed = all(results.values()) and not request_failed

        if request_failed:
            error_tag = ErrorTag.STATUS
        elif self._needs_body and body is None:
            error_tag = ErrorTag.PARSE
        elif not passed:
            error_tag = ErrorTag.CHECK
        else:
            error_tag = None

        return CheckResult(
            checks=results,
            passed=passed,
            request_failed=request_failed,
            error_tag=error_tag,
        )
