# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from enum import Enum


class CaseInsensitiveStrEnum(str, Enum):
    """String enum that accepts values regardless of case (e.g. from CLI input)."""

    def __str__(self) -> str:
        return self.value

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            needle = value.strip().lower()
            for member in cls:
                if needle in (member.value.lower(), member.name.lower()):
                    return member
        return None


class RunState(CaseInsensitiveStrEnum):
    """Lifecycle of a single load test run."""

    PENDING = "pending"
    RAMPING = "ramping"
    DRAINING = "draining"
    COMPLETED = "completed"
    SETUP_FAILED = "setup_failed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (RunState.COMPLETED, RunState.SETUP_FAILED, RunState.ABORTED)


class RampPolicy(CaseInsensitiveStrEnum):
    """How concurrency moves from one stage level to the next."""

    LINEAR = "linear"
    """Interpolate linearly over the stage duration."""

    STEP = "step"
    """Jump to the stage target as soon as the stage starts."""


class ErrorTag(CaseInsensitiveStrEnum):
    """Why a request outcome was classified as failed."""

    TIMEOUT = "timeout"
    CONNECTION = "connection"
    CANCELLED = "cancelled"
    STATUS = "status"
    PARSE = "parse"
    CHECK = "check"


class MetricName(CaseInsensitiveStrEnum):
    """Metrics a threshold can be declared against."""

    HTTP_REQ_DURATION = "http_req_duration"
    HTTP_REQ_FAILED = "http_req_failed"
    HTTP_REQS = "http_reqs"
    ITERATIONS = "iterations"
    ERRORS = "errors"
    CHECKS = "checks"

    @property
    def kind(self) -> "MetricKind":
        return _METRIC_KINDS[self]


class MetricKind(CaseInsensitiveStrEnum):
    TREND = "trend"
    RATE = "rate"
    COUNTER = "counter"


_METRIC_KINDS = {
    MetricName.HTTP_REQ_DURATION: MetricKind.TREND,
    MetricName.HTTP_REQ_FAILED: MetricKind.RATE,
    MetricName.ERRORS: MetricKind.RATE,
    MetricName.CHECKS: MetricKind.RATE,
    MetricName.HTTP_REQS: MetricKind.COUNTER,
    MetricName.ITERATIONS: MetricKind.COUNTER,
}


class ThresholdOperator(CaseInsensitiveStrEnum):
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EQ = "=="
    NE = "!="

    def compare(self, observed: float, limit: float) -> bool:
        match self:
            case ThresholdOperator.LT:
                return observed < limit
            case ThresholdOperator.LE:
                return observed <= limit
            case ThresholdOperator.GT:
                return observed > limit
            case ThresholdOperator.GE:
                return observed >= limit
            case ThresholdOperator.EQ:
                return observed == limit
            case ThresholdOperator.NE:
                return observed != limit


class CheckName(CaseInsensitiveStrEnum):
    """Named response checks. The value is the label shown in summaries."""

    STATUS_IS_201 = "status is 201"
    RESPONSE_HAS_USER = "response has user"
    HAS_USER_DATA = "has user data"
    HAS_VALID_RESPONSE = "has valid response"
    RESPONSE_TIME = "response time"


class ProfileName(CaseInsensitiveStrEnum):
    SMOKE = "smoke"
    LOAD = "load"
    STRESS = "stress"


class AggregationType(CaseInsensitiveStrEnum):
    """Statistic a threshold expression is evaluated against."""

    AVG = "avg"
    MIN = "min"
    MED = "med"
    MAX = "max"
    PERCENTILE = "p"
    """``p(N)``: the N-th percentile, with N carried separately."""

    RATE = "rate"
    COUNT = "count"
