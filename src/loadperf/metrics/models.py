# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Result data: per-request outcomes, aggregated metrics and the verdict."""

from dataclasses import dataclass, field

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, computed_field

from loadperf.common.constants import REPORTED_PERCENTILES
from loadperf.common.enums import ErrorTag


def percentile_label(percentile: float) -> str:
    return f"p({percentile:g})"


@dataclass(frozen=True, slots=True)
class RequestOutcome:
    """Classified result of one signup request. Immutable once recorded."""

    vu_id: int
    iteration: int
    timestamp_ns: int
    """Wall-clock time the request was sent."""
    latency_ms: float
    status_code: int | None
    """``None`` when no response was received."""
    passed: bool
    """The request succeeded and every configured check passed. Drives the ``errors`` rate."""
    request_failed: bool
    """Transport failure or a non-201 status. Drives ``http_req_failed``."""
    error_tag: ErrorTag | None = None
    checks: dict[str, bool] = field(default_factory=dict)


class TrendStat(BaseModel):
    """Distribution statistics of a latency metric, in milliseconds."""

    count: int = 0
    avg: float | None = None
    min: float | None = None
    med: float | None = None
    max: float | None = None
    percentiles: dict[str, float] = Field(
        default_factory=dict,
        description="Reported percentiles keyed by label, e.g. {'p(95)': 120.4}.",
    )
    samples: list[float] = Field(default_factory=list, exclude=True, repr=False)

    @classmethod
    def from_samples(cls, samples: list[float]) -> "TrendStat":
        if not samples:
            return cls()
        arr = np.asarray(samples, dtype=np.float64)
        values = np.percentile(arr, REPORTED_PERCENTILES)
        return cls(
            count=int(arr.size),
            avg=float(arr.mean()),
            min=float(arr.min()),
            med=float(np.median(arr)),
            max=float(arr.max()),
            percentiles={
                percentile_label(p): float(v)
                for p, v in zip(REPORTED_PERCENTILES, values, strict=True)
            },
            samples=samples,
        )

    def percentile(self, percentile: float) -> float | None:
        """Exact percentile (linear interpolation) of the samples, ``None`` when empty."""
        label = percentile_label(percentile)
        if label in self.percentiles:
            return self.percentiles[label]
        if not self.samples:
            return None
        return float(np.percentile(np.asarray(self.samples), percentile))


class RateStat(BaseModel):
    """Fraction of samples that were true. ``rate`` is ``None`` with no samples."""

    passes: int = Field(0, ge=0)
    fails: int = Field(0, ge=0)

    @computed_field
    @property
    def total(self) -> int:
        return self.passes + self.fails

    @computed_field
    @property
    def rate(self) -> float | None:
        return self.passes / self.total if self.total else None


class CounterStat(BaseModel):
    count: int = 0
    rate: float = Field(0.0, description="Count per second of measured elapsed time.")


class CheckSummary(BaseModel):
    name: str
    passes: int = 0
    fails: int = 0

    @computed_field
    @property
    def rate(self) -> float | None:
        total = self.passes + self.fails
        return self.passes / total if total else None


class AggregatedMetrics(BaseModel):
    """Everything measured during a run, derived from all recorded outcomes."""

    http_reqs: CounterStat = Field(default_factory=CounterStat)
    iterations: CounterStat = Field(default_factory=CounterStat)
    http_req_duration: TrendStat = Field(default_factory=TrendStat)
    http_req_failed: RateStat = Field(
        default_factory=RateStat,
        description="passes = requests that failed (transport error or non-201).",
    )
    errors: RateStat = Field(
        default_factory=RateStat,
        description="passes = iterations where at least one check failed.",
    )
    checks: RateStat = Field(
        default_factory=RateStat,
        description="passes = individual check evaluations that passed.",
    )
    check_breakdown: list[CheckSummary] = Field(default_factory=list)
    status_counts: dict[str, int] = Field(default_factory=dict)
    error_counts: dict[str, int] = Field(default_factory=dict)
    vus_max: int = 0
    elapsed_s: float = 0.0


class ThresholdResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    metric: str
    expression: str
    observed: float | None
    """``None`` when the metric had no samples, which fails the threshold."""
    passed: bool


class Verdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    passed: bool
    results: tuple[ThresholdResult, ...] = ()

    @property
    def breached(self) -> list[ThresholdResult]:
        return [r for r in self.results if not r.passed]
