# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from collections.abc import Iterable

from loadperf.common.config import Threshold
from loadperf.common.enums import AggregationType, MetricKind
from loadperf.metrics.models import (
    AggregatedMetrics,
    CounterStat,
    RateStat,
    ThresholdResult,
    TrendStat,
    Verdict,
)


def observe(threshold: Threshold, metrics: AggregatedMetrics) -> float | None:
    """The value of ``threshold``'s aggregation on ``metrics``.

    Returns ``None`` when the metric has no samples to aggregate.
    """
    stat = getattr(metrics, str(threshold.metric))
    match threshold.metric.kind:
        case MetricKind.TREND:
            return _observe_trend(threshold, stat)
        case MetricKind.RATE:
            return _observe_rate(stat)
        case MetricKind.COUNTER:
            return _observe_counter(threshold, stat, metrics.elapsed_s)


def _observe_trend(threshold: Threshold, stat: TrendStat) -> float | None:
    if stat.count == 0:
        return None
    match threshold.aggregation:
        case AggregationType.AVG:
            return stat.avg
        case AggregationType.MIN:
            return stat.min
        case AggregationType.MED:
            return stat.med
        case AggregationType.MAX:
            return stat.max
        case AggregationType.PERCENTILE:
            return stat.percentile(threshold.percentile)
    return None


def _observe_rate(stat: RateStat) -> float | None:
    return stat.rate


def _observe_counter(
    threshold: Threshold, stat: CounterStat, elapsed_s: float
) -> float | None:
    if threshold.aggregation == AggregationType.COUNT:
        return float(stat.count)
    # A per-second rate needs measured time; a zero count is still a valid rate.
    return stat.rate if elapsed_s > 0 else None


class ThresholdEvaluator:
    """Evaluates a run's thresholds against its aggregated metrics.

    Pure: the same metrics always produce an equal :class:`Verdict`. A breach
    is reported in the verdict, never raised.
    """

    def __init__(self, thresholds: Iterable[Threshold]) -> None:
        self.thresholds = tuple(thresholds)

    def evaluate(self, metrics: AggregatedMetrics) -> Verdict:
        results = []
        for threshold in self.thresholds:
            observed = observe(threshold, metrics)
            passed = observed is not None and threshold.operator.compare(
                observed, threshold.value
            )
            results.append(
                ThresholdResult(
                    metric=str(threshold.metric),
                    expression=threshold.expression,
                    observed=observed,
                    passed=passed,
                )
            )
        return Verdict(passed=all(r.passed for r in results), results=tuple(results))
