# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from loadperf.metrics.histogram import LatencyHistogram
from loadperf.metrics.models import (
    AggregatedMetrics,
    CheckSummary,
    CounterStat,
    RateStat,
    RequestOutcome,
    ThresholdResult,
    TrendStat,
    Verdict,
)
from loadperf.metrics.recorder import LiveStats, OutcomeRecorder
from loadperf.metrics.thresholds import ThresholdEvaluator, observe

__all__ = [
    "AggregatedMetrics",
    "CheckSummary",
    "CounterStat",
    "LatencyHistogram",
    "LiveStats",
    "OutcomeRecorder",
    "RateStat",
    "RequestOutcome",
    "ThresholdEvaluator",
    "ThresholdResult",
    "TrendStat",
    "Verdict",
    "observe",
]
