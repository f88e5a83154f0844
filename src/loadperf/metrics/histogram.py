# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import math

import numpy as np


class LatencyHistogram:
    """Geometric-bucket latency histogram for cheap live percentile estimates.

    Bucket ``i`` holds values in ``[min_ms * growth**i, min_ms * growth**(i+1))``,
    so the relative error of an estimate is bounded by ``growth - 1``. Values
    below ``min_ms`` land in bucket 0 and values beyond the last bucket in the
    last one. Exact percentiles come from the raw samples at the end of a run.
    """

    def __init__(
        self, min_ms: float = 0.1, max_ms: float = 600_000.0, growth: float = 1.05
    ) -> None:
        if min_ms <= 0 or max_ms <= min_ms or growth <= 1:
            raise ValueError("Require 0 < min_ms < max_ms and growth > 1")
        self.min_ms = min_ms
        self.growth = growth
        self._log_growth = math.log(growth)
        num_buckets = math.ceil(math.log(max_ms / min_ms) / self._log_growth) + 1
        self._counts = np.zeros(num_buckets, dtype=np.int64)
        self.count = 0
        self.min: float | None = None
        self.max: float | None = None

    def _bucket(self, value_ms: float) -> int:
        if value_ms <= self.min_ms:
            return 0
        index = int(math.log(value_ms / self.min_ms) / self._log_growth)
        return min(index, len(self._counts) - 1)

    def record(self, value_ms: float) -> None:
        self._counts[self._bucket(value_ms)] += 1
        self.count += 1
        self.min = value_ms if self.min is None else min(self.min, value_ms)
        self.max = value_ms if self.max is None else max(self.max, value_ms)

    def percentile(self, percentile: float) -> float | None:
        """Upper edge of the bucket holding the percentile, clamped to the observed range."""
        if self.count == 0:
            return None
        rank = max(1, math.ceil(self.count * percentile / 100.0))
        index = int(np.searchsorted(np.cumsum(self._counts), rank))
        upper = self.min_ms * self.growth ** (index + 1)
        return min(max(upper, self.min), self.max)
