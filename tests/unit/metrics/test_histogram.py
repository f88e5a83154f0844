# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import numpy as np
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from loadperf.metrics import LatencyHistogram


def test_empty_histogram():
    hist = LatencyHistogram()
    assert hist.count == 0
    assert hist.percentile(95) is None


def test_single_value_is_exact():
    hist = LatencyHistogram()
    hist.record(42.0)
    assert hist.percentile(50) == 42.0
    assert hist.percentile(99) == 42.0


def test_out_of_range_values_land_in_edge_buckets():
    hist = LatencyHistogram(min_ms=1.0, max_ms=100.0)
    for value in (0.01, 5_000.0):
        hist.record(value)
    assert hist.count == 2
    assert (hist.min, hist.max) == (0.01, 5_000.0)
    assert hist.percentile(50) == pytest.approx(1.05)
    assert 100.0 <= hist.percentile(100) <= 5_000.0


@pytest.mark.parametrize(
    "kwargs", [{"min_ms": 0}, {"min_ms": 10, "max_ms": 5}, {"growth": 1.0}]
)  # fmt: skip
def test_invalid_bounds(kwargs):
    with pytest.raises(ValueError):
        LatencyHistogram(**kwargs)


@given(
    values=st.lists(st.floats(min_value=0.5, max_value=60_000), min_size=1, max_size=300),
    percentile=st.sampled_from([50.0, 90.0, 95.0, 99.0]),
)
@settings(max_examples=100, deadline=None)
def test_estimate_within_bucket_error(values, percentile):
    hist = LatencyHistogram(growth=1.05)
    for value in values:
        hist.record(value)
    exact = float(np.percentile(np.asarray(values), percentile, method="higher"))
    estimate = hist.percentile(percentile)
    assert min(values) <= estimate <= max(values)
    # One bucket of slack for values that sit on a bucket edge.
    assert estimate <= exact * 1.05**2
