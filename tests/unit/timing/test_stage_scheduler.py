# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from loadperf.common.config import Stage
from loadperf.common.enums import RampPolicy
from loadperf.timing import StageScheduler


def scheduler(*specs: str, start_vus: int = 0, policy: RampPolicy = RampPolicy.LINEAR):
    return StageScheduler(
        [Stage.parse(s) for s in specs], start_vus=start_vus, ramp_policy=policy
    )


class TestLinearSchedule:
    @pytest.mark.parametrize(
        "t,expected",
        [(0, 0), (0.99, 0), (1.0, 1), (4.99, 4), (5.0, 5), (9.99, 9), (10.0, 10), (15.0, 10), (20.0, 10)],
    )  # fmt: skip
    def test_ramp_up_floors(self, t, expected):
        sched = scheduler("10s:10", "10s:10")
        assert sched.concurrency_at(t) == expected

    @pytest.mark.parametrize(
        "t,expected",
        [(10.0, 10), (10.01, 10), (15.0, 5), (15.01, 5), (19.99, 1), (20.0, 0)],
    )  # fmt: skip
    def test_ramp_down_ceils(self, t, expected):
        sched = scheduler("10s:10", "10s:0")
        assert sched.concurrency_at(t) == expected

    def test_target_at_is_fractional(self):
        sched = scheduler("10s:10", "10s:0")
        assert sched.target_at(2.5) == pytest.approx(2.5)
        assert sched.target_at(17.5) == pytest.approx(2.5)

    def test_first_stage_ramps_from_start_vus(self):
        sched = scheduler("10s:20", start_vus=10)
        assert sched.concurrency_at(0) == 10
        assert sched.concurrency_at(5) == 15
        assert sched.stage_bounds(0) == (10, 20)

    def test_constant_stage(self):
        sched = scheduler("30s:5", start_vus=5)
        assert {sched.concurrency_at(t) for t in (0, 10, 29.9)} == {5}


class TestStepSchedule:
    def test_jumps_at_stage_start(self):
        sched = scheduler("10s:10", "10s:3", policy=RampPolicy.STEP)
        assert sched.concurrency_at(0) == 10
        assert sched.concurrency_at(9.99) == 10
        assert sched.concurrency_at(10) == 3


class TestStageBoundaries:
    def test_stage_index(self):
        sched = scheduler("10s:10", "5s:10", "10s:0")
        assert sched.stage_index_at(0) == 0
        assert sched.stage_index_at(10) == 1
        assert sched.stage_index_at(14.99) == 1
        assert sched.stage_index_at(15) == 2
        assert sched.stage_index_at(25) is None
        assert sched.total_duration == 25

    def test_negative_time_is_start(self):
        sched = scheduler("10s:10", start_vus=2)
        assert sched.stage_index_at(-1) == 0
        assert sched.concurrency_at(-1) == 2

    def test_after_all_stages_is_final_level(self):
        sched = scheduler("10s:10", "10s:4")
        assert sched.concurrency_at(100) == 4
        assert sched.target_at(100) == 4.0

    def test_zero_duration_stage_is_instant_jump(self):
        sched = scheduler("0s:5", "10s:5")
        assert sched.stage_index_at(0) == 1
        assert sched.concurrency_at(0) == 5
        assert sched.stage_bounds(1) == (5, 5)

    def test_no_stages_rejected(self):
        with pytest.raises(ValueError, match="At least one stage"):
            StageScheduler([])


@st.composite
def schedules(draw):
    stages = draw(
        st.lists(
            st.builds(
                Stage,
                duration=st.floats(min_value=0, max_value=60, allow_nan=False),
                target=st.integers(min_value=0, max_value=500),
            ),
            min_size=1,
            max_size=6,
        )
    )
    start_vus = draw(st.integers(min_value=0, max_value=500))
    policy = draw(st.sampled_from(list(RampPolicy)))
    return StageScheduler(stages, start_vus=start_vus, ramp_policy=policy)


@given(sched=schedules(), fraction=st.floats(min_value=0, max_value=1.2))
@settings(max_examples=200, deadline=None)
def test_level_stays_within_active_stage_range(sched, fraction):
    t = sched.total_duration * fraction
    level = sched.concurrency_at(t)
    index = sched.stage_index_at(t)
    if index is None:
        assert level == sched.final_level
    else:
        low, high = sorted(sched.stage_bounds(index))
        assert low <= level <= high


class TestSchedulerRun:
    @pytest.mark.asyncio
    async def test_applies_levels_until_elapsed(self):
        calls: list[tuple[int, int]] = []
        sched = StageScheduler(
            [Stage(duration=0.15, target=3), Stage(duration=0.1, target=0)],
            tick_interval=0.005,
        )
        await asyncio.wait_for(sched.run(lambda i, level: calls.append((i, level))), 2.0)

        assert calls[0] == (0, 0)
        assert [i for i, _ in calls] == sorted(i for i, _ in calls)
        assert (0, 3) in calls or (1, 3) in calls
        assert all(0 <= level <= 3 for _, level in calls)
        assert len(set(calls)) == len(calls)
        assert sched.elapsed >= sched.total_duration

    @pytest.mark.asyncio
    async def test_apply_errors_propagate(self):
        def apply(index, level):
            raise RuntimeError("boom")

        sched = StageScheduler([Stage(duration=0.1, target=1)], tick_interval=0.01)
        with pytest.raises(RuntimeError, match="boom"):
            await sched.run(apply)
