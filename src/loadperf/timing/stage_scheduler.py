# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Turns an ordered list of stages into a target concurrency over time.

Each stage moves the level from where the previous stage ended (or from
``start_vus`` for the first stage) to its own target. With the linear policy
the level is interpolated across the stage; with the step policy it jumps to
the target as soon as the stage starts. Zero-length stages are never active,
so they act as an instantaneous jump to their target.
"""

import asyncio
import bisect
import math
import time
from collections.abc import Callable, Sequence

from loadperf.common.config import Stage
from loadperf.common.enums import RampPolicy
from loadperf.common.environment import Environment
from loadperf.common.mixins import LoadPerfLoggerMixin

# Absorbs float error in the interpolation so an exact level is not floored
# to the level below it.
_LEVEL_EPSILON = 1e-9


class StageScheduler(LoadPerfLoggerMixin):
    """Piecewise concurrency schedule with an async driver loop.

    The query methods are pure functions of the elapsed time ``t`` (seconds
    since the run started). :meth:`run` drives a callback from a monotonic
    clock until every stage has elapsed.
    """

    def __init__(
        self,
        stages: Sequence[Stage],
        start_vus: int = 0,
        ramp_policy: RampPolicy = RampPolicy.LINEAR,
        clock: Callable[[], float] = time.monotonic,
        tick_interval: float | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        if not stages:
            raise ValueError("At least one stage is required")
        self.stages = tuple(stages)
        self.start_vus = start_vus
        self.ramp_policy = ramp_policy
        self._clock = clock
        self._tick_interval = tick_interval
        self._started_at: float | None = None

        self._starts: list[float] = []
        self._ends: list[float] = []
        self._from_levels: list[int] = []
        elapsed, level = 0.0, start_vus
        for stage in self.stages:
            self._starts.append(elapsed)
            self._from_levels.append(level)
            elapsed += stage.duration
            self._ends.append(elapsed)
            level = stage.target

    @classmethod
    def from_config(cls, config, **kwargs) -> "StageScheduler":
        return cls(
            stages=config.stages,
            start_vus=config.start_vus,
            ramp_policy=config.ramp_policy,
            **kwargs,
        )

    @property
    def total_duration(self) -> float:
        return self._ends[-1]

    @property
    def final_level(self) -> int:
        return self.stages[-1].target

    @property
    def elapsed(self) -> float:
        """Seconds since :meth:`run` started, or 0 before it did."""
        if self._started_at is None:
            return 0.0
        return self._clock() - self._started_at

    def stage_index_at(self, t: float) -> int | None:
        """Index of the stage active at ``t``, or ``None`` once all stages elapsed."""
        if t >= self.total_duration:
            return None
        return bisect.bisect_right(self._ends, max(t, 0.0))

    def stage_bounds(self, index: int) -> tuple[int, int]:
        """The (start level, target) pair of stage ``index``."""
        return self._from_levels[index], self.stages[index].target

    def target_at(self, t: float) -> float:
        """Exact (fractional) target concurrency at ``t``."""
        index = self.stage_index_at(t)
        if index is None:
            return float(self.final_level)
        start_level, target = self.stage_bounds(index)
        if self.ramp_policy == RampPolicy.STEP:
            return float(target)
        stage = self.stages[index]
        progress = (max(t, 0.0) - self._starts[index]) / stage.duration
        return start_level + (target - start_level) * progress

    def concurrency_at(self, t: float) -> int:
        """Integer concurrency at ``t``.

        Floors while ramping up and ceils while ramping down, so the level never
        leaves the active stage's ``[start level, target]`` range.
        """
        index = self.stage_index_at(t)
        if index is None:
            return self.final_level
        start_level, target = self.stage_bounds(index)
        value = self.target_at(t)
        if target >= start_level:
            return min(max(math.floor(value + _LEVEL_EPSILON), start_level), target)
        return max(min(math.ceil(value - _LEVEL_EPSILON), start_level), target)

    async def run(self, apply: Callable[[int, int], None]) -> None:
        """Call ``apply(stage_index, level)`` whenever either changes.

        Returns once ``total_duration`` has elapsed. Exceptions raised by
        ``apply`` propagate. Cancelling the task stops the schedule.
        """
        tick = self._tick_interval or Environment.RUNNER.SCHEDULER_TICK_INTERVAL
        self._started_at = self._clock()
        last: tuple[int, int] | None = None
        while True:
            elapsed = self.elapsed
            index = self.stage_index_at(elapsed)
            if index is None:
                break
            level = self.concurrency_at(elapsed)
            if (index, level) != last:
                if last is None or last[0] != index:
                    start_level, target = self.stage_bounds(index)
                    self.debug(
                        f"Stage {index + 1}/{len(self.stages)}: {start_level} -> {target} VUs "
                        f"over {self.stages[index].duration:g}s"
                    )
                last = (index, level)
                apply(index, level)
            remaining = self.total_duration - self.elapsed
            await asyncio.sleep(max(0.0, min(tick, remaining)))
        self.debug(f"All {len(self.stages)} stages elapsed after {self.elapsed:.2f}s")
