# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
from collections.abc import Callable

from loadperf.common.mixins import LoadPerfLoggerMixin
from loadperf.workers.virtual_user import VirtualUser


class VirtualUserPool(LoadPerfLoggerMixin):
    """Keeps the number of active virtual users at the scheduled level.

    Terminology:
    - active: started and not asked to stop; counts toward the target level.
    - running: task not finished yet, including VUs finishing their last
      iteration after a stop request.

    Scaling down stops the most recently started VUs first. VU ordinals are
    handed out sequentially and never reused within a pool.
    """

    def __init__(self, factory: Callable[[int], VirtualUser], **kwargs) -> None:
        super().__init__(**kwargs)
        self._factory = factory
        self._next_vu_id = 1
        self._active: list[tuple[VirtualUser, asyncio.Task]] = []
        self._tasks: dict[asyncio.Task, VirtualUser] = {}
        self.started_count = 0
        self.completed_count = 0
        self.max_active = 0
        self.worker_errors: list[BaseException] = []

    @property
    def active_count(self) -> int:
        return len(self._active)

    @property
    def running_count(self) -> int:
        return len(self._tasks)

    def scale_to(self, level: int) -> None:
        """Start or stop VUs until ``level`` VUs are active."""
        if level < 0:
            raise ValueError(f"Concurrency level must not be negative, got {level}")
        while len(self._active) < level:
            self._start_one()
        while len(self._active) > level:
            vu, _ = self._active.pop()
            vu.request_stop()
        self.max_active = max(self.max_active, len(self._active))

    def _start_one(self) -> None:
        vu_id = self._next_vu_id
        self._next_vu_id += 1
        vu = self._factory(vu_id)
        task = asyncio.create_task(vu.run(), name=f"vu-{vu_id}")
        self._tasks[task] = vu
        self._active.append((vu, task))
        self.started_count += 1
        task.add_done_callback(self._reap)

    def _reap(self, task: asyncio.Task) -> None:
        vu = self._tasks.pop(task, None)
        if vu is None:
            return
        self.completed_count += 1
        self._active = [(v, t) for v, t in self._active if t is not task]
        if not task.cancelled() and (exc := task.exception()) is not None:
            self.worker_errors.append(exc)
            self.error(f"VU {vu.vu_id} exited with an unexpected error: {exc!r}")

    def _reap_finished(self) -> None:
        for task in [t for t in self._tasks if t.done()]:
            self._reap(task)

    def request_stop_all(self) -> None:
        for vu, _ in self._active:
            vu.request_stop()
        self._active.clear()

    async def drain(self, timeout: float) -> bool:
        """Stop every VU and wait up to ``timeout`` seconds for them to finish.

        Returns:
            True if every VU finished in time, False if some are still running.
        """
        self.request_stop_all()
        tasks = list(self._tasks)
        if tasks:
            self.info(f"Draining {len(tasks)} VUs (graceful stop {timeout:g}s)")
            await asyncio.wait(tasks, timeout=timeout)
        self._reap_finished()
        return not self._tasks

    async def cancel_all(self) -> None:
        """Cancel every VU still running and wait until they have exited."""
        self.request_stop_all()
        tasks = list(self._tasks)
        if not tasks:
            return
        self.warning(f"Cancelling {len(tasks)} VUs with requests still in flight")
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._reap_finished()
