# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import random
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass

import orjson

from loadperf.common.config import PayloadConfig
from loadperf.common.constants import NANOS_PER_MILLIS


@dataclass(frozen=True, slots=True)
class SignupPayload:
    """Body of one ``POST /signup`` request."""

    email: str
    first_name: str
    last_name: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_dict())


class SignupPayloadGenerator:
    """Generates signup payloads for one virtual user.

    Emails look like ``{prefix}{unix_ms}{random}.{vu}.{seq}@{domain}``. The
    timestamp and random draw keep emails distinct across runs against the
    same database; the VU ordinal and the per-VU sequence number make them
    unique within a run even when two VUs draw the same number in the same
    millisecond.

    Each generator owns its own :class:`random.Random`, seeded from the run
    seed and the VU ordinal when a seed is given, so VUs never share a stream.
    """

    def __init__(
        self,
        config: PayloadConfig,
        vu_id: int,
        seed: int | None = None,
        time_ns: Callable[[], int] = time.time_ns,
    ) -> None:
        self.config = config
        self.vu_id = vu_id
        self._rng = random.Random(f"{seed}:{vu_id}") if seed is not None else random.Random()
        self._time_ns = time_ns
        self._sequence = 0

    @property
    def sequence(self) -> int:
        """Number of payloads generated so far."""
        return self._sequence

    def next_email(self) -> str:
        self._sequence += 1
        timestamp_ms = self._time_ns() // NANOS_PER_MILLIS
        draw = self._rng.randrange(self.config.random_upper)
        return (
            f"{self.config.email_prefix}{timestamp_ms}{draw}"
            f".{self.vu_id}.{self._sequence}@{self.config.email_domain}"
        )

    def next_payload(self) -> SignupPayload:
        return SignupPayload(
            email=self.next_email(),
            first_name=self._rng.choice(self.config.first_names),
            last_name=self._rng.choice(self.config.last_names),
        )
