# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import re
from typing import Annotated

from pydantic import Field, field_validator

from loadperf.common.config.base_config import BaseConfig

_DURATION_UNITS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_DURATION_RE = re.compile(r"(?:\d+(?:\.\d+)?(?:ms|h|m|s))+")


def parse_duration(value: str | int | float) -> float:
    """Convert a duration to seconds.

    Accepts plain numbers (seconds) and k6-style strings such as ``"500ms"``,
    ``"30s"``, ``"1m"`` or ``"2m30s"``.

    Raises:
        ValueError: If the value is negative or not a recognized duration.
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")

    if isinstance(value, int | float):
        seconds = float(value)
    else:
        text = value.strip().lower()
        try:
            seconds = float(text)
        except ValueError:
            if not _DURATION_RE.fullmatch(text):
                raise ValueError(
                    f"Invalid duration: '{value}'. "
                    "Use seconds (e.g. 30) or a unit suffix: 500ms, 30s, 1m, 2m30s, 1h."
                ) from None
            seconds = sum(
                float(amount) * _DURATION_UNITS[unit]
                for amount, unit in _DURATION_PART_RE.findall(text)
            )

    if seconds < 0:
        raise ValueError(f"Duration must not be negative, got {value!r}")
    return seconds


class Stage(BaseConfig):
    """One segment of the load shape: move to ``target`` VUs over ``duration`` seconds."""

    duration: Annotated[
        float,
        Field(ge=0, description="Length of the stage in seconds."),
    ]
    target: Annotated[
        int,
        Field(ge=0, description="Concurrency level reached at the end of the stage."),
    ]

    @field_validator("duration", mode="before")
    @classmethod
    def _parse_duration(cls, v):
        if isinstance(v, str | int | float):
            return parse_duration(v)
        return v

    @classmethod
    def parse(cls, text: str) -> "Stage":
        """Parse the ``<duration>:<target>`` shorthand, e.g. ``"30s:10"``."""
        duration, sep, target = text.rpartition(":")
        if not sep or not duration.strip() or not target.strip():
            raise ValueError(
                f"Invalid stage '{text}'. Expected '<duration>:<target>', e.g. --stage 30s:10"
            )
        try:
            target_value = int(target.strip())
        except ValueError:
            raise ValueError(
                f"Invalid stage target '{target.strip()}' in '{text}'. "
                "The target must be a non-negative integer number of virtual users."
            ) from None
        return cls(duration=duration.strip(), target=target_value)
