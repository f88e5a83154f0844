# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Preset run configurations for the signup endpoint.

Each profile is a plain settings dict so that a config file and CLI flags can
be layered on top of it before validation into a :class:`RunConfig`.
"""

import copy
from dataclasses import dataclass, field
from typing import Any

from loadperf.common.enums import CheckName, ProfileName


@dataclass(frozen=True, slots=True)
class Profile:
    name: ProfileName
    description: str
    settings: dict[str, Any] = field(default_factory=dict)

    def to_settings(self) -> dict[str, Any]:
        """Return a copy of the settings that callers may mutate."""
        return copy.deepcopy(self.settings)


PROFILES: dict[ProfileName, Profile] = {
    ProfileName.SMOKE: Profile(
        name=ProfileName.SMOKE,
        description="Verify the endpoint works: 5 VUs for 30s.",
        settings={
            "vus": 5,
            "duration": "30s",
            "thresholds": {
                "http_req_duration": ["p(95)<1000"],
                "http_req_failed": ["rate<0.1"],
            },
            "checks": [CheckName.STATUS_IS_201, CheckName.HAS_USER_DATA],
            "think_time": 1.0,
            "request_timeout": 60.0,
            "payload": {
                "email_prefix": "smoke",
                "email_domain": "test.com",
                "first_names": ["Smoke"],
                "last_names": ["Test"],
            },
        },
    ),
    ProfileName.LOAD: Profile(
        name=ProfileName.LOAD,
        description="Ramp to 100 VUs, hold, ramp down (5 minutes).",
        settings={
            "stages": ["30s:10", "1m:50", "2m:100", "1m:100", "30s:0"],
            "thresholds": {
                "http_req_duration": ["p(95)<500"],
                "http_req_failed": ["rate<0.05"],
                "errors": ["rate<0.05"],
            },
            "checks": [CheckName.STATUS_IS_201, CheckName.RESPONSE_HAS_USER],
            "max_response_time_ms": 500,
            "think_time": 1.0,
            "request_timeout": 60.0,
            "payload": {"email_prefix": "user", "email_domain": "loadtest.com"},
        },
    ),
    ProfileName.STRESS: Profile(
        name=ProfileName.STRESS,
        description="Push to 3000 VUs to find the breaking point (10 minutes).",
        settings={
            "stages": ["1m:300", "2m:500", "3m:1500", "2m:3000", "2m:0"],
            "thresholds": {
                "http_req_duration": ["p(95)<2000"],
                "http_req_failed": ["rate<0.3"],
                "errors": ["rate<0.3"],
            },
            "checks": [CheckName.STATUS_IS_201, CheckName.HAS_VALID_RESPONSE],
            "think_time": 0.5,
            "request_timeout": 10.0,
            "payload": {
                "email_prefix": "stress",
                "email_domain": "test.com",
                "random_upper": 100_000,
                "first_names": [
                    "Alice", "Bob", "Carol", "Dave", "Eve",
                    "Frank", "Grace", "Henry", "Iris", "Jack",
                ],
                "last_names": [
                    "Anderson", "Baker", "Clark", "Davis", "Evans",
                    "Ford", "Gray", "Hall", "Irwin", "James",
                ],
            },
        },
    ),
}  # fmt: skip


def get_profile(name: str | ProfileName) -> Profile:
    try:
        return PROFILES[ProfileName(name)]
    except ValueError:
        known = ", ".join(str(p) for p in ProfileName)
        raise ValueError(f"Unknown profile '{name}'. Available: {known}") from None
