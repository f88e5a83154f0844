# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from loadperf.common.enums import CheckName, RampPolicy


class RunDefaults:
    SIGNUP_PATH = "/signup"
    HEALTH_PATH = "/"
    START_VUS = 0
    RAMP_POLICY = RampPolicy.LINEAR
    THINK_TIME = 1.0
    REQUEST_TIMEOUT = 60.0
    GRACEFUL_STOP = 30.0
    CHECKS = (
        CheckName.STATUS_IS_201,
        CheckName.RESPONSE_HAS_USER,
        CheckName.HAS_USER_DATA,
    )


class PayloadDefaults:
    EMAIL_PREFIX = "user"
    EMAIL_DOMAIN = "loadtest.com"
    RANDOM_UPPER = 10_000
    FIRST_NAMES = (
        "John", "Jane", "Mike", "Sarah", "David",
        "Emily", "Chris", "Lisa", "Tom", "Anna",
    )  # fmt: skip
    LAST_NAMES = (
        "Smith", "Johnson", "Williams", "Brown", "Jones",
        "Garcia", "Miller", "Davis", "Wilson", "Moore",
    )  # fmt: skip


class OutputDefaults:
    JSON_FILE_NAME = "summary.json"
    CSV_FILE_NAME = "summary.csv"
