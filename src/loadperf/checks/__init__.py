# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from loadperf.checks.signup_checks import (
    BODY_CHECKS,
    CHECK_REGISTRY,
    CheckContext,
    CheckResult,
    CheckSuite,
    check_label,
)

__all__ = [
    "BODY_CHECKS",
    "CHECK_REGISTRY",
    "CheckContext",
    "CheckResult",
    "CheckSuite",
    "check_label",
]
