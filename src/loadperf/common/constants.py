# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

MILLIS_PER_SECOND = 1_000
NANOS_PER_MILLIS = 1_000_000
NANOS_PER_SECOND = 1_000_000_000

# Status the signup endpoint answers with when a user was created.
SIGNUP_SUCCESS_STATUS = 201
HEALTH_CHECK_SUCCESS_STATUS = 200

# Percentiles always reported for the request duration trend.
REPORTED_PERCENTILES = (90.0, 95.0, 99.0)
