# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from loadperf.transport.http_client import (
    ResponseSnapshot,
    TargetClient,
    classify_transport_error,
)

__all__ = ["ResponseSnapshot", "TargetClient", "classify_transport_error"]
