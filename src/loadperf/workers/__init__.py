# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from loadperf.workers.pool import VirtualUserPool
from loadperf.workers.virtual_user import VirtualUser

__all__ = ["VirtualUser", "VirtualUserPool"]
