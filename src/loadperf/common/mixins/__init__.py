# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from loadperf.common.mixins.loadperf_logger_mixin import LoadPerfLoggerMixin

__all__ = ["LoadPerfLoggerMixin"]
