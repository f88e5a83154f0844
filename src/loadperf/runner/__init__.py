# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from loadperf.runner.load_test_runner import LoadTestRunner, new_run_id
from loadperf.runner.models import RunDiagnostics, RunReport

__all__ = ["LoadTestRunner", "RunDiagnostics", "RunReport", "new_run_id"]
