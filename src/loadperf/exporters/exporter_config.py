# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass
from pathlib import Path

from loadperf.runner.models import RunReport


@dataclass(slots=True)
class ExporterConfig:
    """What an exporter writes and where.

    Attributes:
        report: Final report of the run
        output_dir: Directory where export files are written. Not needed for console output.
    """

    report: RunReport
    output_dir: Path | None = None
