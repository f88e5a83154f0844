# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Run report exporters: console summary, JSON and CSV files."""

from loadperf.exporters.base_exporter import BaseFileExporter
from loadperf.exporters.console_summary_exporter import SummaryConsoleExporter
from loadperf.exporters.exporter_config import ExporterConfig
from loadperf.exporters.summary_csv_exporter import SummaryCsvExporter
from loadperf.exporters.summary_json_exporter import SummaryJsonExporter

__all__ = [
    "BaseFileExporter",
    "ExporterConfig",
    "SummaryConsoleExporter",
    "SummaryCsvExporter",
    "SummaryJsonExporter",
]
