# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""JSON exporter for a run report."""

import orjson

from loadperf.common.config import OutputDefaults
from loadperf.exporters.base_exporter import BaseFileExporter


class SummaryJsonExporter(BaseFileExporter):
    """Exports the full run report as JSON.

    Output structure::

        {
            "run_id": "...",
            "state": "completed",
            "exit_code": 0,
            "metrics": {"http_reqs": {...}, "http_req_duration": {...}, ...},
            "verdict": {"passed": true, "results": [...]},
            "diagnostics": {...},
            ...
        }

    Raw latency samples are not included.
    """

    def get_file_name(self) -> str:
        return OutputDefaults.JSON_FILE_NAME

    def _generate_content(self) -> str:
        output = self._report.model_dump(mode="json")
        output["exit_code"] = self._report.exit_code
        return orjson.dumps(output, option=orjson.OPT_INDENT_2).decode("utf-8")
