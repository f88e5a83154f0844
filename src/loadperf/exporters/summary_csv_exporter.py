# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""CSV exporter for a run report."""

import csv
import io

from loadperf.common.config import OutputDefaults
from loadperf.exporters.base_exporter import BaseFileExporter
from loadperf.metrics import AggregatedMetrics


class SummaryCsvExporter(BaseFileExporter):
    """Exports a run report as CSV.

    Sections, separated by blank lines:
    - Metrics (metric, stat, value)
    - Checks
    - Status codes and error tags
    - Thresholds
    - Metadata

    A run that never started only has the metadata section.
    """

    def get_file_name(self) -> str:
        return OutputDefaults.CSV_FILE_NAME

    def _generate_content(self) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf)
        metrics = self._report.metrics

        if metrics is not None:
            writer.writerow(["Metric", "Stat", "Value"])
            for row in self._metric_rows(metrics):
                writer.writerow(row)

            writer.writerow([])
            writer.writerow(["Checks"])
            writer.writerow(["Check", "Passes", "Fails", "Rate"])
            for check in metrics.check_breakdown:
                writer.writerow(
                    [
                        check.name,
                        check.passes,
                        check.fails,
                        self._format_number(check.rate, decimals=4),
                    ]
                )

            writer.writerow([])
            writer.writerow(["Status Codes"])
            writer.writerow(["Status", "Count"])
            for status, count in metrics.status_counts.items():
                writer.writerow([status, count])

            writer.writerow([])
            writer.writerow(["Errors"])
            writer.writerow(["Tag", "Count"])
            for tag, count in metrics.error_counts.items():
                writer.writerow([tag, count])

        verdict = self._report.verdict
        if verdict is not None:
            writer.writerow([])
            writer.writerow(["Thresholds"])
            writer.writerow(["Metric", "Expression", "Observed", "Passed"])
            for result in verdict.results:
                writer.writerow(
                    [
                        result.metric,
                        result.expression,
                        self._format_number(result.observed, decimals=4),
                        result.passed,
                    ]
                )

        writer.writerow([])
        writer.writerow(["Metadata"])
        writer.writerow(["Field", "Value"])
        writer.writerow(["Run ID", self._report.run_id])
        writer.writerow(["State", self._report.state])
        writer.writerow(["Target URL", self._report.target_url])
        writer.writerow(["Started At", self._report.started_at.isoformat()])
        writer.writerow(["Ended At", self._report.ended_at.isoformat()])
        writer.writerow(
            ["Scheduled Duration (s)", self._format_number(self._report.scheduled_duration_s)]
        )
        writer.writerow(["Elapsed (s)", self._format_number(self._report.elapsed_s)])
        writer.writerow(["Drain (s)", self._format_number(self._report.drain_s)])
        writer.writerow(["Workers Started", self._report.workers_started])
        writer.writerow(["Workers Completed", self._report.workers_completed])
        writer.writerow(["Passed", self._report.passed])
        writer.writerow(["Exit Code", self._report.exit_code])
        if self._report.error:
            writer.writerow(["Error", self._report.error])

        return buf.getvalue()

    def _metric_rows(self, metrics: AggregatedMetrics) -> list[list]:
        fmt = self._format_number
        duration = metrics.http_req_duration
        rows = [
            ["http_reqs", "count", metrics.http_reqs.count],
            ["http_reqs", "rate", fmt(metrics.http_reqs.rate)],
            ["iterations", "count", metrics.iterations.count],
            ["iterations", "rate", fmt(metrics.iterations.rate)],
            ["http_req_duration", "avg", fmt(duration.avg)],
            ["http_req_duration", "min", fmt(duration.min)],
            ["http_req_duration", "med", fmt(duration.med)],
            ["http_req_duration", "max", fmt(duration.max)],
        ]
        rows.extend(
            ["http_req_duration", label, fmt(value)]
            for label, value in duration.percentiles.items()
        )
        rows.extend(
            [
                ["http_req_failed", "rate", fmt(metrics.http_req_failed.rate, decimals=4)],
                ["errors", "rate", fmt(metrics.errors.rate, decimals=4)],
                ["checks", "rate", fmt(metrics.checks.rate, decimals=4)],
                ["vus_max", "value", metrics.vus_max],
            ]
        )
        return rows

    def _format_number(self, value, decimals: int = 2) -> str:
        if value is None:
            return ""
        if isinstance(value, float):
            return f"{value:.{decimals}f}"
        return str(value)
