# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table
from rich.text import Text

from loadperf.common.mixins import LoadPerfLoggerMixin
from loadperf.exporters.exporter_config import ExporterConfig
from loadperf.metrics import AggregatedMetrics, RateStat, Verdict

if TYPE_CHECKING:
    from rich.console import Console


def _ms(value: float | None) -> str:
    return "-" if value is None else f"{value:,.2f}ms"


def _pct(value: float | None) -> str:
    return "-" if value is None else f"{value:.2%}"


def _rate_detail(stat: RateStat) -> str:
    return f"{_pct(stat.rate)}  ({stat.passes:,} of {stat.total:,})"


class SummaryConsoleExporter(LoadPerfLoggerMixin):
    """Prints the end-of-run summary: metrics, checks, thresholds and the verdict."""

    def __init__(self, exporter_config: ExporterConfig, **kwargs) -> None:
        super().__init__(**kwargs)
        self._report = exporter_config.report

    async def export(self, console: Console) -> None:
        report = self._report
        console.print()
        console.rule(f"[bold]loadperf run {report.run_id}")
        console.print(f"Target: {report.target_url}")
        console.print(
            f"State: [bold]{report.state}[/bold]   "
            f"Elapsed: {report.elapsed_s:,.1f}s (scheduled {report.scheduled_duration_s:g}s, "
            f"drain {report.drain_s:,.1f}s)   "
            f"VUs started/completed: {report.workers_started}/{report.workers_completed}"
        )
        if report.metrics is not None:
            console.print(self._metrics_table(report.metrics))
            if report.metrics.check_breakdown:
                console.print(self._checks_table(report.metrics))
        if report.verdict is not None and report.verdict.results:
            console.print(self._thresholds_table(report.verdict))
        diagnostics = report.diagnostics
        if diagnostics.event_loop_stalls:
            console.print(
                f"[yellow]Event loop stalled {diagnostics.event_loop_stalls} times "
                f"(max {diagnostics.max_event_loop_stall_ms:,.1f}ms); latencies may be inflated"
            )
        if report.error:
            console.print(f"[red]{report.error}")
        console.print(self._verdict_text())
        console.print()

    def _metrics_table(self, metrics: AggregatedMetrics) -> Table:
        table = Table(title="Metrics", title_justify="left")
        table.add_column("Metric", style="cyan")
        table.add_column("Value", justify="right")
        duration = metrics.http_req_duration
        percentiles = "  ".join(
            f"{label}={_ms(value)}" for label, value in duration.percentiles.items()
        )
        table.add_row(
            "http_req_duration",
            f"avg={_ms(duration.avg)}  min={_ms(duration.min)}  med={_ms(duration.med)}  "
            f"max={_ms(duration.max)}  {percentiles}".rstrip(),
        )
        table.add_row("http_req_failed", _rate_detail(metrics.http_req_failed))
        table.add_row("http_reqs", f"{metrics.http_reqs.count:,}  ({metrics.http_reqs.rate:,.2f}/s)")
        table.add_row(
            "iterations", f"{metrics.iterations.count:,}  ({metrics.iterations.rate:,.2f}/s)"
        )
        table.add_row("errors", _rate_detail(metrics.errors))
        table.add_row("checks", _rate_detail(metrics.checks))
        table.add_row("vus_max", str(metrics.vus_max))
        if metrics.status_counts:
            table.add_row(
                "status codes",
                ", ".join(f"{s}: {c:,}" for s, c in metrics.status_counts.items()),
            )
        if metrics.error_counts:
            table.add_row(
                "error tags",
                ", ".join(f"{t}: {c:,}" for t, c in metrics.error_counts.items()),
            )
        return table

    def _checks_table(self, metrics: AggregatedMetrics) -> Table:
        table = Table(title="Checks", title_justify="left")
        table.add_column("Check", style="cyan")
        table.add_column("Passes", justify="right")
        table.add_column("Fails", justify="right")
        table.add_column("Rate", justify="right")
        for check in metrics.check_breakdown:
            mark = "[green]✓[/green]" if check.fails == 0 else "[red]✗[/red]"
            table.add_row(
                f"{mark} {check.name}",
                f"{check.passes:,}",
                f"{check.fails:,}",
                _pct(check.rate),
            )
        return table

    def _thresholds_table(self, verdict: Verdict) -> Table:
        table = Table(title="Thresholds", title_justify="left")
        table.add_column("Metric", style="cyan")
        table.add_column("Expression")
        table.add_column("Observed", justify="right")
        table.add_column("Result", justify="center")
        for result in verdict.results:
            observed = "no data" if result.observed is None else f"{result.observed:,.4g}"
            status = "[green]PASS[/green]" if result.passed else "[red]FAIL[/red]"
            table.add_row(result.metric, result.expression, observed, status)
        return table

    def _verdict_text(self) -> Text:
        report = self._report
        if report.verdict is None:
            return Text("RUN FAILED: no metrics were collected", style="bold red")
        if report.passed:
            return Text("PASSED: all thresholds met", style="bold green")
        if report.verdict.passed:
            return Text(f"INCOMPLETE: run {report.state}", style="bold yellow")
        breached = len(report.verdict.breached)
        return Text(f"FAILED: {breached} threshold(s) breached", style="bold red")
