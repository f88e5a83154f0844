# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Command line interface: ``loadperf run`` and ``loadperf profiles``."""

import sys
from pathlib import Path
from typing import Annotated

from cyclopts import App, Group, Parameter
from rich.console import Console
from rich.table import Table

from loadperf import __version__
from loadperf.common.config import PROFILES
from loadperf.common.enums import CheckName, ProfileName, RampPolicy

app = App(
    name="loadperf",
    help="Load test a signup endpoint with ramping virtual users and threshold verdicts.",
    version=__version__,
)

_SOURCE = Group("Configuration Source", sort_key=0)
_LOAD = Group("Load Shape", sort_key=1)
_REQUEST = Group("Requests", sort_key=2)
_CRITERIA = Group("Checks & Thresholds", sort_key=3)
_OUTPUT = Group("Output", sort_key=4)


@app.command
def run(
    *,
    profile: Annotated[
        ProfileName | None,
        Parameter(name=("--profile", "-p"), group=_SOURCE, help="Start from a preset run configuration."),
    ] = None,
    config: Annotated[
        Path | None,
        Parameter(name="--config", group=_SOURCE, help="JSON run configuration file, layered over the profile."),
    ] = None,
    base_url: Annotated[
        str | None,
        Parameter(name="--base-url", group=_REQUEST, help="Base URL of the service under test. Defaults to LOADPERF_HTTP_BASE_URL."),
    ] = None,
    stage: Annotated[
        list[str] | None,
        Parameter(name="--stage", group=_LOAD, help="Load stage as <duration>:<target>, e.g. 30s:10. Repeatable, in order."),
    ] = None,
    vus: Annotated[
        int | None,
        Parameter(name="--vus", group=_LOAD, help="Constant number of VUs. Requires --duration."),
    ] = None,
    duration: Annotated[
        str | None,
        Parameter(name="--duration", group=_LOAD, help="Duration of a constant-load run, e.g. 30s or 2m."),
    ] = None,
    start_vus: Annotated[
        int | None,
        Parameter(name="--start-vus", group=_LOAD, help="VUs before the first stage starts."),
    ] = None,
    ramp_policy: Annotated[
        RampPolicy | None,
        Parameter(name="--ramp-policy", group=_LOAD, help="linear interpolates within a stage, step jumps at stage start."),
    ] = None,
    graceful_stop: Annotated[
        float | None,
        Parameter(name="--graceful-stop", group=_LOAD, help="Seconds in-flight iterations get after the last stage."),
    ] = None,
    think_time: Annotated[
        float | None,
        Parameter(name="--think-time", group=_REQUEST, help="Seconds a VU pauses between iterations."),
    ] = None,
    request_timeout: Annotated[
        float | None,
        Parameter(name="--request-timeout", group=_REQUEST, help="Per-request timeout in seconds."),
    ] = None,
    random_seed: Annotated[
        int | None,
        Parameter(name="--random-seed", group=_REQUEST, help="Seed for reproducible payload generation."),
    ] = None,
    threshold: Annotated[
        list[str] | None,
        Parameter(name="--threshold", group=_CRITERIA, help="Threshold as <metric>:<expression>, e.g. 'http_req_duration:p(95)<500'. Repeatable."),
    ] = None,
    check: Annotated[
        list[CheckName] | None,
        Parameter(name="--check", group=_CRITERIA, help="Response check to run. Repeatable."),
    ] = None,
    max_response_time_ms: Annotated[
        float | None,
        Parameter(name="--max-response-time-ms", group=_CRITERIA, help="Enable the 'response time < Xms' check."),
    ] = None,
    output_dir: Annotated[
        Path | None,
        Parameter(name="--output-dir", group=_OUTPUT, help="Write summary.json and summary.csv to this directory."),
    ] = None,
    log_level: Annotated[
        str | None,
        Parameter(name="--log-level", group=_OUTPUT, help="TRACE, DEBUG, INFO, WARNING or ERROR. Defaults to LOADPERF_LOGGING_LEVEL."),
    ] = None,
) -> int:
    """Run a load test and exit with 0 (passed), 1 (threshold breached) or 2 (error/aborted)."""
    from loadperf.cli_runner import run_cli

    overrides = {
        "base_url": base_url,
        "stages": stage,
        "vus": vus,
        "duration": duration,
        "start_vus": start_vus,
        "ramp_policy": ramp_policy,
        "graceful_stop": graceful_stop,
        "think_time": think_time,
        "request_timeout": request_timeout,
        "random_seed": random_seed,
        "thresholds": threshold,
        "checks": check,
        "max_response_time_ms": max_response_time_ms,
    }
    return run_cli(
        profile=profile,
        config_file=config,
        overrides=overrides,
        output_dir=output_dir,
        log_level=log_level,
    )


@app.command
def profiles() -> int:
    """List the preset run configurations."""
    table = Table(title="Profiles", title_justify="left")
    table.add_column("Profile", style="cyan")
    table.add_column("Description")
    table.add_column("Thresholds")
    for profile in PROFILES.values():
        thresholds = profile.settings.get("thresholds", {})
        table.add_row(
            str(profile.name),
            profile.description,
            "\n".join(
                f"{metric}: {', '.join(exprs)}" for metric, exprs in thresholds.items()
            ),
        )
    Console().print(table)
    return 0


def main() -> None:
    sys.exit(app())


if __name__ == "__main__":
    main()
