# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
import contextlib
import signal
from pathlib import Path
from typing import Any

import httpx
import orjson
from pydantic import ValidationError
from rich.console import Console

from loadperf.common.config import RunConfig, get_profile
from loadperf.common.exceptions import ConfigurationError
from loadperf.common.loadperf_logger import LoadPerfLogger
from loadperf.common.logging import setup_rich_logging
from loadperf.exporters import (
    ExporterConfig,
    SummaryConsoleExporter,
    SummaryCsvExporter,
    SummaryJsonExporter,
)
from loadperf.runner import LoadTestRunner, RunReport

logger = LoadPerfLogger(__name__)

_SHORTHAND_KEYS = ("vus", "duration")
_STAGE_KEYS = ("stages", "start_vus")


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON run configuration file.

    Raises:
        ConfigurationError: If the file cannot be read or is not a JSON object.
    """
    try:
        data = orjson.loads(Path(path).read_bytes())
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
    except orjson.JSONDecodeError as e:
        raise ConfigurationError(f"Config file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a JSON object, got {type(data).__name__}"
        )
    return data


def merge_settings(base: dict[str, Any], layer: dict[str, Any]) -> dict[str, Any]:
    """Layer ``layer`` over ``base``. ``None`` values in ``layer`` are ignored.

    A layer that defines the load shape replaces the base's load shape, so a
    ``vus``/``duration`` override drops a profile's stages and vice versa.
    """
    merged = dict(base)
    layer = {k: v for k, v in layer.items() if v is not None}
    if any(k in layer for k in _SHORTHAND_KEYS):
        for key in _STAGE_KEYS:
            if key not in layer:
                merged.pop(key, None)
    if "stages" in layer:
        for key in _SHORTHAND_KEYS:
            merged.pop(key, None)
    for key, value in layer.items():
        if key == "payload" and isinstance(merged.get(key), dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def build_run_config(
    profile: str | None = None,
    config_file: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> RunConfig:
    """Validate a profile, a config file and CLI overrides, in that order, into a RunConfig.

    Raises:
        ConfigurationError: If no load shape was given or validation fails.
    """
    settings: dict[str, Any] = {}
    try:
        if profile is not None:
            settings = get_profile(profile).to_settings()
    except ValueError as e:
        raise ConfigurationError(str(e)) from e
    if config_file is not None:
        settings = merge_settings(settings, load_config_file(config_file))
    if overrides:
        settings = merge_settings(settings, overrides)

    if not any(k in settings for k in ("stages", *_SHORTHAND_KEYS)):
        raise ConfigurationError(
            "No load shape configured. Use --profile smoke|load|stress, "
            "--stage 30s:10 (repeatable) or --vus 5 --duration 30s"
        )
    try:
        return RunConfig.model_validate(settings)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid run configuration:\n{e}") from e


async def export_report(
    report: RunReport, output_dir: Path | None = None, console: Console | None = None
) -> list[Path]:
    """Print the summary and, with an output directory, write the JSON and CSV files."""
    exporter_config = ExporterConfig(report=report, output_dir=output_dir)
    await SummaryConsoleExporter(exporter_config).export(console or Console())
    if output_dir is None:
        return []

    await asyncio.to_thread(Path(output_dir).mkdir, parents=True, exist_ok=True)
    json_path, csv_path = await asyncio.gather(
        SummaryJsonExporter(exporter_config).export(),
        SummaryCsvExporter(exporter_config).export(),
    )
    logger.info(f"Summary JSON written to: {json_path}")
    logger.info(f"Summary CSV written to: {csv_path}")
    return [json_path, csv_path]


async def run_load_test(
    config: RunConfig,
    output_dir: Path | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    console: Console | None = None,
) -> RunReport:
    """Run one load test and export its report. SIGINT aborts the run gracefully."""
    runner = LoadTestRunner(config, transport=transport)
    loop = asyncio.get_running_loop()
    handler_installed = False
    with contextlib.suppress(NotImplementedError, RuntimeError, ValueError):
        loop.add_signal_handler(signal.SIGINT, runner.cancel)
        handler_installed = True
    try:
        report = await runner.run()
    finally:
        if handler_installed:
            loop.remove_signal_handler(signal.SIGINT)
    await export_report(report, output_dir, console)
    return report


def run_cli(
    profile: str | None = None,
    config_file: Path | None = None,
    overrides: dict[str, Any] | None = None,
    output_dir: Path | None = None,
    log_level: str | None = None,
) -> int:
    """Entry point of ``loadperf run``. Returns the process exit code.

    Exit codes: 0 all thresholds passed, 1 a threshold was breached, 2 the
    configuration was invalid, the target was unreachable or the run aborted.
    """
    try:
        setup_rich_logging(log_level)
    except ValueError as e:
        setup_rich_logging()
        logger.error(str(e))
        return 2
    try:
        config = build_run_config(profile, config_file, overrides)
    except ConfigurationError as e:
        logger.error(str(e))
        return 2

    logger.info("=" * 80)
    logger.info(f"Starting load test{f' ({profile} profile)' if profile else ''}")
    logger.info(f"  Target: {config.signup_url}")
    logger.info(
        "  Stages: "
        + ", ".join(f"{s.duration:g}s:{s.target}" for s in config.stages)
        + f" (start {config.start_vus} VUs, {config.ramp_policy})"
    )
    for threshold in config.thresholds:
        logger.info(f"  Threshold: {threshold}")
    logger.info("=" * 80)

    report = asyncio.run(run_load_test(config, output_dir=output_dir))

    logger.info("=" * 80)
    logger.info(f"Run {report.run_id} {report.state}, exit code {report.exit_code}")
    logger.info("=" * 80)
    return report.exit_code
