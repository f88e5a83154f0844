# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Process-level settings read from ``LOADPERF_*`` environment variables.

These are knobs of the driver itself, not of a particular run. Run parameters
(stages, thresholds, think time, ...) live in :class:`loadperf.common.config.RunConfig`.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class _HttpSettings(BaseSettings):
    """HTTP client settings for talking to the target service."""

    model_config = SettingsConfigDict(env_prefix="LOADPERF_HTTP_", extra="ignore")

    BASE_URL: str = Field(
        "http://localhost:3000",
        description="Base URL of the target service when no --base-url is given.",
    )
    MAX_CONNECTIONS: int = Field(
        10_000,
        ge=1,
        description="Upper bound on pooled connections shared by all virtual users.",
    )
    HEALTH_CHECK_TIMEOUT: float = Field(
        10.0,
        gt=0,
        description="Timeout in seconds for the pre-run health check.",
    )


class _RunnerSettings(BaseSettings):
    """Settings for the run loop, scheduler and diagnostics."""

    model_config = SettingsConfigDict(env_prefix="LOADPERF_RUNNER_", extra="ignore")

    SCHEDULER_TICK_INTERVAL: float = Field(
        0.1,
        gt=0,
        description="How often (seconds) the stage scheduler re-evaluates the target concurrency.",
    )
    PROGRESS_INTERVAL: float = Field(
        5.0,
        gt=0,
        description="How often (seconds) live progress is logged during a run.",
    )
    EVENT_LOOP_HEALTH_ENABLED: bool = Field(
        True,
        description="Watch the event loop for stalls that would skew measured latency.",
    )
    EVENT_LOOP_HEALTH_INTERVAL: float = Field(
        0.25,
        gt=0,
        description="Sleep interval in seconds used to probe event loop responsiveness.",
    )
    EVENT_LOOP_HEALTH_WARN_THRESHOLD_MS: float = Field(
        10.0,
        gt=0,
        description="Extra delay in milliseconds above which a probe counts as a stall.",
    )


class _LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="LOADPERF_LOGGING_", extra="ignore")

    LEVEL: str = Field(
        "INFO",
        description="Default log level (TRACE, DEBUG, INFO, WARNING, ERROR).",
    )


class _Environment(BaseSettings):
    """Root settings object. Access groups as ``Environment.HTTP.BASE_URL``."""

    model_config = SettingsConfigDict(extra="ignore")

    HTTP: _HttpSettings = Field(default_factory=_HttpSettings)
    RUNNER: _RunnerSettings = Field(default_factory=_RunnerSettings)
    LOGGING: _LoggingSettings = Field(default_factory=_LoggingSettings)


Environment = _Environment()
