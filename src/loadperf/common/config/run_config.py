# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator

from loadperf.common.config.base_config import BaseConfig
from loadperf.common.config.config_defaults import PayloadDefaults, RunDefaults
from loadperf.common.config.stage_config import Stage
from loadperf.common.config.threshold_config import Threshold, coerce_thresholds
from loadperf.common.enums import CheckName, RampPolicy
from loadperf.common.environment import Environment


class PayloadConfig(BaseConfig):
    """How synthetic signup payloads are generated."""

    email_prefix: Annotated[
        str,
        Field(description="Local-part prefix of generated emails, e.g. 'user' or 'smoke'."),
    ] = PayloadDefaults.EMAIL_PREFIX

    email_domain: Annotated[
        str,
        Field(
            min_length=1,
            pattern=r"^[A-Za-z0-9.-]+$",
            description="Domain of generated emails.",
        ),
    ] = PayloadDefaults.EMAIL_DOMAIN

    first_names: Annotated[
        tuple[str, ...],
        Field(min_length=1, description="Pool first names are drawn from."),
    ] = PayloadDefaults.FIRST_NAMES

    last_names: Annotated[
        tuple[str, ...],
        Field(min_length=1, description="Pool last names are drawn from."),
    ] = PayloadDefaults.LAST_NAMES

    random_upper: Annotated[
        int,
        Field(
            ge=1,
            description="Exclusive upper bound of the random number mixed into each email.",
        ),
    ] = PayloadDefaults.RANDOM_UPPER


class RunConfig(BaseConfig):
    """Everything a single load test run needs. Validated once, read-only afterwards."""

    base_url: Annotated[
        str,
        Field(
            default_factory=lambda: Environment.HTTP.BASE_URL,
            description="Base URL of the service under test.",
        ),
    ]

    signup_path: Annotated[
        str, Field(description="Path of the signup endpoint.")
    ] = RunDefaults.SIGNUP_PATH

    health_path: Annotated[
        str,
        Field(description="Path probed with GET before the run. Must return 200."),
    ] = RunDefaults.HEALTH_PATH

    stages: Annotated[
        tuple[Stage, ...],
        Field(min_length=1, description="Ordered load shape. Total duration is their sum."),
    ]

    start_vus: Annotated[
        int,
        Field(ge=0, description="Concurrency level before the first stage starts."),
    ] = RunDefaults.START_VUS

    ramp_policy: Annotated[
        RampPolicy,
        Field(description="Linear interpolation between stage levels, or a step at each stage start."),
    ] = RunDefaults.RAMP_POLICY

    thresholds: Annotated[
        tuple[Threshold, ...],
        Field(description="Pass/fail criteria. All must hold for the run to pass."),
    ] = ()

    think_time: Annotated[
        float,
        Field(ge=0, description="Pause in seconds between iterations of one virtual user."),
    ] = RunDefaults.THINK_TIME

    request_timeout: Annotated[
        float,
        Field(gt=0, description="Per-request timeout in seconds."),
    ] = RunDefaults.REQUEST_TIMEOUT

    graceful_stop: Annotated[
        float,
        Field(
            ge=0,
            description="Seconds in-flight iterations get to finish after the last stage "
            "before they are cancelled.",
        ),
    ] = RunDefaults.GRACEFUL_STOP

    checks: Annotated[
        tuple[CheckName, ...],
        Field(description="Named checks evaluated on every response, in order."),
    ] = RunDefaults.CHECKS

    max_response_time_ms: Annotated[
        float | None,
        Field(gt=0, description="Enables the 'response time < Xms' check."),
    ] = None

    payload: Annotated[
        PayloadConfig, Field(default_factory=PayloadConfig)
    ]

    random_seed: Annotated[
        int | None,
        Field(description="Seed for payload generation. Unset means non-reproducible."),
    ] = None

    @model_validator(mode="before")
    @classmethod
    def _expand_shorthands(cls, data: Any) -> Any:
        """Expand ``vus`` + ``duration`` into one stage and normalize checks.

        ``{"vus": 5, "duration": "30s"}`` becomes ``stages=[30s:5]`` with
        ``start_vus=5``, i.e. constant load from the first instant.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)

        vus = data.pop("vus", None)
        duration = data.pop("duration", None)
        if vus is not None or duration is not None:
            if vus is None or duration is None:
                raise ValueError(
                    "'vus' and 'duration' must be given together, e.g. --vus 5 --duration 30s"
                )
            if data.get("stages"):
                raise ValueError(
                    "Use either 'vus'/'duration' or 'stages', not both. "
                    "'vus'/'duration' is shorthand for a single constant stage."
                )
            data["stages"] = [{"duration": duration, "target": vus}]
            data.setdefault("start_vus", vus)

        if data.get("max_response_time_ms") is not None:
            checks = [CheckName(c) for c in data.get("checks", RunDefaults.CHECKS)]
            if CheckName.RESPONSE_TIME not in checks:
                checks.append(CheckName.RESPONSE_TIME)
            data["checks"] = checks
        return data

    @field_validator("stages", mode="before")
    @classmethod
    def _parse_stages(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.split(",")
        if isinstance(v, list | tuple):
            return [Stage.parse(s) if isinstance(s, str) else s for s in v]
        return v

    @field_validator("thresholds", mode="before")
    @classmethod
    def _parse_thresholds(cls, v: Any) -> Any:
        return coerce_thresholds(v)

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid base URL '{v}'. It must start with http:// or https://, "
                "e.g. --base-url http://localhost:3000"
            )
        return v.rstrip("/")

    @field_validator("signup_path", "health_path")
    @classmethod
    def _check_path(cls, v: str) -> str:
        return v if v.startswith("/") else f"/{v}"

    @model_validator(mode="after")
    def _check_response_time_check(self) -> "RunConfig":
        if CheckName.RESPONSE_TIME in self.checks and self.max_response_time_ms is None:
            raise ValueError(
                "The 'response time' check needs a limit. Set max_response_time_ms "
                "(--max-response-time-ms), which also enables the check."
            )
        if len(set(self.checks)) != len(self.checks):
            raise ValueError(f"Duplicate checks configured: {[str(c) for c in self.checks]}")
        return self

    @property
    def total_duration(self) -> float:
        return sum(stage.duration for stage in self.stages)

    @property
    def max_target(self) -> int:
        return max(self.start_vus, *(stage.target for stage in self.stages))

    @property
    def signup_url(self) -> str:
        return f"{self.base_url}{self.signup_path}"

    @property
    def health_url(self) -> str:
        return f"{self.base_url}{self.health_path}"
