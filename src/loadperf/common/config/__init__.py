# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

from loadperf.common.config.base_config import BaseConfig
from loadperf.common.config.config_defaults import (
    OutputDefaults,
    PayloadDefaults,
    RunDefaults,
)
from loadperf.common.config.profiles import PROFILES, Profile, get_profile
from loadperf.common.config.run_config import PayloadConfig, RunConfig
from loadperf.common.config.stage_config import Stage, parse_duration
from loadperf.common.config.threshold_config import (
    SUPPORTED_AGGREGATIONS,
    Threshold,
    thresholds_from_mapping,
)

__all__ = [
    "PROFILES",
    "SUPPORTED_AGGREGATIONS",
    "BaseConfig",
    "OutputDefaults",
    "PayloadConfig",
    "PayloadDefaults",
    "Profile",
    "RunConfig",
    "RunDefaults",
    "Stage",
    "Threshold",
    "get_profile",
    "parse_duration",
    "thresholds_from_mapping",
]
