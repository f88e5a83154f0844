# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0


class LoadPerfError(Exception):
    """Base class for all loadperf errors."""


class ConfigurationError(LoadPerfError):
    """The run configuration is invalid. Raised before any request is sent."""


class SetupError(LoadPerfError):
    """The run could not be started. No workers were started and no metrics exist."""


class HealthCheckFailedError(SetupError):
    """The target service did not pass its pre-run health check."""

    def __init__(
        self, url: str, status_code: int | None = None, reason: str | None = None
    ) -> None:
        self.url = url
        self.status_code = status_code
        self.reason = reason
        detail = f"status {status_code}" if status_code is not None else reason
        super().__init__(f"Server not reachable at {url}: {detail}")


class RecorderSealedError(LoadPerfError):
    """An outcome arrived after the recorder was sealed for final evaluation."""


class RunStateError(LoadPerfError):
    """A run operation was attempted in a state that does not allow it."""
