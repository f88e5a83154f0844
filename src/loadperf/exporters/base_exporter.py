# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import asyncio
from abc import ABC, abstractmethod
from pathlib import Path

from loadperf.common.mixins import LoadPerfLoggerMixin
from loadperf.exporters.exporter_config import ExporterConfig


class BaseFileExporter(LoadPerfLoggerMixin, ABC):
    """Base class for exporters that write a run report to one file.

    Subclasses provide the file name and the rendered content; writing happens
    off the event loop.
    """

    def __init__(self, config: ExporterConfig, **kwargs) -> None:
        super().__init__(**kwargs)
        self._report = config.report
        if config.output_dir is None:
            raise ValueError(f"{self.__class__.__name__} requires an output directory")
        self._output_dir = Path(config.output_dir)

    @abstractmethod
    def get_file_name(self) -> str:
        """Name of the file written inside the output directory."""

    @abstractmethod
    def _generate_content(self) -> str:
        """Render the report as the file's text content."""

    @property
    def file_path(self) -> Path:
        return self._output_dir / self.get_file_name()

    async def export(self) -> Path:
        """Write the export file and return its path."""
        content = self._generate_content()
        path = self.file_path
        await asyncio.to_thread(path.write_text, content, encoding="utf-8")
        self.debug(f"Wrote {path}")
        return path
