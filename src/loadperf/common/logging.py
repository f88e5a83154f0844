# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging

from rich.console import Console
from rich.logging import RichHandler

from loadperf.common.environment import Environment
from loadperf.common.loadperf_logger import TRACE

_LEVEL_ALIASES = {"TRACE": TRACE}


def resolve_log_level(level: str | int | None) -> int:
    """Map a level name (including TRACE) or number to a logging level."""
    if level is None:
        level = Environment.LOGGING.LEVEL
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name in _LEVEL_ALIASES:
        return _LEVEL_ALIASES[name]
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(
            f"Unknown log level '{level}'. Use one of TRACE, DEBUG, INFO, WARNING, ERROR."
        )
    return resolved


def setup_rich_logging(level: str | int | None = None) -> None:
    """Route all ``loadperf`` logging through a rich handler on stderr.

    The summary tables go to stdout, so logs must not interleave with them.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_path=False,
        log_time_format="%H:%M:%S.%f",
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(handler)
    root.setLevel(resolve_log_level(level))

    # httpx logs one INFO line per request, which floods the console under load.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
