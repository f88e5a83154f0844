# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

import logging

import pytest
from rich.logging import RichHandler

from loadperf.common.environment import Environment
from loadperf.common.loadperf_logger import TRACE, LoadPerfLogger
from loadperf.common.logging import resolve_log_level, setup_rich_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    original = [h for h in root.handlers if isinstance(h, RichHandler)]
    level = root.level
    yield root
    for handler in list(root.handlers):
        if isinstance(handler, RichHandler):
            root.removeHandler(handler)
    for handler in original:
        root.addHandler(handler)
    root.setLevel(level)


@pytest.mark.parametrize(
    "level,expected",
    [("trace", TRACE), ("DEBUG", logging.DEBUG), (" warning ", logging.WARNING), (logging.ERROR, logging.ERROR)],
)  # fmt: skip
def test_resolve_log_level(level, expected):
    assert resolve_log_level(level) == expected


def test_resolve_log_level_defaults_to_environment(monkeypatch):
    monkeypatch.setattr(Environment.LOGGING, "LEVEL", "ERROR")
    assert resolve_log_level(None) == logging.ERROR


def test_unknown_level_rejected():
    with pytest.raises(ValueError, match="Unknown log level 'LOUD'"):
        resolve_log_level("LOUD")


def test_setup_installs_single_rich_handler(restore_root_logger):
    setup_rich_logging("DEBUG")
    setup_rich_logging("INFO")
    rich_handlers = [h for h in restore_root_logger.handlers if isinstance(h, RichHandler)]
    assert len(rich_handlers) == 1
    assert restore_root_logger.level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING


def test_trace_guard(restore_root_logger, caplog):
    logger = LoadPerfLogger("loadperf.test")
    restore_root_logger.setLevel(logging.DEBUG)
    assert logger.is_debug_enabled
    assert not logger.is_trace_enabled
    with caplog.at_level(TRACE, logger="loadperf.test"):
        logger.trace("tick")
    assert [(r.levelname, r.message) for r in caplog.records] == [("TRACE", "tick")]
