"""configure_logging installs exactly one handler per package logger."""
from __future__ import annotations

import logging

from core.qm_logging.logging_config import ROOT_LOGGER_NAMES, configure_logging, reset_logging


def _own_handlers(name: str):
    return [h for h in logging.getLogger(name).handlers if getattr(h, "_sopflow_handler", False)]


def test_configure_is_idempotent() -> None:
    try:
        configure_logging("DEBUG", "%(message)s", force=True)
        configure_logging("DEBUG", "%(message)s")
        configure_logging("WARNING", "%(message)s", force=True)
        for name in ROOT_LOGGER_NAMES:
            assert len(_own_handlers(name)) == 1
            assert logging.getLogger(name).level == logging.WARNING
    finally:
        reset_logging()
    for name in ROOT_LOGGER_NAMES:
        assert _own_handlers(name) == []


def test_unknown_level_falls_back_to_info() -> None:
    try:
        configure_logging("LOUD", "%(message)s", force=True)
        assert logging.getLogger("sop_documents").level == logging.INFO
    finally:
        reset_logging()
