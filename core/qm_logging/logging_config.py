"""
core/qm_logging/logging_config.py
=================================

Process-wide setup for the stdlib ``logging`` tree.

Modules only ever do ``logger = logging.getLogger(__name__)``; the host
application calls :func:`configure_logging` once at startup.
"""

from __future__ import annotations

import logging
from typing import Optional

ROOT_LOGGER_NAMES = ("core", "sop_documents")

_configured = False


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None, *, force: bool = False) -> None:
    """Attach a stream handler to the package loggers.

    Level and format default to the ``[Logging]`` section of the configuration.
    Repeated calls are no-ops unless *force* is set.
    """
    global _configured
    if _configured and not force:
        return

    if level is None or fmt is None:
        from core.config.config_service import config_service

        level = level or config_service.logging.level
        fmt = fmt or config_service.logging.format

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt))

    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO

    for name in ROOT_LOGGER_NAMES:
        log = logging.getLogger(name)
        for old in list(log.handlers):
            if getattr(old, "_sopflow_handler", False):
                log.removeHandler(old)
        handler._sopflow_handler = True  # type: ignore[attr-defined]
        log.addHandler(handler)
        log.setLevel(numeric)

    _configured = True


def reset_logging() -> None:
    """Remove handlers installed by :func:`configure_logging` (tests)."""
    global _configured
    for name in ROOT_LOGGER_NAMES:
        log = logging.getLogger(name)
        for old in list(log.handlers):
            if getattr(old, "_sopflow_handler", False):
                log.removeHandler(old)
        log.setLevel(logging.NOTSET)
    _configured = False
