# Backoffice
# Copyright (c) 2025 Kevin Wyjad
# Licensed under the Backoffice Non-Commercial Public License v1.0.
# See the LICENSE file in the project root for details.

"""Logging for the ``backoffice`` package and the dashboard scripts.

Package loggers own their handler and do not propagate, so a script that also
configures the root logger does not print each record twice.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from backoffice.config import get_setting

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def _resolve_level(level: str | int | None = None) -> int:
    """``BACKOFFICE_LOG_LEVEL`` wins over ``logging.level`` in the config."""

    if isinstance(level, int):
        return level
    name = level or os.getenv("BACKOFFICE_LOG_LEVEL") or get_setting("logging.level", "INFO")
    return getattr(logging, str(name).upper(), logging.INFO)


def _stream_handler() -> logging.Handler:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))
    return handler


@lru_cache(maxsize=None)
def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level())
    if not any(isinstance(handler, logging.StreamHandler) for handler in logger.handlers):
        logger.addHandler(_stream_handler())
    logger.propagate = False
    return logger


def configure_root_logger(*, level: str | int | None = None) -> None:
    """Root logging for scripts (third-party libraries log through it)."""

    root = logging.getLogger()
    root.setLevel(_resolve_level(level))
    if not any(isinstance(handler, logging.StreamHandler) for handler in root.handlers):
        root.addHandler(_stream_handler())
