"""Logging helpers shared by the parser, the writeback layer and the CLI."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

_LOGGER_NAME = "uiforge"
LEVEL_ENV_VAR = "UIFORGE_LOG_LEVEL"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger below ``uiforge`` (``uiforge.parser``, ``uiforge.patcher``...)."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def record_warning(logger: logging.Logger, warnings: List[str], message: str) -> None:
    """Log ``message`` and keep it in ``warnings`` so callers can surface it in the model."""
    logger.warning(message)
    warnings.append(message)


def _resolve_level(verbose: bool) -> int:
    if verbose:
        return logging.DEBUG
    override = os.environ.get(LEVEL_ENV_VAR, "").strip().upper()
    if override:
        level = logging.getLevelName(override)
        if isinstance(level, int):
            return level
    return logging.INFO


def configure_logging(
    *, verbose: bool = False, log_file: Optional[Path] = None
) -> logging.Logger:
    """Attach console (stderr) and optional file handlers to the ``uiforge`` logger.

    ``--verbose`` wins over ``UIFORGE_LOG_LEVEL``; unknown level names fall back to INFO.
    Stdout is left alone so ``uiforge parse`` output stays valid JSON.
    """
    level = _resolve_level(verbose)
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter("[uiforge] %(levelname)s %(name)s: %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    return logger


__all__ = ["LEVEL_ENV_VAR", "configure_logging", "get_logger", "record_warning"]
