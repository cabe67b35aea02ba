"""Logging initialization for the worker and scripts embedding karaflow."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from karaflow.config import LoggingSettings, Settings

_CONFIGURED_FLAG = "_karaflow_configured"


def _log_file(cfg: LoggingSettings, log_dir: str) -> Path | None:
    if not cfg.file:
        return None
    path = Path(str(cfg.file))
    return path if path.is_absolute() else Path(log_dir) / path


def setup_logging(settings: Settings) -> None:
    """Attach handlers to the `karaflow` logger once per process.

    Records from `karaflow.*` stop at that logger, so the host's root
    configuration is neither used nor modified.
    """
    logger = logging.getLogger("karaflow")
    if getattr(logger, _CONFIGURED_FLAG, False):
        return

    cfg = settings.logging
    level = logging.getLevelName(str(cfg.level or "INFO").upper())
    if not isinstance(level, int):
        level = logging.INFO
    formatter = logging.Formatter(fmt=str(cfg.format), datefmt=str(cfg.datefmt))

    handlers: list[logging.Handler] = []
    if cfg.console:
        handlers.append(logging.StreamHandler())
    file_path = _log_file(cfg, settings.log_dir)
    if file_path is not None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                file_path,
                maxBytes=int(cfg.max_bytes),
                backupCount=int(cfg.backup_count),
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logger.setLevel(level)
    logger.handlers = handlers
    logger.propagate = False
    setattr(logger, _CONFIGURED_FLAG, True)
