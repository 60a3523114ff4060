"""Application-wide logging configuration utilities."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_CONFIGURED = False


def configure_logging(level: int | str = logging.INFO, log_path: Optional[Path] = None) -> None:
    """Attach a single handler to the root logger.

    Parameters
    ----------
    level:
        The minimum logging level for the root logger, as a number or a level
        name such as ``"DEBUG"``.
    log_path:
        Write to this file when given, otherwise to standard error.

    Calling this more than once only adjusts the level.
    """

    global _CONFIGURED

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    if _CONFIGURED:
        return

    handler: logging.Handler
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root_logger.addHandler(handler)

    # The discovery client is chatty at INFO.
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)

    _CONFIGURED = True
    root_logger.debug("Logging configured (%s)", log_path or "stderr")
