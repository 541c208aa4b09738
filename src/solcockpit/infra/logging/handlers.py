from __future__ import annotations

"""
Logging Handler Factories.

Every handler built here is tagged so that reconfiguration and shutdown
only ever remove what this package installed, never handlers added by
the host editor.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import List, Optional

from solcockpit.infra.logging.config import LoggingConfig

_HANDLER_TAG_ATTR: str = "_solcockpit_handler"


def _tag_handler(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG_ATTR, True)
    return handler


def _is_our_handler(handler: logging.Handler) -> bool:
    return bool(getattr(handler, _HANDLER_TAG_ATTR, False))


def build_output_handlers(cfg: LoggingConfig) -> List[logging.Handler]:
    """
    Create the terminal and file handlers requested by cfg.

    A log file that cannot be opened is reported on stderr and skipped.
    """
    handlers: List[logging.Handler] = []
    level = cfg.level_number

    if cfg.console:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(level)
        console.setFormatter(logging.Formatter(cfg.console_fmt))
        handlers.append(_tag_handler(console))

    if cfg.log_file:
        rotating = _open_rotating_file(cfg)
        if rotating is not None:
            rotating.setLevel(level)
            rotating.setFormatter(logging.Formatter(cfg.file_fmt, datefmt=cfg.datefmt))
            handlers.append(_tag_handler(rotating))

    return handlers


def _open_rotating_file(cfg: LoggingConfig) -> Optional[RotatingFileHandler]:
    try:
        os.makedirs(os.path.dirname(os.path.abspath(cfg.log_file)), exist_ok=True)
        return RotatingFileHandler(
            cfg.log_file,
            maxBytes=int(cfg.max_bytes),
            backupCount=int(cfg.backup_count),
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"WARNING: cannot open log file '{cfg.log_file}': {e}\n")
        return None
