from __future__ import annotations

"""
Logging Lifecycle.

configure_logging() attaches this package's handlers to one logger (the
'solcockpit' hierarchy by default) and is idempotent; shutdown_logging()
detaches them again. In queue mode the output handlers run on a
QueueListener thread so that the threads resolving editor selections
never block on file I/O.
"""

import atexit
import logging
import os
import queue
import sys
from logging.handlers import QueueHandler, QueueListener
from typing import Optional

from solcockpit.infra.fs import get_user_data_dir
from solcockpit.infra.logging.config import PACKAGE_LOGGER, LoggingConfig
from solcockpit.infra.logging.handlers import _is_our_handler, _tag_handler, build_output_handlers

_CONFIGURED_FLAG_ATTR: str = "_solcockpit_configured"
_QUEUE_LISTENER_ATTR: str = "_solcockpit_queue_listener"


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_default_log_path(file_name: str = "solcockpit.log") -> str:
    """Location of the persistent log inside the user data directory."""
    return os.path.join(get_user_data_dir(), "logs", file_name)


def configure_logging(cfg: LoggingConfig, *, force: bool = False) -> logging.Logger:
    """
    Install console and file output on the configured logger.

    Args:
        cfg: Output settings.
        force: Re-install even if this logger was already configured.

    Returns:
        logging.Logger: The configured logger.
    """
    target = logging.getLogger(cfg.logger_name)
    if getattr(target, _CONFIGURED_FLAG_ATTR, False) and not force:
        return target

    _detach(target)
    target.setLevel(cfg.level_number)
    target.propagate = cfg.propagate

    outputs = build_output_handlers(cfg)
    if not outputs:
        return target

    if cfg.use_queue:
        records: queue.Queue = queue.Queue(-1)
        listener = QueueListener(records, *outputs, respect_handler_level=True)
        listener.start()
        atexit.register(_stop_listener, listener)
        target.addHandler(_tag_handler(QueueHandler(records)))
        setattr(target, _QUEUE_LISTENER_ATTR, listener)
    else:
        for handler in outputs:
            target.addHandler(handler)

    setattr(target, _CONFIGURED_FLAG_ATTR, True)
    target.debug(
        f"Logging configured: level={cfg.level}, queue={cfg.use_queue}, file={cfg.log_file or '-'}"
    )
    return target


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def shutdown_logging(logger_name: str = PACKAGE_LOGGER) -> None:
    """Flush and detach everything configure_logging() installed on logger_name."""
    target = logging.getLogger(logger_name)
    _detach(target)
    target.setLevel(logging.NOTSET)
    target.propagate = True
    setattr(target, _CONFIGURED_FLAG_ATTR, False)


# ==============================================================================
# PRIVATE HELPERS
# ==============================================================================

def _detach(target: logging.Logger) -> None:
    _stop_listener(getattr(target, _QUEUE_LISTENER_ATTR, None))
    setattr(target, _QUEUE_LISTENER_ATTR, None)
    for handler in list(target.handlers):
        if _is_our_handler(handler):
            target.removeHandler(handler)
            handler.close()


def _stop_listener(listener: Optional[QueueListener]) -> None:
    # stop() on an already joined listener raises; atexit may call this a second time
    if listener is not None and getattr(listener, "_thread", None) is not None:
        try:
            listener.stop()
        except RuntimeError as e:
            sys.stderr.write(f"WARNING: log listener did not stop cleanly: {e}\n")
