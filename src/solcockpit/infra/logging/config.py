from __future__ import annotations

"""
Logging Configuration Models.

The cockpit runs inside a host process (an editor or the CLI), so the
configuration targets the package logger hierarchy rather than the root
logger unless told otherwise.
"""

import logging
from dataclasses import dataclass
from typing import Optional

PACKAGE_LOGGER = "solcockpit"

_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}


@dataclass(frozen=True)
class LoggingConfig:
    """
    Settings for configure_logging().

    Attributes:
        level: Minimum severity name ('DEBUG', 'INFO', ...); unknown names mean INFO.
        logger_name: Logger to configure; '' targets the root logger.
        propagate: Whether package records also reach the host's handlers.
        console: Emit records on stderr.
        log_file: Optional rotating log file.
        use_queue: Hand records to a QueueListener thread instead of writing inline.
    """
    level: str = "INFO"
    logger_name: str = PACKAGE_LOGGER
    propagate: bool = True
    console: bool = True
    log_file: Optional[str] = None
    use_queue: bool = True

    max_bytes: int = 1024 * 1024
    backup_count: int = 2

    console_fmt: str = "%(levelname)s | %(name)s | %(message)s"
    file_fmt: str = "%(asctime)s | %(levelname)s | %(threadName)s | %(name)s | %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"

    @property
    def level_number(self) -> int:
        name = str(self.level or "").strip().upper()
        value = logging.getLevelName(_LEVEL_ALIASES.get(name, name))
        return value if isinstance(value, int) else logging.INFO

    @classmethod
    def for_cli(cls, debug: bool = False, log_file: Optional[str] = None) -> "LoggingConfig":
        """Console logging for a terminal session; the CLI owns the process, so nothing propagates."""
        return cls(level="DEBUG" if debug else "INFO", propagate=False, log_file=log_file)
