from __future__ import annotations

"""
Configuration Validation Service.

Normalizes the cockpit configuration dictionary before it reaches the
views: coerces types, restricts enumerated values and fills missing keys
with the domain defaults. Lenient mode repairs and warns; strict mode
raises on the first invalid value.
"""

import logging
from typing import Any, Callable, Dict, List, Sequence, Tuple

from solcockpit.domain.config import get_default_config

logger = logging.getLogger(__name__)

_TRUE_WORDS = frozenset({"true", "1", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"false", "0", "no", "n", "off"})


# -----------------------------------------------------------------------------
# COERCION REPORT
# -----------------------------------------------------------------------------

class _Report:
    """Collects warnings while fields are coerced; raises instead in strict mode."""

    def __init__(self, strict: bool) -> None:
        self.strict = strict
        self.warnings: List[str] = []

    def note(self, message: str) -> None:
        self.warnings.append(message)

    def reject(self, message: str, fallback: Any, error: type = TypeError) -> Any:
        if self.strict:
            raise error(message)
        self.warnings.append(f"{message} Using fallback.")
        return fallback

    # -- coercers -----------------------------------------------------------

    def string(self, field: str, value: Any, fallback: str) -> str:
        if value is None:
            return fallback
        if isinstance(value, str):
            return value.strip() or fallback
        return self.reject(f"Invalid field '{field}': expected str, received {type(value).__name__}.", fallback)

    def boolean(self, field: str, value: Any, fallback: bool) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return fallback
        if not self.strict:
            if isinstance(value, (int, float)) and value in (0, 1):
                self.note(f"Field '{field}' converted from number {value} to bool.")
                return bool(value)
            word = value.strip().lower() if isinstance(value, str) else None
            if word in _TRUE_WORDS or word in _FALSE_WORDS:
                self.note(f"Field '{field}' converted from '{value}' to {word in _TRUE_WORDS}.")
                return word in _TRUE_WORDS
        return self.reject(f"Invalid field '{field}': expected bool, received {type(value).__name__}.", fallback)

    def limit(self, field: str, value: Any, fallback: int) -> int:
        if value is None:
            return fallback
        if isinstance(value, int) and not isinstance(value, bool):
            if value > 0:
                return value
            return self.reject(f"Invalid field '{field}': must be positive, received {value}.", fallback, ValueError)
        if not self.strict and isinstance(value, str) and value.strip().isdigit() and int(value) > 0:
            self.note(f"Field '{field}' converted from '{value}' to int.")
            return int(value)
        return self.reject(f"Invalid field '{field}': expected int, received {type(value).__name__}.", fallback)

    def globs(self, field: str, value: Any, fallback: List[str]) -> List[str]:
        if value is None:
            return list(fallback)
        if isinstance(value, str) and not self.strict:
            self.note(f"Field '{field}' converted from CSV string to list.")
            return [x.strip() for x in value.split(",") if x.strip()]
        if not isinstance(value, list):
            return self.reject(
                f"Invalid field '{field}': expected list[str], received {type(value).__name__}.", list(fallback)
            )
        out: List[str] = []
        for i, item in enumerate(value):
            if not isinstance(item, str):
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if self.strict:
                    raise TypeError(msg)
                self.note(f"{msg} Item discarded.")
            elif item.strip():
                out.append(item.strip())
        return out

    def choice(self, field: str, value: Any, fallback: str, choices: Sequence[str]) -> str:
        if value is None:
            return fallback
        if isinstance(value, str) and value.strip().lower() in choices:
            return value.strip().lower()
        return self.reject(
            f"Invalid field '{field}': expected one of {list(choices)}, received {value!r}.", fallback, ValueError
        )


def _one_of(*choices: str) -> Callable[[_Report, str, Any, Any], Any]:
    return lambda report, field, value, fallback: report.choice(field, value, fallback, choices)


_SCHEMA: Dict[str, Callable[[_Report, str, Any, Any], Any]] = {
    "workspace_root": _Report.string,
    "source_glob": _Report.string,
    "trace.scope": _one_of("known_files", "workspace"),
    "trace.max_files": _Report.limit,
    "trace.include_modifiers": _Report.boolean,
    "explorer.max_files": _Report.limit,
    "explorer.include_flat_files": _Report.boolean,
    "flat_files.max_files": _Report.limit,
    "find_files.excludes": _Report.globs,
    "find_files.excludes_allow_flat": _Report.globs,
    "top_level_contracts.list_style": _one_of("tree", "flat"),
    "methods.mark_payable": _Report.boolean,
}


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises exceptions on invalid values instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and a
                                          list of warnings.
    """
    report = _Report(strict)
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        logger.warning(msg)
        report.reject(msg, None)
        return defaults, report.warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    for field, coerce in _SCHEMA.items():
        merged[field] = coerce(report, field, merged.get(field), defaults[field])

    return merged, report.warnings
