from __future__ import annotations

"""
Trace Domain Data Models.

A trace result is a call tree expressed as nested label mappings. Leaves
are empty mappings. The engine failure sentinel is itself a valid trace
result so that the display layer can always render something.
"""

from enum import Enum
from typing import Any, Dict

TraceResult = Dict[str, "TraceResult"]

ENGINE_FAILURE_MESSAGE = (
    "💣💥 - sorry! we've encountered an unrecoverable error :/ "
    "Please file an issue in our repository and mention the codebase. thanks!"
)


class ScopeMode(Enum):
    """Policy for which files take part in a trace query."""
    WORKSPACE = "workspace"
    KNOWN_FILES = "known_files"

    @classmethod
    def parse(cls, value: Any) -> "ScopeMode":
        if isinstance(value, ScopeMode):
            return value
        return cls(str(value).strip().lower())


class TraceDirection(Enum):
    """Which call edges the trace engine follows."""
    ALL = "all"
    INTERNAL = "internal"
    EXTERNAL = "external"


def engine_failure_result() -> TraceResult:
    """Build the single-entry result shown when the trace engine fails."""
    return {ENGINE_FAILURE_MESSAGE: {}}


def normalize_trace_result(raw: Any) -> TraceResult:
    """
    Coerce raw engine output into a TraceResult.

    Keys become strings and any non-mapping value (null, booleans, strings
    emitted for leaves) becomes an empty mapping.
    """
    if not isinstance(raw, dict):
        return {}
    return {str(k): normalize_trace_result(v) for k, v in raw.items()}
