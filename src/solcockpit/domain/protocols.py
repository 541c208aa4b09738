from __future__ import annotations

"""
Collaborator Interfaces.

Structural types for the services the cockpit core consumes but does not
own: the tree widget of the host, the parsed code model, the call-trace
engine and workspace file enumeration. The in-repo implementations live in
core.services and core.analysis; hosts may substitute their own.
"""

from typing import Any, Iterable, List, Optional, Protocol, Sequence

from solcockpit.domain.code_models import ContainerRef, FunctionAt


class TreeDisplaySink(Protocol):
    """Host-side tree widget that renders a view's data."""

    def notify_changed(self) -> None: ...

    def set_empty_state_message(self, text: Optional[str]) -> None: ...

    def is_visible(self) -> bool: ...


class CodeModel(Protocol):
    """Parsed, position-addressable source unit."""

    document_id: str

    def get_function_at(self, line: int, column: int) -> Optional[FunctionAt]: ...

    @property
    def containers(self) -> Iterable[ContainerRef]: ...


class CodeModelProvider(Protocol):
    """Registry of parsed documents."""

    def get_source_unit(self, document_id: str) -> Optional[CodeModel]: ...

    def known_documents(self) -> List[str]: ...


class TraceEngine(Protocol):
    """External call-trace engine. May raise any exception on internal failure."""

    def trace(
            self,
            target: str,
            direction: str,
            files: Sequence[str],
            json_output: bool = True,
    ) -> Any: ...


class FileFinder(Protocol):
    """Workspace file enumeration bounded by exclusions and a result cap."""

    def find_files(
            self,
            glob_pattern: str,
            exclude_globs: Sequence[str],
            max_results: int,
    ) -> List[str]: ...
