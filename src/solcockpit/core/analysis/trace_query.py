from __future__ import annotations

"""
Trace Query.

Builds the file universe for a trace (whole workspace or the documents
already known to the provider) and invokes the external trace engine for
one function. Engine crashes never propagate: they are logged and turned
into the engine failure sentinel.
"""

import logging
import os
from typing import List, Optional, Sequence

from solcockpit.domain.constants import MAX_TRACE_FILES, SOURCE_EXTENSION, SOURCE_GLOB
from solcockpit.domain.protocols import CodeModelProvider, FileFinder, TraceEngine
from solcockpit.domain.results import Ok, Result, engine_failure
from solcockpit.domain.trace_models import (
    ScopeMode,
    TraceDirection,
    TraceResult,
    engine_failure_result,
    normalize_trace_result,
)

logger = logging.getLogger(__name__)


class TraceQuery:
    """
    Trace orchestration for one workspace.

    Attributes:
        excludes: Exclusion globs applied in WORKSPACE scope.
        max_files: Cap on files handed to the engine in WORKSPACE scope.
        source_glob: Include glob for workspace discovery.
    """

    def __init__(
            self,
            provider: CodeModelProvider,
            engine: TraceEngine,
            file_finder: FileFinder,
            excludes: Optional[Sequence[str]] = None,
            max_files: int = MAX_TRACE_FILES,
            source_glob: str = SOURCE_GLOB,
    ) -> None:
        self.provider = provider
        self.engine = engine
        self.file_finder = file_finder
        self.excludes = list(excludes or [])
        self.max_files = max_files
        self.source_glob = source_glob

    # -- target set ---------------------------------------------------------

    def build_target_set(self, document_id: str, scope_mode: ScopeMode) -> List[str]:
        """
        Collect the files the engine may resolve calls against.

        WORKSPACE: every source file under the workspace, minus excludes,
        capped at max_files. KNOWN_FILES: the current document followed by
        every source document the provider has parsed, without duplicates.
        """
        scope_mode = ScopeMode.parse(scope_mode)
        if scope_mode is ScopeMode.WORKSPACE:
            files = self.file_finder.find_files(self.source_glob, self.excludes, self.max_files)
            logger.debug(f"Trace scope workspace: {len(files)} file(s)")
            return list(files)

        targets: List[str] = []
        for doc in [document_id, *self.provider.known_documents()]:
            if not doc or doc in targets:
                continue
            if os.path.splitext(doc)[1].lower() != SOURCE_EXTENSION:
                continue
            targets.append(doc)
        logger.debug(f"Trace scope known files: {len(targets)} file(s)")
        return targets

    # -- engine invocation --------------------------------------------------

    def trace_checked(self, container: str, member: str, target_set: Sequence[str]) -> Result[TraceResult]:
        """
        Trace 'container::member' and report engine crashes as Err(ENGINE_FAILURE).
        """
        target = f"{container}::{member}"
        try:
            raw = self.engine.trace(target, TraceDirection.ALL.value, list(target_set), json_output=True)
        except Exception as e:
            logger.error(f"Trace engine failed for {target}: {e}", exc_info=True)
            return engine_failure(f"{type(e).__name__}: {e}")
        return Ok(normalize_trace_result(raw))

    def trace(self, container: str, member: str, target_set: Sequence[str]) -> TraceResult:
        """Trace 'container::member'; an engine crash yields the failure sentinel."""
        outcome = self.trace_checked(container, member, target_set)
        if outcome.ok:
            return outcome.value
        return engine_failure_result()
