from __future__ import annotations

"""
Cockpit Views and Selection Dispatcher.

Each view owns one path index and one display sink. File views (explorer,
flat files, top-level contracts) are rebuilt on refresh; selection views
(function trace, public methods) recompute when the editor cursor moves,
through a latest-wins request slot. The Cockpit registers the views and
forwards selection events only to the visible ones.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from solcockpit.core.analysis.ftrace import FunctionTraceEngine
from solcockpit.core.analysis.selection_resolver import SelectionResolver
from solcockpit.core.analysis.trace_query import TraceQuery
from solcockpit.core.analysis.visibility_filter import SelectedFunction, select_externally_mutating
from solcockpit.core.index.path_index import FilePathIndex, PathIndex, VirtualPathIndex
from solcockpit.core.services.contracts import scan_top_level_contracts
from solcockpit.core.services.registry import SourceUnitRegistry
from solcockpit.core.services.request_slot import RequestSlot
from solcockpit.core.services.scanner import WorkspaceFileFinder
from solcockpit.domain import constants as const
from solcockpit.domain.config import SETTING_DESCRIPTIONS
from solcockpit.domain.protocols import FileFinder, TreeDisplaySink
from solcockpit.domain.trace_models import ScopeMode, TraceResult, engine_failure_result
from solcockpit.domain.tree_models import ListStyle, PathNode, SettingDescriptor

logger = logging.getLogger(__name__)

# Trace labels may contain '/', so trace paths are joined with a control character
TRACE_PATH_SEPARATOR = "\x1f"

SinkFactory = Callable[[str], TreeDisplaySink]
Outcome = Tuple["ViewState", Any, Optional[str]]


# -----------------------------------------------------------------------------
# STATE AND EVENTS
# -----------------------------------------------------------------------------

class ViewState(Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    DISPLAYED = "displayed"
    FAILED = "failed"


@dataclass(frozen=True)
class SelectionEvent:
    """
    Editor cursor movement.

    Attributes:
        document_id: Active document, None when no editor is focused.
        line: 0-based line.
        column: 0-based column.
    """
    document_id: Optional[str]
    line: int
    column: int

    @property
    def is_actionable(self) -> bool:
        return bool(self.document_id) and self.line >= 0 and self.column >= 0


# -----------------------------------------------------------------------------
# BASE VIEW
# -----------------------------------------------------------------------------

class CockpitView:
    """
    Data provider behind one tree widget.

    Subclasses decide what fills the index; the navigation API simply
    exposes the index to the host.
    """

    view_id = "view"

    def __init__(self, sink: TreeDisplaySink, index: PathIndex) -> None:
        self.sink = sink
        self.index = index
        self.state = ViewState.IDLE

    # -- navigation ---------------------------------------------------------

    def get_roots(self) -> List[PathNode]:
        return self.index.get_roots()

    def get_children(self, node: Optional[PathNode] = None) -> List[PathNode]:
        return self.index.get_children(node)

    def get_parent(self, node: PathNode) -> Optional[PathNode]:
        return self.index.get_parent(node)

    # -- lifecycle ----------------------------------------------------------

    def refresh(self) -> None:
        self.sink.notify_changed()

    def on_selection_changed(self, event: SelectionEvent) -> None:
        """Selection-independent views ignore cursor movement."""

    def _show(self, state: ViewState, message: Optional[str] = None) -> None:
        self.state = state
        self.sink.set_empty_state_message(message)
        self.sink.notify_changed()


# -----------------------------------------------------------------------------
# FILE VIEWS
# -----------------------------------------------------------------------------

class ExplorerView(CockpitView):
    """All workspace source files as a folder tree."""

    view_id = "explorer"

    def __init__(self, sink: TreeDisplaySink, file_finder: FileFinder, config: Dict[str, Any]) -> None:
        super().__init__(sink, FilePathIndex(config["workspace_root"], ListStyle.TREE))
        self.file_finder = file_finder
        self.config = config

    def refresh(self) -> None:
        if self.config["explorer.include_flat_files"]:
            excludes = self.config["find_files.excludes_allow_flat"]
        else:
            excludes = self.config["find_files.excludes"]
        files = self.file_finder.find_files(
            self.config["source_glob"], excludes, self.config["explorer.max_files"]
        )
        self.index.load(files)
        logger.info(f"Explorer: {len(files)} source file(s)")
        self._show(ViewState.DISPLAYED)


class FlatFilesView(CockpitView):
    """Flattened sources ('*_flat.sol', 'flat_*.sol')."""

    view_id = "flat_files"

    def __init__(self, sink: TreeDisplaySink, file_finder: FileFinder, config: Dict[str, Any]) -> None:
        super().__init__(sink, FilePathIndex(config["workspace_root"], ListStyle.TREE))
        self.file_finder = file_finder
        self.config = config

    def refresh(self) -> None:
        files = self.file_finder.find_files(
            const.FLAT_FILES_GLOB,
            self.config["find_files.excludes_allow_flat"],
            self.config["flat_files.max_files"],
        )
        self.index.load(files)
        logger.info(f"Flat files: {len(files)} file(s)")
        self._show(ViewState.DISPLAYED)


class TopLevelContractsView(CockpitView):
    """
    Files declaring contracts that nothing else inherits from.

    Scanning is explicit (refresh) because it outlines the whole workspace.
    """

    view_id = "top_level_contracts"

    def __init__(self, sink: TreeDisplaySink, file_finder: FileFinder, config: Dict[str, Any]) -> None:
        list_style = ListStyle.parse(config["top_level_contracts.list_style"])
        super().__init__(sink, FilePathIndex(config["workspace_root"], list_style))
        self.file_finder = file_finder
        self.config = config
        self.contracts: Dict[str, str] = {}
        self.sink.set_empty_state_message(const.MSG_SCAN_CONTRACTS)

    def refresh(self) -> None:
        self.contracts = scan_top_level_contracts(
            self.file_finder,
            self.config["find_files.excludes"],
            self.config["explorer.max_files"],
            self.config["source_glob"],
        )
        paths = sorted(set(self.contracts.values()), key=lambda p: (os.path.basename(p), p))
        self.index.load(paths)
        self._show(ViewState.DISPLAYED, None if paths else const.MSG_SCAN_CONTRACTS)


class SettingsView(CockpitView):
    """Boolean configuration flags as a virtual tree split on '.'."""

    view_id = "settings"

    def __init__(self, sink: TreeDisplaySink, config: Dict[str, Any]) -> None:
        super().__init__(sink, VirtualPathIndex(ListStyle.TREE, separator="."))
        self.config = config

    def refresh(self, config: Optional[Dict[str, Any]] = None) -> None:
        if config is not None:
            self.config = config
        entries = {
            key: SettingDescriptor(key, value, SETTING_DESCRIPTIONS.get(key, ""))
            for key, value in sorted(self.config.items())
            if isinstance(value, bool)
        }
        self.index.load(entries)
        self._show(ViewState.DISPLAYED)


# -----------------------------------------------------------------------------
# SELECTION VIEWS
# -----------------------------------------------------------------------------

class SelectionView(CockpitView, ABC):
    """
    View recomputed on cursor movement.

    Work runs through a RequestSlot; _compute returns (state, data,
    empty-state message) and _apply publishes it. A _compute that raises
    ends in the _failure outcome, so the view never stays RESOLVING.
    """

    def __init__(self, sink: TreeDisplaySink, index: PathIndex, background: bool = False) -> None:
        super().__init__(sink, index)
        self.background = background
        self.slot = RequestSlot(self.view_id)
        self.document_id: Optional[str] = None
        self.sink.set_empty_state_message(const.MSG_CLICK_EDITOR)

    def on_selection_changed(self, event: SelectionEvent) -> None:
        self.state = ViewState.RESOLVING
        self.slot.submit(lambda: self._guarded_compute(event), self._apply, background=self.background)

    def _guarded_compute(self, event: SelectionEvent) -> Outcome:
        try:
            return self._compute(event)
        except Exception as e:
            logger.error(f"{self.view_id}: selection {event} could not be processed: {e}", exc_info=True)
            return self._failure()

    @abstractmethod
    def _compute(self, event: SelectionEvent) -> Outcome:
        """Resolve the event into (state, data, empty-state message)."""
        pass

    def _failure(self) -> Outcome:
        return ViewState.FAILED, {}, const.MSG_CLICK_EDITOR

    def _apply(self, outcome: Outcome) -> None:
        state, data, message = outcome
        self._load(data)
        self._show(state, message)

    @abstractmethod
    def _load(self, data: Any) -> None:
        """Fill the index from computed data."""
        pass


class FTraceView(SelectionView):
    """Call tree of the function under the cursor."""

    view_id = "ftrace"

    def __init__(
            self,
            sink: TreeDisplaySink,
            resolver: SelectionResolver,
            trace_query: TraceQuery,
            scope_mode: ScopeMode = ScopeMode.KNOWN_FILES,
            background: bool = False,
    ) -> None:
        super().__init__(sink, VirtualPathIndex(ListStyle.TREE, separator=TRACE_PATH_SEPARATOR), background)
        self.resolver = resolver
        self.trace_query = trace_query
        self.scope_mode = ScopeMode.parse(scope_mode)
        self.data: TraceResult = {}

    def _compute(self, event: SelectionEvent) -> Outcome:
        resolved = self.resolver.resolve(event.document_id, event.line, event.column)
        if not resolved.ok:
            return ViewState.IDLE, {}, const.MSG_CLICK_EDITOR

        element = resolved.value
        if element.member_name is None:
            logger.debug(f"FTrace: contract-level selection in {element.container_name}, nothing to trace")
            return ViewState.IDLE, {}, const.MSG_CLICK_EDITOR

        self.document_id = event.document_id
        targets = self.trace_query.build_target_set(event.document_id, self.scope_mode)
        outcome = self.trace_query.trace_checked(element.container_name, element.member_name, targets)
        if outcome.ok:
            return ViewState.DISPLAYED, outcome.value, None
        return self._failure()

    def _failure(self) -> Outcome:
        return ViewState.FAILED, engine_failure_result(), None

    def _load(self, data: TraceResult) -> None:
        self.data = data
        self.index.load(trace_paths(data))


class PublicMethodsView(SelectionView):
    """Externally callable, state-changing functions of the contract under the cursor."""

    view_id = "public_methods"

    def __init__(
            self,
            sink: TreeDisplaySink,
            resolver: SelectionResolver,
            mark_payable: bool = True,
            background: bool = False,
    ) -> None:
        super().__init__(sink, VirtualPathIndex(ListStyle.TREE, separator="/"), background)
        self.resolver = resolver
        self.mark_payable = mark_payable
        self.data: Dict[str, SelectedFunction] = {}

    def _compute(self, event: SelectionEvent) -> Outcome:
        resolved = self.resolver.resolve(event.document_id, event.line, event.column)
        if not resolved.ok or resolved.value.container is None:
            return ViewState.IDLE, {}, const.MSG_CLICK_EDITOR

        self.document_id = event.document_id
        selected = select_externally_mutating(resolved.value.container.functions)
        return ViewState.DISPLAYED, selected, None

    def _load(self, data: Dict[str, SelectedFunction]) -> None:
        self.data = data
        entries: List[Tuple[str, Any]] = []
        for name, selected in data.items():
            entries.append((name, selected))
            entries.extend((f"{name}/{modifier}", modifier) for modifier in selected.modifiers)
        self.index.load(entries)

        if self.mark_payable:
            for node in self.index.get_roots():
                if isinstance(node.metadata, SelectedFunction) and node.metadata.payable:
                    node.label = f"{node.name} ($)"


def trace_paths(result: TraceResult, prefix: str = "") -> Iterator[str]:
    """Flatten a trace mapping into separator-joined label paths, parents first."""
    for label, children in result.items():
        path = f"{prefix}{TRACE_PATH_SEPARATOR}{label}" if prefix else label
        yield path
        yield from trace_paths(children, path)


# -----------------------------------------------------------------------------
# DISPATCHER
# -----------------------------------------------------------------------------

class Cockpit:
    """
    View registry and selection fan-out.

    Attributes:
        registry: Code Model Provider shared by the selection views.
        config: Validated configuration the views were built from.
    """

    def __init__(self, registry: SourceUnitRegistry, config: Dict[str, Any]) -> None:
        self.registry = registry
        self.config = config
        self.views: Dict[str, CockpitView] = {}

    def register(self, view: CockpitView) -> CockpitView:
        if view.view_id in self.views:
            raise ValueError(f"View already registered: {view.view_id}")
        self.views[view.view_id] = view
        return view

    def get(self, view_id: str) -> CockpitView:
        return self.views[view_id]

    def open_document(self, document_id: str, source: Optional[str] = None) -> bool:
        """Parse a document into the registry; False if it is not a usable source."""
        return self.registry.load(document_id, source) is not None

    def on_selection_changed(self, event: Optional[SelectionEvent]) -> int:
        """
        Forward a selection event to every visible view.

        Returns:
            int: Number of views the event was delivered to.
        """
        if event is None or not event.is_actionable:
            logger.debug(f"Ignoring selection event: {event}")
            return 0

        delivered = 0
        for view in self.views.values():
            if not view.sink.is_visible():
                continue
            view.on_selection_changed(event)
            delivered += 1
        return delivered

    def refresh(self, view_id: str) -> CockpitView:
        view = self.get(view_id)
        view.refresh()
        return view


def build_cockpit(
        config: Dict[str, Any],
        sink_factory: SinkFactory,
        registry: Optional[SourceUnitRegistry] = None,
        file_finder: Optional[FileFinder] = None,
        background: bool = False,
) -> Cockpit:
    """
    Wire every view against one workspace.

    Args:
        config: Validated configuration dictionary.
        sink_factory: Creates the display sink for a view id.
        registry: Shared provider; a fresh one is created if omitted.
        file_finder: Workspace enumeration; defaults to a filesystem walker.
        background: Run selection work in daemon threads.

    Returns:
        Cockpit: Dispatcher with all six views registered.
    """
    registry = registry or SourceUnitRegistry()
    file_finder = file_finder or WorkspaceFileFinder(config["workspace_root"])
    resolver = SelectionResolver(registry)
    trace_query = TraceQuery(
        provider=registry,
        engine=FunctionTraceEngine(include_modifiers=config["trace.include_modifiers"]),
        file_finder=file_finder,
        excludes=config["find_files.excludes"],
        max_files=config["trace.max_files"],
        source_glob=config["source_glob"],
    )

    cockpit = Cockpit(registry, config)
    cockpit.register(ExplorerView(sink_factory(ExplorerView.view_id), file_finder, config))
    cockpit.register(FlatFilesView(sink_factory(FlatFilesView.view_id), file_finder, config))
    cockpit.register(TopLevelContractsView(sink_factory(TopLevelContractsView.view_id), file_finder, config))
    cockpit.register(SettingsView(sink_factory(SettingsView.view_id), config))
    cockpit.register(FTraceView(
        sink_factory(FTraceView.view_id),
        resolver,
        trace_query,
        scope_mode=config["trace.scope"],
        background=background,
    ))
    cockpit.register(PublicMethodsView(
        sink_factory(PublicMethodsView.view_id),
        resolver,
        mark_payable=config["methods.mark_payable"],
        background=background,
    ))
    logger.debug(f"Cockpit ready with {len(cockpit.views)} view(s) for {config['workspace_root']}")
    return cockpit
