from __future__ import annotations

"""
Function Call Trace Engine.

Builds the call tree rooted at one 'Container::member' across a set of
Solidity files. Internal calls (bare 'f(...)', 'super.f(...)') are resolved
through the linearized base list of the contract being traced; external
calls ('x.f(...)', 'this.f(...)', 'Lib.f(...)') are resolved to the
declaring contract when that is unambiguous, otherwise reported as an
unresolved leaf.

Output is a nested label mapping (json_output=True) or its ASCII rendering.
"""

import logging
from typing import Callable, Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from solcockpit.core.analysis.sol_outline import SolidityParseError, SourceUnit, parse_solidity_file
from solcockpit.core.analysis.tree_renderer import render_trace_text
from solcockpit.domain.code_models import (
    CONSTRUCTOR_NAME,
    FALLBACK_NAME,
    CallSite,
    ContainerRef,
    FunctionRef,
    ModifierRef,
)
from solcockpit.domain.trace_models import TraceDirection, TraceResult

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 32

_VISIBILITY_TAGS: Dict[str, str] = {
    "public": "Pub",
    "external": "Ext",
    "internal": "Int",
    "private": "Prv",
}

# Receivers that never refer to a user contract
_BUILTIN_RECEIVERS: FrozenSet[str] = frozenset({"abi", "msg", "block", "tx", "bytes", "string", "type"})

# Members of address and array types
_BUILTIN_MEMBERS: FrozenSet[str] = frozenset({
    "transfer", "send", "call", "delegatecall", "staticcall", "callcode",
    "push", "pop", "value", "gas",
})

Edge = Tuple[str, Optional[str], Optional[FunctionRef]]


class TraceEngineError(Exception):
    """Raised when a trace cannot be produced (unknown target, unreadable source)."""


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

class FunctionTraceEngine:
    """
    Call-trace engine over outlined Solidity sources.

    Attributes:
        include_modifiers: Add modifier invocations as leaf steps.
        max_depth: Recursion bound for very deep call chains.
    """

    def __init__(
            self,
            load_unit: Callable[[str], SourceUnit] = parse_solidity_file,
            include_modifiers: bool = False,
            max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._load_unit = load_unit
        self.include_modifiers = include_modifiers
        self.max_depth = max_depth

    def trace(
            self,
            target: str,
            direction: str = TraceDirection.ALL.value,
            files: Sequence[str] = (),
            json_output: bool = True,
    ):
        """
        Trace the calls made by one function.

        Args:
            target: 'Container::member'; '<Constructor>' and '<Fallback>' are accepted.
            direction: 'all', 'internal' or 'external'.
            files: Source files forming the resolution universe.
            json_output: Return the nested mapping instead of rendered text.

        Returns:
            TraceResult or str: One root entry (the target) with its call tree.

        Raises:
            TraceEngineError: Unknown direction, malformed target, unreadable
                              file or a target not declared in the files.
        """
        try:
            mode = TraceDirection(direction)
        except ValueError as e:
            raise TraceEngineError(f"Unknown trace direction: {direction!r}") from e

        container_name, member = _split_target(target)
        workspace = _Workspace(self._load_units(files))

        function = workspace.lookup_function(container_name, _member_key(member))
        if function is None:
            raise TraceEngineError(f"Function '{target}' not found in {len(files)} file(s)")

        walker = _Walker(workspace, mode, self.include_modifiers, self.max_depth)
        result: TraceResult = {
            _label(function): walker.expand(container_name, function, frozenset({_qualified(function)}), 1)
        }
        logger.debug(f"Traced {target} over {len(workspace.contracts)} container(s)")

        if json_output:
            return result
        return render_trace_text(result)

    def _load_units(self, files: Iterable[str]) -> List[SourceUnit]:
        units: List[SourceUnit] = []
        seen = set()
        for path in files:
            if path in seen:
                continue
            seen.add(path)
            try:
                units.append(self._load_unit(path))
            except SolidityParseError as e:
                raise TraceEngineError(str(e)) from e
        return units


# -----------------------------------------------------------------------------
# RESOLUTION
# -----------------------------------------------------------------------------

class _Workspace:
    """Container lookup table with memoized base linearization."""

    def __init__(self, units: Iterable[SourceUnit]) -> None:
        self.contracts: Dict[str, ContainerRef] = {}
        for unit in units:
            for name, container in unit.contracts.items():
                if name in self.contracts:
                    logger.debug(f"Duplicate container '{name}' in {unit.document_id}, keeping first")
                    continue
                self.contracts[name] = container
        self._linearized: Dict[str, List[str]] = {}

    def linearize(self, name: str) -> List[str]:
        """Most derived first, then bases right to left, each container once."""
        if name in self._linearized:
            return self._linearized[name]
        self._linearized[name] = [name]

        order = [name]
        container = self.contracts.get(name)
        if container is not None:
            for base in reversed(container.bases):
                for ancestor in self.linearize(base):
                    if ancestor not in order:
                        order.append(ancestor)
        self._linearized[name] = order
        return order

    def lookup_function(
            self,
            contract_name: str,
            key: Optional[str],
            after: Optional[str] = None,
    ) -> Optional[FunctionRef]:
        """
        Find the function a call to key binds to from contract_name.

        Implementations win over body-less declarations; 'after' restricts
        the search to the bases following that container (super calls).
        """
        order = self.linearize(contract_name)
        if after is not None and after in order:
            order = order[order.index(after) + 1:]

        declaration: Optional[FunctionRef] = None
        for name in order:
            container = self.contracts.get(name)
            if container is None or key not in container.functions:
                continue
            fn = container.functions[key]
            if fn.has_body:
                return fn
            if declaration is None:
                declaration = fn
        return declaration

    def lookup_modifier(self, contract_name: str, name: str) -> Optional[ModifierRef]:
        for cname in self.linearize(contract_name):
            container = self.contracts.get(cname)
            if container is not None and name in container.modifiers:
                return container.modifiers[name]
        return None

    def implementers(self, name: str) -> List[ContainerRef]:
        return [
            c for c in self.contracts.values()
            if c.kind != "interface" and name in c.functions and c.functions[name].has_body
        ]


class _Walker:
    """Depth-first expansion of call sites into a nested label mapping."""

    def __init__(self, workspace: _Workspace, mode: TraceDirection, include_modifiers: bool, max_depth: int) -> None:
        self.workspace = workspace
        self.mode = mode
        self.include_modifiers = include_modifiers
        self.max_depth = max_depth

    def expand(self, context: str, function: FunctionRef, path: FrozenSet[str], depth: int) -> TraceResult:
        children: TraceResult = {}
        if depth > self.max_depth:
            logger.debug(f"Trace depth limit reached at {_qualified(function)}")
            return children

        if self.include_modifiers:
            for modifier_name in function.modifiers:
                modifier = self.workspace.lookup_modifier(context, modifier_name)
                if modifier is not None:
                    children.setdefault(f"{modifier.container_name}::{modifier.name} | [Mod]", {})

        for call in function.calls:
            edge = self._resolve(context, function, call)
            if edge is None:
                continue
            label, next_context, callee = edge

            if callee is None or next_context is None:
                children.setdefault(label, {})
                continue
            if label in children:
                continue

            qualified = _qualified(callee)
            if qualified in path:
                children.setdefault(f"{label} (recursive)", {})
                continue
            children[label] = self.expand(next_context, callee, path | {qualified}, depth + 1)

        return children

    def _resolve(self, context: str, function: FunctionRef, call: CallSite) -> Optional[Edge]:
        follow_internal = self.mode in (TraceDirection.ALL, TraceDirection.INTERNAL)
        follow_external = self.mode in (TraceDirection.ALL, TraceDirection.EXTERNAL)
        receiver = call.receiver

        if receiver is None or receiver == "super":
            if not follow_internal:
                return None
            after = function.container_name if receiver == "super" else None
            callee = self.workspace.lookup_function(context, call.name, after=after)
            return (_label(callee), context, callee) if callee else None

        if receiver == "this":
            callee = self.workspace.lookup_function(context, call.name)
            if callee is None or not follow_external:
                return None
            return _label(callee), context, callee

        if receiver in self.workspace.contracts:
            callee = self.workspace.lookup_function(receiver, call.name)
            if callee is None:
                return None
            container = self.workspace.contracts[callee.container_name]
            is_internal = container.kind == "library" and callee.visibility in ("internal", "private")
            if (is_internal and not follow_internal) or (not is_internal and not follow_external):
                return None
            return _label(callee), receiver, callee

        if not follow_external or receiver in _BUILTIN_RECEIVERS:
            return None

        implementers = self.workspace.implementers(call.name)
        if len(implementers) == 1:
            callee = implementers[0].functions[call.name]
            return _label(callee), implementers[0].name, callee

        if call.name in _BUILTIN_MEMBERS:
            return None
        return f"{receiver}.{call.name} | [Ext]", None, None


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _split_target(target: str) -> Tuple[str, str]:
    container, sep, member = str(target).partition("::")
    if not sep or not container or not member:
        raise TraceEngineError(f"Malformed trace target: {target!r} (expected 'Container::member')")
    return container, member


def _member_key(member: str) -> Optional[str]:
    if member == CONSTRUCTOR_NAME:
        return None
    if member == FALLBACK_NAME:
        return ""
    return member


def _qualified(function: FunctionRef) -> str:
    return f"{function.container_name}::{function.display_name}"


def _label(function: FunctionRef) -> str:
    tag = _VISIBILITY_TAGS.get(function.visibility, "Pub")
    label = f"{_qualified(function)} | [{tag}]"
    if function.mutability == "payable":
        label += " ($)"
    return label
