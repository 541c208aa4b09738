from __future__ import annotations

"""
Tree Renderer.

Converts cockpit data into ASCII representations: PathNode forests (the
explorer, contract and settings views) and nested trace mappings (function
traces). Used by the CLI and by the trace engine's text output.
"""

from typing import Callable, List, Mapping, Optional, Sequence

from solcockpit.domain.tree_models import PathNode

LabelFn = Callable[[PathNode], str]

_BRANCH = "├── "
_LAST = "└── "
_PIPE = "│   "
_SPACE = "    "


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render_path_forest(
        nodes: Sequence[PathNode],
        lines: List[str],
        prefix: str = "",
        label: Optional[LabelFn] = None,
) -> None:
    """
    Recursively transform a PathNode forest into a list of strings.

    Nodes keep their insertion order (the index already decided it).

    Args:
        nodes: Sibling nodes at the current level.
        lines: Accumulator list for output strings.
        prefix: Indentation prefix for the current recursion level.
        label: Optional formatter overriding node.label.
    """
    total = len(nodes)
    for i, node in enumerate(nodes):
        is_last = (i == total - 1)
        connector = _LAST if is_last else _BRANCH
        text = label(node) if label else node.label
        lines.append(f"{prefix}{connector}{text}")

        if node.children:
            new_prefix = prefix + (_SPACE if is_last else _PIPE)
            render_path_forest(node.children, lines, prefix=new_prefix, label=label)


def render_trace(result: Mapping[str, Mapping], lines: List[str], prefix: str = "") -> None:
    """
    Recursively transform a nested trace mapping into a list of strings.

    The first level is printed without connectors (it is the traced
    function itself); deeper levels use the standard connectors.
    """
    for root, children in result.items():
        lines.append(f"{prefix}{root}")
        _render_trace_children(children, lines, prefix)


def render_trace_text(result: Mapping[str, Mapping]) -> str:
    lines: List[str] = []
    render_trace(result, lines)
    return "\n".join(lines)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _render_trace_children(children: Mapping[str, Mapping], lines: List[str], prefix: str) -> None:
    entries = list(children.items())
    total = len(entries)
    for i, (entry, sub) in enumerate(entries):
        is_last = (i == total - 1)
        connector = _LAST if is_last else _BRANCH
        lines.append(f"{prefix}{connector}{entry}")
        if sub:
            _render_trace_children(sub, lines, prefix + (_SPACE if is_last else _PIPE))
