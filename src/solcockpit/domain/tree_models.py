from __future__ import annotations

"""
Path Tree Data Models.

Provides the node type shared by every cockpit tree: workspace files,
flattened file lists, contract listings and virtual settings paths. The
variant of a node is explicit (kind + origin) and fixed at construction
instead of being inferred from optional fields.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, List, Optional


# -----------------------------------------------------------------------------
# DISCRIMINANTS
# -----------------------------------------------------------------------------

class NodeKind(Enum):
    """Structural role of a node inside the forest."""
    INTERIOR = "interior"
    LEAF = "leaf"


class NodeOrigin(Enum):
    """Payload variant of a node."""
    FILE = "file"
    VIRTUAL = "virtual"


class ListStyle(Enum):
    """Indexing mode of a PathIndex."""
    TREE = "tree"
    FLAT = "flat"

    @classmethod
    def parse(cls, value: Any) -> "ListStyle":
        if isinstance(value, ListStyle):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.TREE


# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(eq=False)
class PathNode:
    """
    One node of a path forest.

    Attributes:
        name: Single path segment represented by this node.
        full_path: Segments from the root to this node joined by the separator.
        kind: INTERIOR for intermediate segments, LEAF for terminal ones.
        origin: FILE for filesystem-backed nodes, VIRTUAL otherwise.
        label: Display text (the segment in tree mode, the full path in flat mode).
        terminal: True once the node was the last segment of an inserted path.
        metadata: Opaque payload attached at insertion (virtual nodes only).
        resource: Absolute filesystem path (file-backed nodes only).
        children: Child nodes in insertion order, unique by name.
        parent: Back-reference for upward navigation only.
    """
    name: str
    full_path: str
    kind: NodeKind
    origin: NodeOrigin
    label: str = ""
    terminal: bool = False
    metadata: Any = None
    resource: Optional[str] = None
    children: List["PathNode"] = field(default_factory=list)
    parent: Optional["PathNode"] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("PathNode.name must be a non-empty segment")
        if not self.label:
            self.label = self.name

    @property
    def is_leaf(self) -> bool:
        return self.kind is NodeKind.LEAF

    def iter_subtree(self) -> Iterator["PathNode"]:
        """Yield this node and all of its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_subtree()

    def shape(self) -> tuple:
        """Structural fingerprint (names, kinds, order) used for comparisons."""
        return (self.name, self.kind, tuple(c.shape() for c in self.children))


@dataclass(frozen=True)
class SettingDescriptor:
    """
    Metadata carried by the virtual leaves of the settings tree.

    Attributes:
        key: Full dotted configuration key.
        current_value: Value currently in effect.
        description: Human readable explanation of the flag.
    """
    key: str
    current_value: bool
    description: str = ""
