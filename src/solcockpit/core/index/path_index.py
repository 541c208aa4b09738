from __future__ import annotations

"""
Path Tree Indexing Engine.

Turns flat sequences of separator-delimited paths into a forest of
PathNode objects with shared prefixes, or (flat mode) into a plain list
of root leaves. Two payload variants share the algorithm:

- VirtualPathIndex: classification is positional (last segment is a leaf)
  and an optional metadata payload travels with the terminal node.
- FilePathIndex: paths are made workspace-relative and every new node is
  classified by probing the filesystem; a failed probe degrades the node
  to a leaf and is only logged.

Re-classification rule: a node becomes INTERIOR as soon as it gains its
first child, whatever it was created as.
"""

import logging
import os
import stat
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from solcockpit.domain.tree_models import ListStyle, NodeKind, NodeOrigin, PathNode
from solcockpit.infra.fs import relative_to_workspace

logger = logging.getLogger(__name__)

PathEntry = Union[str, Tuple[str, Any]]
PathEntries = Union[Mapping[str, Any], Iterable[PathEntry]]


# -----------------------------------------------------------------------------
# GENERIC (VIRTUAL) INDEX
# -----------------------------------------------------------------------------

class PathIndex:
    """
    Forest of path segments.

    Lifecycle: created empty, load() replaces the whole forest, add_path()
    extends it. There is no removal; rebuild with load() instead.
    """

    origin = NodeOrigin.VIRTUAL

    def __init__(self, list_style: Union[str, ListStyle] = ListStyle.TREE, separator: str = "/") -> None:
        if not separator:
            raise ValueError("separator must be a non-empty string")
        self.list_style = ListStyle.parse(list_style)
        self.separator = separator
        self._roots: List[PathNode] = []

    # -- queries ------------------------------------------------------------

    def get_roots(self) -> List[PathNode]:
        return self._roots

    def get_children(self, node: Optional[PathNode] = None) -> List[PathNode]:
        if node is None:
            return self._roots
        return node.children

    @staticmethod
    def get_parent(node: PathNode) -> Optional[PathNode]:
        return node.parent

    def walk(self) -> Iterator[PathNode]:
        """Yield every node of the forest in pre-order."""
        for root in self._roots:
            yield from root.iter_subtree()

    def terminal_paths(self) -> List[str]:
        """Full paths of all nodes that terminated an inserted path."""
        return [n.full_path for n in self.walk() if n.terminal]

    def shape(self) -> tuple:
        return tuple(r.shape() for r in self._roots)

    def __len__(self) -> int:
        return len(self._roots)

    # -- mutation -----------------------------------------------------------

    def load(self, entries: PathEntries) -> None:
        """
        Clear the forest and rebuild it from entries.

        Args:
            entries: Either a mapping of path -> metadata, or an iterable of
                     paths and/or (path, metadata) pairs.
        """
        self._roots = []
        for path, metadata in _iter_entries(entries):
            self.add_path(path, metadata)
        logger.debug(f"{type(self).__name__}: loaded {len(self._roots)} root node(s)")

    def add_path(self, path: str, metadata: Any = None) -> None:
        """Insert one path into the current forest."""
        if self.list_style is ListStyle.FLAT:
            self._add_path_flat(path, metadata)
        else:
            self._add_path_tree(path, metadata)

    # -- algorithm ----------------------------------------------------------

    def _add_path_tree(self, path: str, metadata: Any) -> None:
        rel_path = self._tree_path(path)
        segments = self._split(rel_path)
        if not segments:
            logger.debug(f"Ignoring path without segments: {path!r}")
            return

        siblings = self._roots
        parent: Optional[PathNode] = None
        last = len(segments) - 1

        for idx, name in enumerate(segments):
            node = _find(siblings, name)
            if node is None:
                full_path = self.separator.join(segments[: idx + 1])
                node = self._create_node(
                    name=name,
                    full_path=full_path,
                    kind=self._classify(full_path, is_last=(idx == last)),
                    metadata=metadata if idx == last else None,
                )
                self._attach(node, parent, siblings)

            if idx == last:
                node.terminal = True
                if node.metadata is None and metadata is not None:
                    node.metadata = metadata

            parent = node
            siblings = node.children

    def _add_path_flat(self, path: str, metadata: Any) -> None:
        segments = self._split(path)
        if not segments:
            logger.debug(f"Ignoring path without segments: {path!r}")
            return
        node = self._create_node(
            name=segments[-1],
            full_path=path,
            kind=NodeKind.LEAF,
            metadata=metadata,
        )
        node.label = path
        node.terminal = True
        self._roots.append(node)

    def _attach(self, node: PathNode, parent: Optional[PathNode], siblings: List[PathNode]) -> None:
        node.parent = parent
        if parent is not None and parent.kind is NodeKind.LEAF:
            parent.kind = NodeKind.INTERIOR
        siblings.append(node)

    def _split(self, path: str) -> List[str]:
        return [s for s in str(path).split(self.separator) if s]

    # -- variant hooks ------------------------------------------------------

    def _tree_path(self, path: str) -> str:
        return path

    def _classify(self, full_path: str, is_last: bool) -> NodeKind:
        return NodeKind.LEAF if is_last else NodeKind.INTERIOR

    def _create_node(self, name: str, full_path: str, kind: NodeKind, metadata: Any) -> PathNode:
        return PathNode(
            name=name,
            full_path=full_path,
            kind=kind,
            origin=NodeOrigin.VIRTUAL,
            metadata=metadata,
        )


class VirtualPathIndex(PathIndex):
    """Index over non-filesystem identifiers (settings keys, trace labels)."""


# -----------------------------------------------------------------------------
# FILE-BACKED INDEX
# -----------------------------------------------------------------------------

class FilePathIndex(PathIndex):
    """
    Index over filesystem paths below a workspace root.

    Tree mode strips the workspace prefix before splitting; flat mode keeps
    the original path string as label. Metadata is not attached to
    file-backed nodes.
    """

    origin = NodeOrigin.FILE

    def __init__(
            self,
            workspace_root: str,
            list_style: Union[str, ListStyle] = ListStyle.TREE,
            separator: str = os.sep,
    ) -> None:
        super().__init__(list_style, separator)
        self.workspace_root = os.path.abspath(workspace_root)

    def _tree_path(self, path: str) -> str:
        return relative_to_workspace(str(path), self.workspace_root)

    def _classify(self, full_path: str, is_last: bool) -> NodeKind:
        abs_path = self._absolute(full_path)
        try:
            mode = os.lstat(abs_path).st_mode
        except OSError as e:
            logger.warning(f"Cannot stat '{abs_path}', treating it as a file: {e}")
            return NodeKind.LEAF
        return NodeKind.INTERIOR if stat.S_ISDIR(mode) else NodeKind.LEAF

    def _create_node(self, name: str, full_path: str, kind: NodeKind, metadata: Any) -> PathNode:
        return PathNode(
            name=name,
            full_path=full_path,
            kind=kind,
            origin=NodeOrigin.FILE,
            resource=self._absolute(full_path),
        )

    def _absolute(self, path: str) -> str:
        native = path.replace(self.separator, os.sep) if self.separator != os.sep else path
        if os.path.isabs(native):
            return native
        return os.path.join(self.workspace_root, native)


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _find(siblings: List[PathNode], name: str) -> Optional[PathNode]:
    for node in siblings:
        if node.name == name:
            return node
    return None


def _iter_entries(entries: PathEntries) -> Iterator[Tuple[str, Any]]:
    if isinstance(entries, Mapping):
        yield from entries.items()
        return
    for entry in entries:
        if isinstance(entry, (tuple, list)) and len(entry) == 2:
            yield str(entry[0]), entry[1]
        else:
            yield str(entry), None
