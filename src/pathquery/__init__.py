# 路徑樹模型（中立，不綁 Neo4j）
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Literal, Optional, Sequence

from .errors import (
    PathQueryError, PathNotFoundError, InvalidOrderTargetError,
    EmptyMatchError, InvalidTreeError, InvalidPathError,
)

Path = str
OrderDir = Literal["ASC", "DESC"]


class TreeNodeKind(Enum):
    NODE = "node"
    RELATIONSHIP = "relationship"
    PROPERTY = "property"


def variable_name(path: Path) -> str:
    """Cypher variable bound to the tree node at ``path``.

    ``Gene.chromosome.gene.length`` -> ``gene_chromosome_gene_length``.

    The name is derived from the full path, so distinct tree paths normally get
    distinct names. There is no truncation: callers targeting an engine with a
    maximum identifier length must check path length themselves.
    """
    return path.lower().replace(".", "_")


@dataclass
class TreeNode:
    kind: TreeNodeKind
    name: str
    path: Path
    graphical_name: str
    variable_name: str
    index: int
    parent_index: Optional[int] = None
    children: Dict[str, int] = field(default_factory=dict)  # insertion order

    @property
    def is_root(self) -> bool:
        return self.parent_index is None

    @property
    def depth(self) -> int:
        return self.path.count(".") + 1


class PathTree:
    """Every distinct dotted path of a query, sharing common prefixes.

    Nodes live in a flat arena and refer to their parent by index, so
    traversal never needs recursion. Children keep the order in which they
    were first added, which makes the generated text reproducible.
    """

    def __init__(self, root: str, graphical_name: Optional[str] = None) -> None:
        if not root or "." in root:
            raise InvalidTreeError(f"Root must be a single path component: {root!r}", root)
        self._nodes: List[TreeNode] = []
        self._by_path: Dict[Path, int] = {}
        self._by_variable: Dict[str, Path] = {}
        self._frozen = False
        self._insert(TreeNodeKind.NODE, root, root, graphical_name or root, None)

    # ---- construction ----
    def add(self, path: Path, kind: TreeNodeKind,
            graphical_name: Optional[str] = None) -> TreeNode:
        if self._frozen:
            raise InvalidTreeError(f"Tree is frozen, cannot add {path}", path)
        existing = self.get(path)
        if existing is not None:
            if existing.kind is not kind:
                raise InvalidTreeError(
                    f"{path} is already a {existing.kind.name}, cannot re-add as {kind.name}", path)
            return existing

        parent_path, _, name = path.rpartition(".")
        if not parent_path:
            raise InvalidTreeError(f"Tree already has root {self.root.path}, cannot add {path}", path)
        parent = self.get(parent_path)
        if parent is None:
            raise PathNotFoundError(parent_path)

        if parent.kind is TreeNodeKind.PROPERTY:
            raise InvalidTreeError(f"{parent_path} is a PROPERTY and cannot have children", path)
        if kind is TreeNodeKind.RELATIONSHIP and parent.kind is not TreeNodeKind.NODE:
            raise InvalidTreeError(f"RELATIONSHIP {path} must hang off a NODE", path)

        return self._insert(kind, name, path, graphical_name or name, parent.index)

    def _insert(self, kind: TreeNodeKind, name: str, path: Path,
                graphical_name: str, parent_index: Optional[int]) -> TreeNode:
        var = variable_name(path)
        clash = self._by_variable.get(var)
        if clash is not None:
            raise InvalidTreeError(f"{path} and {clash} both map to variable {var}", path)
        node = TreeNode(kind=kind, name=name, path=path, graphical_name=graphical_name,
                        variable_name=var, index=len(self._nodes), parent_index=parent_index)
        self._nodes.append(node)
        self._by_path[path] = node.index
        self._by_variable[var] = path
        if parent_index is not None:
            self._nodes[parent_index].children[name] = node.index
        return node

    def freeze(self) -> "PathTree":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ---- lookup ----
    @property
    def root(self) -> TreeNode:
        return self._nodes[0]

    def get(self, path: Path) -> Optional[TreeNode]:
        idx = self._by_path.get(path)
        return None if idx is None else self._nodes[idx]

    def node(self, path: Path) -> TreeNode:
        found = self.get(path)
        if found is None:
            raise PathNotFoundError(path)
        return found

    def parent(self, node: TreeNode) -> Optional[TreeNode]:
        if node.parent_index is None:
            return None
        return self._nodes[node.parent_index]

    def children(self, node: TreeNode) -> List[TreeNode]:
        return [self._nodes[i] for i in node.children.values()]

    def walk(self) -> Iterator[TreeNode]:
        """Pre-order, children in insertion order."""
        stack = [0]
        while stack:
            node = self._nodes[stack.pop()]
            yield node
            stack.extend(reversed(list(node.children.values())))

    def paths(self) -> List[Path]:
        return list(self._by_path)

    def __contains__(self, path: object) -> bool:
        return path in self._by_path

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[TreeNode]:
        return iter(self._nodes)


# ---- Output spec ----
@dataclass(frozen=True)
class OrderItem:
    path: Path
    direction: OrderDir = "ASC"


@dataclass
class QuerySpec:
    view: Sequence[Path] = field(default_factory=list)
    order_by: Sequence[OrderItem] = field(default_factory=list)

    def paths(self) -> List[Path]:
        """View paths then order paths, first occurrence wins."""
        seen: Dict[Path, None] = {}
        for p in self.view:
            seen.setdefault(p, None)
        for o in self.order_by:
            seen.setdefault(o.path, None)
        return list(seen)


@dataclass
class GeneratedQuery:
    match: List[str] = field(default_factory=list)
    returns: List[str] = field(default_factory=list)
    order_by: List[str] = field(default_factory=list)


__all__ = [
    "Path", "OrderDir", "TreeNodeKind", "TreeNode", "PathTree", "variable_name",
    "OrderItem", "QuerySpec", "GeneratedQuery",
    "PathQueryError", "PathNotFoundError", "InvalidOrderTargetError",
    "EmptyMatchError", "InvalidTreeError", "InvalidPathError",
]
