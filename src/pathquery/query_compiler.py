from __future__ import annotations
from typing import List, Optional, Sequence

from log_helper import LogHelper

from . import (
    GeneratedQuery, OrderItem, Path, PathTree, QuerySpec, TreeNode, TreeNodeKind,
)
from .errors import EmptyMatchError, InvalidOrderTargetError, PathQueryError
from .options import CompilerOptions

logger = LogHelper.get_logger("pathquery.compiler")


class QueryCompiler:
    def __init__(self, options: Optional[CompilerOptions] = None) -> None:
        self.options = options or CompilerOptions()

    def to_cypher(self, tree: PathTree, spec: QuerySpec) -> str:
        try:
            generated = self.generate(tree, spec)
            cypher = self.assemble(generated)
        except PathQueryError as e:
            logger.warning(f"translation of {tree.root.path} failed: {e}")
            raise
        logger.debug(f"cypher: {cypher}")
        return cypher

    def generate(self, tree: PathTree, spec: QuerySpec) -> GeneratedQuery:
        q = GeneratedQuery()
        q.match.extend(self.match_fragments(tree))
        q.returns.extend(self.return_fragments(tree, spec.view))
        q.order_by.extend(self.order_fragments(tree, spec.order_by))
        return q

    def assemble(self, q: GeneratedQuery) -> str:
        if not q.match:
            raise EmptyMatchError()
        parts: List[str] = ["MATCH " + ", ".join(q.match)]
        # 空 RETURN 照樣輸出，由呼叫端負責
        parts.append("RETURN " + ", ".join(q.returns) if q.returns else "RETURN")
        if q.order_by:
            parts.append("ORDER BY " + ", ".join(q.order_by))
        return " ".join(parts)

    # ---- MATCH ----
    def match_fragments(self, tree: PathTree) -> List[str]:
        """One fragment per root and per NODE below it, in pre-order.

        A RELATIONSHIP is rendered together with each NODE child it leads to,
        so a relationship with no NODE child never shows up. Two view paths
        walking the same relationship share its tree node and therefore its
        fragment; nothing is deduplicated beyond that.
        """
        chunks: List[str] = []
        for node in tree.walk():
            chunk = self._pattern(tree, node)
            if chunk is not None:
                logger.verbose(f"match {node.path}: {chunk}")
                chunks.append(chunk)
        return chunks

    def _pattern(self, tree: PathTree, node: TreeNode) -> Optional[str]:
        if node.is_root:
            return f"({node.variable_name} :{node.graphical_name})"
        if node.kind is TreeNodeKind.NODE:
            parent = tree.parent(node)
            assert parent is not None
            target = f"({node.variable_name} :{node.graphical_name})"
            if parent.kind is TreeNodeKind.NODE:
                return f"({parent.variable_name}){self._edge('')}{target}"
            if parent.kind is TreeNodeKind.RELATIONSHIP:
                owner = tree.parent(parent)
                assert owner is not None
                rel = f"{parent.variable_name} :{parent.graphical_name}"
                return f"({owner.variable_name}){self._edge(rel)}{target}"
            raise TypeError(f"Unsupported parent kind for {node.path}: {parent.kind}")
        if node.kind in (TreeNodeKind.RELATIONSHIP, TreeNodeKind.PROPERTY):
            return None
        raise TypeError(f"Unsupported tree node kind: {node.kind}")

    def _edge(self, body: str) -> str:
        return f"-[{body}]->" if self.options.directed else f"-[{body}]-"

    # ---- RETURN ----
    def return_fragments(self, tree: PathTree, view: Sequence[Path]) -> List[str]:
        chunks: List[str] = []
        for path in view:
            node = tree.node(path)
            if node.kind is not TreeNodeKind.PROPERTY:
                logger.verbose(f"return skips {node.kind.name} {path}")
                continue
            chunks.append(self._property(tree, node))
        return chunks

    # ---- ORDER BY ----
    def order_fragments(self, tree: PathTree, order_by: Sequence[OrderItem]) -> List[str]:
        chunks: List[str] = []
        for o in order_by:
            node = tree.node(o.path)
            if node.kind is not TreeNodeKind.PROPERTY:
                raise InvalidOrderTargetError(o.path, node.kind)
            chunks.append(f"{self._property(tree, node)} {self.options.keyword(o.direction)}")
        return chunks

    def _property(self, tree: PathTree, node: TreeNode) -> str:
        parent = tree.parent(node)
        assert parent is not None
        return f"{parent.variable_name}.{node.graphical_name}"


def translate(tree: PathTree, view: Sequence[Path] = (),
              order_by: Sequence[OrderItem] = (),
              options: Optional[CompilerOptions] = None) -> str:
    return QueryCompiler(options).to_cypher(tree, QuerySpec(view=list(view), order_by=list(order_by)))
