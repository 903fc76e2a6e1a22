"""Graph schema and a builder turning dotted paths into a ``PathTree``.

The schema only knows enough to classify each path component:

- a class attribute becomes a PROPERTY,
- a class reference becomes a NODE joined to its owner without a
  relationship type,
- a class relationship becomes a RELATIONSHIP whose endpoints are NODEs and
  whose own attributes are PROPERTYs.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from log_helper import LogHelper

from . import Path, PathTree, QuerySpec, TreeNode, TreeNodeKind
from .errors import InvalidPathError

logger = LogHelper.get_logger("pathquery.schema")


@dataclass
class RelationshipDescriptor:
    type: str
    endpoints: Dict[str, str] = field(default_factory=dict)   # name -> class
    attributes: Dict[str, str] = field(default_factory=dict)  # name -> property key


@dataclass
class ClassDescriptor:
    name: str
    label: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)  # name -> property key
    references: Dict[str, str] = field(default_factory=dict)  # name -> class
    relationships: Dict[str, RelationshipDescriptor] = field(default_factory=dict)

    @property
    def graphical_name(self) -> str:
        return self.label or self.name


class GraphSchema:
    def __init__(self, classes: Iterable[ClassDescriptor] = ()) -> None:
        self._classes: Dict[str, ClassDescriptor] = {}
        for c in classes:
            self.add_class(c)

    def add_class(self, descriptor: ClassDescriptor) -> ClassDescriptor:
        self._classes[descriptor.name] = descriptor
        return descriptor

    def get_class(self, name: str) -> Optional[ClassDescriptor]:
        return self._classes.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._classes


class PathTreeBuilder:
    def __init__(self, schema: GraphSchema) -> None:
        self.schema = schema

    def build(self, root_class: str, paths: Iterable[Path]) -> PathTree:
        root = self.schema.get_class(root_class)
        if root is None:
            raise InvalidPathError(root_class, f"unknown class {root_class}")
        tree = PathTree(root.name, root.graphical_name)
        # 每個節點對應的 schema 物件（class 或 relationship）
        owners: Dict[Path, object] = {root.name: root}
        for path in paths:
            self._add_path(tree, owners, path)
        logger.verbose(f"built tree for {root_class} with {len(tree)} nodes")
        return tree.freeze()

    def build_for(self, spec: QuerySpec) -> PathTree:
        paths = spec.paths()
        if not paths:
            raise InvalidPathError("", "query selects no paths")
        return self.build(paths[0].split(".", 1)[0], paths)

    def _add_path(self, tree: PathTree, owners: Dict[Path, object], path: Path) -> None:
        head, *rest = path.split(".")
        if head != tree.root.path:
            raise InvalidPathError(path, f"does not start at {tree.root.path}")
        current = head
        for name in rest:
            if not name:
                raise InvalidPathError(path, "empty path component")
            child = f"{current}.{name}"
            if child not in tree:
                node = self._classify(tree, owners, tree.node(current), name, path)
                logger.verbose(f"{child} -> {node.kind.name} :{node.graphical_name}")
            current = child

    def _classify(self, tree: PathTree, owners: Dict[Path, object],
                  parent: TreeNode, name: str, path: Path) -> TreeNode:
        owner = owners.get(parent.path)
        child = f"{parent.path}.{name}"

        if isinstance(owner, ClassDescriptor):
            if name in owner.attributes:
                return tree.add(child, TreeNodeKind.PROPERTY, owner.attributes[name])
            if name in owner.references:
                target = self._target(owner.references[name], path)
                owners[child] = target
                return tree.add(child, TreeNodeKind.NODE, target.graphical_name)
            if name in owner.relationships:
                rel = owner.relationships[name]
                owners[child] = rel
                return tree.add(child, TreeNodeKind.RELATIONSHIP, rel.type)
            raise InvalidPathError(path, f"{owner.name} has no field {name}")

        if isinstance(owner, RelationshipDescriptor):
            if name in owner.attributes:
                return tree.add(child, TreeNodeKind.PROPERTY, owner.attributes[name])
            if name in owner.endpoints:
                target = self._target(owner.endpoints[name], path)
                owners[child] = target
                return tree.add(child, TreeNodeKind.NODE, target.graphical_name)
            raise InvalidPathError(path, f"relationship {owner.type} has no field {name}")

        raise InvalidPathError(path, f"{parent.path} is a {parent.kind.name} and has no fields")

    def _target(self, class_name: str, path: Path) -> ClassDescriptor:
        target = self.schema.get_class(class_name)
        if target is None:
            raise InvalidPathError(path, f"unknown class {class_name}")
        return target
