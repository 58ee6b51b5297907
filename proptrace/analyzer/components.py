"""Component registry: owners of prop usage records and declared schemas."""
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Tuple
from tree_sitter import Node

if TYPE_CHECKING:
    from .prop_types import PropDeclaration


class OwnerKind(str, Enum):
    """How a usage owner was keyed."""
    COMPONENT = 'component'
    UNGROUPED = 'ungrouped-node'


@dataclass(frozen=True)
class OwnerKey:
    """Registry key: a detected component node, or a raw node when no component is open."""
    kind: OwnerKind
    node_id: int

    @classmethod
    def component(cls, node: Node) -> 'OwnerKey':
        return cls(OwnerKind.COMPONENT, node.id)

    @classmethod
    def ungrouped(cls, node: Node) -> 'OwnerKey':
        return cls(OwnerKind.UNGROUPED, node.id)


@dataclass(frozen=True)
class UsageRecord:
    """One observed read of a prop field."""
    name: str
    path: Tuple[str, ...]  # ('a', 'b', 'c') for props.a.b.c
    node: Optional[Node] = None  # Position reported by diagnostics

    @property
    def dotted(self) -> str:
        return '.'.join(self.path)

    @property
    def location(self) -> Tuple[int, int]:
        """1-based (line, column) of the reported node, (0, 0) if unknown."""
        if self.node is None:
            return (0, 0)
        row, column = self.node.start_point[0], self.node.start_point[1]
        return (row + 1, column + 1)


@dataclass
class Component:
    """A registered usage owner.

    ``kind`` is 'es6', 'es5' or 'stateless' for detected components and None
    for ungrouped owners.
    """
    key: OwnerKey
    node: Node
    kind: Optional[str] = None
    name: str = '<anonymous>'
    used_props: List[UsageRecord] = field(default_factory=list)
    ignore_unused_props_validation: bool = False  # Suppress flag
    declared_prop_types: Optional[Dict[str, 'PropDeclaration']] = None
    ignore_props_validation: bool = False

    @property
    def must_validate(self) -> bool:
        return self.declared_prop_types is not None and not self.ignore_props_validation

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1


class ComponentRegistry:
    """Owns every Component of one source unit.

    Engines never build Components themselves: they add detected nodes and
    merge partial updates, which keeps usage lists append-only and the
    suppress flag sticky.
    """

    def __init__(self):
        self._components: Dict[OwnerKey, Component] = {}

    def add(self, node: Node, kind: str, name: str = '<anonymous>') -> Component:
        key = OwnerKey.component(node)
        component = self._components.get(key)
        if component is None:
            component = Component(key=key, node=node, kind=kind, name=name)
            self._components[key] = component
        return component

    def get(self, key: OwnerKey) -> Optional[Component]:
        return self._components.get(key)

    def get_by_node(self, node: Optional[Node]) -> Optional[Component]:
        if node is None:
            return None
        return self._components.get(OwnerKey.component(node))

    def merge(self, key: OwnerKey, used_props: Iterable[UsageRecord] = (), suppress: bool = False,
              node: Optional[Node] = None) -> Component:
        """Append usage records and OR in the suppress flag.

        Args:
            key: Owner to update
            used_props: Records to append, in traversal order
            suppress: Disable unused-prop reporting for this owner
            node: Raw node for a first merge into an ungrouped key

        Raises:
            KeyError: If a component key was never added, or an ungrouped key
                      is new and no node is given
        """
        component = self._components.get(key)
        if component is None:
            if key.kind is not OwnerKind.UNGROUPED or node is None:
                raise KeyError(f"Unknown owner {key}")
            component = Component(key=key, node=node)
            self._components[key] = component
        component.used_props.extend(used_props)
        if suppress:
            component.ignore_unused_props_validation = True
        return component

    def declare(self, key: OwnerKey, declarations: Dict[str, 'PropDeclaration'],
                ignore_props_validation: bool = False) -> Component:
        """Merge declared prop types into a component's schema."""
        component = self._components[key]
        if component.declared_prop_types is None:
            component.declared_prop_types = {}
        component.declared_prop_types.update(declarations)
        if ignore_props_validation:
            component.ignore_props_validation = True
        return component

    def list(self) -> List[Component]:
        """Detected components in registration order."""
        return [c for c in self._components.values() if c.key.kind is OwnerKind.COMPONENT]

    def ungrouped(self) -> List[Component]:
        return [c for c in self._components.values() if c.key.kind is OwnerKind.UNGROUPED]
