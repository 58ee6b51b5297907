"""Marks props as used: the recursive core of prop usage tracking.

``UsageMarker.mark`` accepts three node shapes and turns each into usage
records on the owning component:

- member/subscript access chains (``props.a.b``, ``this.props.a``)
- function-like nodes whose props parameter is destructured
- variable declarators destructuring props (``const {a} = props``,
  ``const {props: {a}} = this``)

Rest elements and computed keys make the statically visible prop set
incomplete; they set the owner's suppress flag instead of recording.
"""
import logging
from typing import List, Optional, Sequence, Tuple
from tree_sitter import Node

from .components import ComponentRegistry, OwnerKey, OwnerKind, UsageRecord
from .component_detector import ComponentDetector
from .prop_paths import COMPUTED_PROP, PROP_ROOT_NAMES, PropPathResolver, is_direct_props_text
from .scope import ScopeClassifier
from .syntax import (
    FUNCTION_SCOPE_TYPES,
    MEMBER_TYPES,
    access_key,
    access_object,
    function_params,
    is_computed_pattern_member,
    is_same,
    node_text,
    pattern_key_value,
    pattern_members,
    static_access_name,
    static_key_name,
    unwrap_parens,
)

logger = logging.getLogger(__name__)

# Inherited from Object.prototype; reading them is not a prop usage
OBJECT_PROTOTYPE_NAMES = frozenset({
    'constructor',
    'hasOwnProperty',
    'isPrototypeOf',
    'propertyIsEnumerable',
    'toLocaleString',
    'toString',
    'valueOf',
    '__proto__',
    '__defineGetter__',
    '__defineSetter__',
    '__lookupGetter__',
    '__lookupSetter__',
})


class UnhandledNodeError(ValueError):
    """A node kind reached ``UsageMarker.mark`` that no observation point routes there."""


class UsageMarker:
    """Records prop usages into a ComponentRegistry."""

    def __init__(self, registry: ComponentRegistry, detector: ComponentDetector,
                 scopes: ScopeClassifier, resolver: PropPathResolver):
        self.registry = registry
        self.detector = detector
        self.scopes = scopes
        self.resolver = resolver

    def owner_for(self, node: Node) -> OwnerKey:
        """Nearest enclosing component, or the raw node when none is open."""
        component = self.detector.enclosing_component(node)
        if component is not None:
            return component.key
        return OwnerKey.ungrouped(node)

    def mark(self, node: Node, parent_names: Sequence[str] = (), owner: Optional[OwnerKey] = None):
        """Mark the props read at ``node`` as used.

        Args:
            node: Access chain, function-like node or variable declarator
            parent_names: Path collected so far while following an access chain
            owner: Registry key to attribute usages to (derived from ``node``
                   when omitted)

        Raises:
            UnhandledNodeError: For any other node kind
        """
        if owner is None:
            owner = self.owner_for(node)
            if owner.kind is OwnerKind.UNGROUPED:
                self.registry.merge(owner, node=node)

        if node.type in MEMBER_TYPES:
            self._mark_access(node, tuple(parent_names), owner)
        elif node.type in FUNCTION_SCOPE_TYPES:
            self._mark_function(node, owner)
        elif node.type == 'variable_declarator':
            self._mark_declarator(node, owner)
        else:
            raise UnhandledNodeError(f"{node.type} nodes are not handled by UsageMarker.mark")

    # ------------------------------------------------------------------
    # Node shapes
    # ------------------------------------------------------------------

    def _mark_access(self, node: Node, parent_names: Tuple[str, ...], owner: OwnerKey):
        name = self.resolver.resolve(node)
        if name:
            all_names = parent_names + (name,)
            # Follow props.a.b but not x[props.a]
            parent = node.parent
            if (parent is not None and parent.type in MEMBER_TYPES
                    and is_same(access_object(parent), node)):
                self.mark(parent, all_names, owner)

            if name == COMPUTED_PROP:
                self._merge(owner, node, suppress=True)
                return
            if name in OBJECT_PROTOTYPE_NAMES:
                return
            record = UsageRecord(name=name, path=all_names, node=self._reported_node(node))
            self._merge(owner, node, used_props=[record])
            return

        # const {a} = this.props: the access is the initializer of a destructuring
        declarator = node.parent
        if declarator is None or declarator.type != 'variable_declarator':
            return
        pattern = declarator.child_by_field_name('name')
        if pattern is None or pattern.type != 'object_pattern':
            return
        members = pattern_members(pattern)
        if members and pattern_key_value(members[0]):
            self._mark_destructuring(node, members, owner)

    def _mark_function(self, fn: Node, owner: OwnerKey):
        params = function_params(fn)
        if not params:
            return
        index = 1 if self.scopes.in_set_state_updater() else 0
        if index >= len(params):
            return
        prop_param = params[index]
        if prop_param.type == 'assignment_pattern':
            prop_param = prop_param.child_by_field_name('left')
        if prop_param is None or prop_param.type != 'object_pattern':
            return
        self._mark_destructuring(fn, pattern_members(prop_param), owner)

    def _mark_declarator(self, declarator: Node, owner: OwnerKey):
        pattern = declarator.child_by_field_name('name')
        if pattern is None or pattern.type != 'object_pattern':
            return
        init = unwrap_parens(declarator.child_by_field_name('value'))
        members = pattern_members(pattern)

        for member in members:
            # const {props: {a}} = this
            if member.type == 'pair_pattern' and static_key_name(member.child_by_field_name('key')) == 'props':
                value = member.child_by_field_name('value')
                if value is not None and value.type == 'object_pattern':
                    self._mark_destructuring(declarator, pattern_members(value), owner)
                    return
            # const {a} = props
            if self._is_generic_destructuring(declarator, init):
                self._mark_destructuring(declarator, members, owner)
                return

    def _is_generic_destructuring(self, declarator: Node, init: Optional[Node]) -> bool:
        if init is None or init.type != 'identifier' or node_text(init) not in PROP_ROOT_NAMES:
            return False
        return (self.detector.enclosing_stateless_component(declarator) is not None
                or self.scopes.is_in_lifecycle_method_node(declarator))

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def _mark_destructuring(self, node: Node, members: List[Node], owner: OwnerKey):
        """One record per destructured field, prefixed with the access path of ``node``."""
        records: List[UsageRecord] = []
        suppress = False
        base_path = self._access_path(node)
        for member in members:
            # {...rest} and {[key]: value} can bind any prop
            if member.type == 'rest_pattern' or is_computed_pattern_member(member):
                suppress = True
                continue
            prop_name = pattern_key_value(member)
            if prop_name:
                records.append(UsageRecord(name=prop_name, path=base_path + (prop_name,), node=member))
        if suppress:
            logger.debug("Destructuring at line %d hides props; suppressing unused-prop checks",
                         node.start_point[0] + 1)
        self._merge(owner, node, used_props=records, suppress=suppress)

    @staticmethod
    def _access_path(node: Node) -> Tuple[str, ...]:
        """Keys between the props root and ``node``: ``this.props.a.b`` gives ('a', 'b')."""
        names: List[str] = []
        current = node
        while current is not None and current.type in MEMBER_TYPES:
            name = static_access_name(current)
            if name is None or name == 'props':
                break
            names.insert(0, name)
            current = access_object(current)
        return tuple(names)

    def _reported_node(self, node: Node) -> Optional[Node]:
        """Node to attribute a direct usage to.

        Qualified reads (``this.props.a``) report the key one level up, except
        inside constructors and componentWillReceiveProps.
        """
        if (not is_direct_props_text(node_text(node))
                and not self.scopes.in_constructor()
                and not self.scopes.in_component_will_receive_props()):
            parent = node.parent
            if parent is not None and parent.type in MEMBER_TYPES:
                return access_key(parent)
        return access_key(node)

    def _merge(self, owner: OwnerKey, node: Node, used_props: Sequence[UsageRecord] = (),
               suppress: bool = False):
        self.registry.merge(owner, used_props=used_props, suppress=suppress, node=node)
        if used_props:
            logger.debug("Marked %d prop usage(s) for %s", len(used_props), owner)
