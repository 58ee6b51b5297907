"""Declared propTypes extraction.

Reads the schema a component declares (``static propTypes``, a static
``propTypes`` getter, ``Name.propTypes = {...}`` or the ES5 ``propTypes``
key) into PropDeclaration entries. Anything the extractor cannot enumerate
statically (a schema held in a variable, a spread inside the literal, a
computed key) marks the component with ``ignore_props_validation``.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
from tree_sitter import Node

from .components import ComponentRegistry, Component
from .syntax import (
    FIELD_TYPES,
    ASSIGNMENT_TYPES,
    is_function_like_expression,
    is_static_member,
    holder_key_name,
    named_args,
    node_text,
    static_access_name,
    static_key_name,
    unwrap_parens,
    walk,
)

SHAPE_FACTORIES = ('shape', 'exact')


@dataclass
class PropDeclaration:
    """One declared prop type."""
    name: str
    node: Node  # The pair (or shorthand) declaring it
    value: Optional[Node] = None
    children: Optional[Dict[str, 'PropDeclaration']] = None  # PropTypes.shape({...}) entries
    is_required: bool = False

    @property
    def validator(self) -> Optional[Node]:
        """Custom validator function, if the declaration value is one."""
        if self.value is not None and self.value.type == 'method_definition':
            return self.value
        if is_function_like_expression(self.value):
            return unwrap_parens(self.value)
        return None

    @property
    def line(self) -> int:
        return self.node.start_point[0] + 1


class PropTypesExtractor:
    """Attaches declared schemas to the components of a registry."""

    def __init__(self, registry: ComponentRegistry):
        self.registry = registry

    def extract(self, root: Node) -> int:
        """Read every propTypes declaration reachable from ``root``.

        Returns:
            Number of schemas attached
        """
        attached = 0
        components = self.registry.list()
        by_name: Dict[str, Component] = {}
        for component in components:
            by_name.setdefault(component.name, component)
            if component.kind == 'es6':
                value = self._class_prop_types(component.node)
            elif component.kind == 'es5':
                value = self._object_prop_types(component.node)
            else:
                value = None
            if value is not None:
                self._attach(component, value)
                attached += 1

        # Foo.propTypes = {...}
        for node in walk(root):
            if node.type not in ASSIGNMENT_TYPES:
                continue
            left = node.child_by_field_name('left')
            if left is None or left.type != 'member_expression' or static_access_name(left) != 'propTypes':
                continue
            component = by_name.get(node_text(left.child_by_field_name('object')))
            right = node.child_by_field_name('right')
            if component is not None and right is not None:
                self._attach(component, right)
                attached += 1
        return attached

    def _attach(self, component: Component, value: Node):
        declarations, ignore = self.parse_schema(value)
        self.registry.declare(component.key, declarations, ignore_props_validation=ignore)

    def parse_schema(self, value: Node) -> Tuple[Dict[str, PropDeclaration], bool]:
        """Parse a propTypes object literal.

        Returns:
            (declarations by name, True if the schema is not fully enumerable)
        """
        value = unwrap_parens(value)
        if value is None or value.type != 'object':
            return {}, True

        declarations: Dict[str, PropDeclaration] = {}
        incomplete = False
        for entry in named_args(value):
            if entry.type == 'pair':
                name = static_key_name(entry.child_by_field_name('key'))
                if name is None:
                    incomplete = True
                    continue
                declarations[name] = self._declaration(name, entry, entry.child_by_field_name('value'))
            elif entry.type == 'shorthand_property_identifier':
                name = node_text(entry)
                declarations[name] = PropDeclaration(name=name, node=entry)
            elif entry.type == 'method_definition':
                name = holder_key_name(entry)
                if name is None:
                    incomplete = True
                    continue
                declarations[name] = PropDeclaration(name=name, node=entry, value=entry)
            elif entry.type == 'spread_element':
                incomplete = True
        return declarations, incomplete

    def _declaration(self, name: str, node: Node, value: Optional[Node]) -> PropDeclaration:
        declaration = PropDeclaration(name=name, node=node, value=value)
        current = unwrap_parens(value)
        if current is not None and current.type == 'member_expression' and static_access_name(current) == 'isRequired':
            declaration.is_required = True
            current = unwrap_parens(current.child_by_field_name('object'))
        if current is not None and current.type == 'call_expression':
            callee = current.child_by_field_name('function')
            factory = static_access_name(callee) if callee.type == 'member_expression' else node_text(callee)
            args = named_args(current.child_by_field_name('arguments'))
            if factory in SHAPE_FACTORIES and args and unwrap_parens(args[0]).type == 'object':
                children, _ = self.parse_schema(args[0])
                declaration.children = children
        return declaration

    @staticmethod
    def _class_prop_types(class_node: Node) -> Optional[Node]:
        body = class_node.child_by_field_name('body')
        for member in named_args(body):
            if not is_static_member(member) or holder_key_name(member) != 'propTypes':
                continue
            if member.type in FIELD_TYPES:
                return member.child_by_field_name('value')
            if member.type == 'method_definition' and any(c.type == 'get' for c in member.children):
                for statement in named_args(member.child_by_field_name('body')):
                    if statement.type == 'return_statement':
                        returned = named_args(statement)
                        return returned[0] if returned else None
        return None

    @staticmethod
    def _object_prop_types(object_node: Node) -> Optional[Node]:
        for entry in named_args(object_node):
            if entry.type == 'pair' and static_key_name(entry.child_by_field_name('key')) == 'propTypes':
                return entry.child_by_field_name('value')
        return None
