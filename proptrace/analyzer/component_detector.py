"""React component detection over tree-sitter syntax trees.

Registers three component styles in a ComponentRegistry before usage
tracking starts:

- ES6 classes extending ``Component``/``PureComponent`` (optionally through
  the pragma, e.g. ``React.Component``)
- ES5 object literals passed to ``createReactClass`` or ``React.createClass``
- stateless functions returning JSX
"""
import re
from typing import Optional
from tree_sitter import Node

from .components import ComponentRegistry, Component
from .syntax import (
    CLASS_TYPES,
    FIELD_TYPES,
    FUNCTION_TYPES,
    JSX_TYPES,
    ancestors,
    holder_key_name,
    named_args,
    node_text,
    syntactic_parent,
    unwrap_parens,
    walk,
)

# Wrappers whose function argument is still a component
COMPONENT_WRAPPERS = ('memo', 'forwardRef')


class ComponentDetector:
    """Classifies syntax nodes as components and answers "which component am I in"."""

    def __init__(self, registry: ComponentRegistry, pragma: str = 'React',
                 create_class: str = 'createReactClass'):
        self.registry = registry
        self.pragma = pragma
        self.create_class = create_class
        self._es6_superclass = re.compile(rf'^({re.escape(pragma)}\.)?(Pure)?Component$')
        self._es5_factories = {create_class, f'{pragma}.createClass'}
        self._wrappers = set(COMPONENT_WRAPPERS) | {f'{pragma}.{w}' for w in COMPONENT_WRAPPERS}

    def detect(self, root: Node) -> int:
        """Register every component found under ``root``.

        Returns:
            Number of components registered
        """
        found = 0
        for node in walk(root):
            if node.type in CLASS_TYPES and self.is_es6_component(node):
                self.registry.add(node, 'es6', self._class_name(node))
                found += 1
            elif node.type == 'object' and self.is_es5_component(node):
                call = syntactic_parent(node).parent
                self.registry.add(node, 'es5', self._binding_name(syntactic_parent(call)))
                found += 1
            elif node.type in FUNCTION_TYPES and self.is_stateless_component(node):
                self.registry.add(node, 'stateless', self._function_name(node))
                found += 1
        return found

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def is_es6_component(self, node: Node) -> bool:
        superclass = self._superclass(node)
        return superclass is not None and bool(self._es6_superclass.match(node_text(superclass)))

    def is_es5_component(self, node: Node) -> bool:
        """True for the object literal handed to a create-class factory."""
        parent = syntactic_parent(node)
        if parent is None or parent.type != 'arguments':
            return False
        args = named_args(parent)
        if not args or unwrap_parens(args[0]).id != node.id:
            return False
        call = parent.parent
        return call is not None and node_text(call.child_by_field_name('function')) in self._es5_factories

    def is_stateless_component(self, fn: Node) -> bool:
        """Stateless component: a JSX-returning function that is not a plain callback."""
        if fn.type not in FUNCTION_TYPES:
            return False
        parent = syntactic_parent(fn)
        if parent is not None and parent.type == 'arguments':
            if not self._is_wrapper_call(parent.parent):
                return False
        elif parent is not None and parent.type == 'jsx_expression':
            return False
        elif parent is not None and (parent.type == 'pair' or parent.type in FIELD_TYPES):
            # Object and class members only when named like a component
            name = holder_key_name(parent)
            if not name or not name[0].isupper():
                return False
        return self.returns_jsx(fn)

    def _is_wrapper_call(self, call: Optional[Node]) -> bool:
        return call is not None and node_text(call.child_by_field_name('function')) in self._wrappers

    def returns_jsx(self, fn: Node) -> bool:
        body = fn.child_by_field_name('body')
        if body is None:
            return False
        if body.type != 'statement_block':
            return self._is_jsx_value(body)

        stack = list(body.named_children)
        while stack:
            node = stack.pop()
            if node.type in FUNCTION_TYPES or node.type in CLASS_TYPES or node.type == 'method_definition':
                continue
            if node.type == 'return_statement':
                value = named_args(node)
                if value and self._is_jsx_value(value[0]):
                    return True
                continue
            stack.extend(node.named_children)
        return False

    def _is_jsx_value(self, node: Optional[Node]) -> bool:
        node = unwrap_parens(node)
        if node is None:
            return False
        if node.type in JSX_TYPES:
            return True
        if node.type == 'ternary_expression':
            return (self._is_jsx_value(node.child_by_field_name('consequence'))
                    or self._is_jsx_value(node.child_by_field_name('alternate')))
        if node.type == 'binary_expression':
            operator = node_text(node.child_by_field_name('operator'))
            if operator in ('&&', '||', '??'):
                return (self._is_jsx_value(node.child_by_field_name('left'))
                        or self._is_jsx_value(node.child_by_field_name('right')))
        return False

    # ------------------------------------------------------------------
    # Enclosing-component queries
    # ------------------------------------------------------------------

    def is_component(self, node: Optional[Node]) -> bool:
        return self.registry.get_by_node(node) is not None

    def enclosing_class_component(self, node: Node) -> Optional[Component]:
        """Nearest ES6 or ES5 component containing ``node`` (inclusive)."""
        for current in ancestors(node, include_self=True):
            if current.type in CLASS_TYPES or current.type == 'object':
                component = self.registry.get_by_node(current)
                if component is not None and component.kind in ('es6', 'es5'):
                    return component
        return None

    def enclosing_stateless_component(self, node: Node) -> Optional[Component]:
        """Nearest stateless component containing ``node`` (inclusive).

        Callbacks that are not components themselves (``useEffect(() => ...)``,
        ``items.map(item => ...)``) are walked through; the walk gives up at
        class boundaries.
        """
        for current in ancestors(node, include_self=True):
            if current.type in CLASS_TYPES:
                return None
            if current.type not in FUNCTION_TYPES:
                continue
            component = self.registry.get_by_node(current)
            if component is not None and component.kind == 'stateless':
                return component
        return None

    def enclosing_component(self, node: Node) -> Optional[Component]:
        """Owning component: class-style first, then stateless."""
        return self.enclosing_class_component(node) or self.enclosing_stateless_component(node)

    # ------------------------------------------------------------------
    # Names
    # ------------------------------------------------------------------

    def _superclass(self, node: Node) -> Optional[Node]:
        for child in node.named_children:
            if child.type != 'class_heritage':
                continue
            clauses = named_args(child)
            if not clauses:
                return None
            clause = clauses[0]
            if clause.type == 'extends_clause':
                return clause.child_by_field_name('value') or (named_args(clause) or [None])[0]
            if clause.type == 'implements_clause':
                return None
            return clause
        return None

    def _class_name(self, node: Node) -> str:
        name = node.child_by_field_name('name')
        if name is not None:
            return node_text(name)
        return self._binding_name(syntactic_parent(node))

    def _function_name(self, fn: Node) -> str:
        name = fn.child_by_field_name('name')
        if name is not None:
            return node_text(name)
        parent = syntactic_parent(fn)
        if parent is not None and parent.type == 'arguments':
            parent = syntactic_parent(parent.parent)
        return self._binding_name(parent)

    @staticmethod
    def _binding_name(node: Optional[Node]) -> str:
        """Name a value is bound to (``const X = ...``, ``X = ...``, ``export default``)."""
        if node is None:
            return '<anonymous>'
        if node.type == 'variable_declarator':
            return node_text(node.child_by_field_name('name'))
        if node.type == 'assignment_expression':
            return node_text(node.child_by_field_name('left'))
        if node.type == 'pair' or node.type in FIELD_TYPES:
            return holder_key_name(node) or '<anonymous>'
        if node.type == 'export_statement':
            return 'default'
        return '<anonymous>'
