"""Traversal driver for prop usage tracking.

Walks one syntax tree depth-first, keeps the ScopeClassifier frame stack in
step with the walk, and routes five node kinds to the UsageMarker:

1. ``variable_declarator`` destructuring ``this`` or a props-like identifier
2. function-like nodes (setState updaters, destructured component params)
3. JSX spread attributes (``<Child {...props} />``), which suppress checks
4. member/subscript accesses on ``props``, ``this.props``, ``nextProps``, ...
5. object patterns written directly in a lifecycle method signature

After the walk, custom validators declared in propTypes are queued and
re-analyzed on behalf of the component that declared them.
"""
import logging
from collections import deque
from typing import Deque, Tuple
from tree_sitter import Node

from ..config import EngineConfig
from .components import ComponentRegistry, OwnerKey
from .component_detector import ComponentDetector
from .prop_paths import PROP_ROOT_NAMES, PropPathResolver
from .scope import ScopeClassifier
from .syntax import (
    FUNCTION_SCOPE_TYPES,
    MEMBER_TYPES,
    PARAMETER_WRAPPERS,
    access_object,
    estree_parent,
    function_params,
    is_assignment_lhs,
    method_holder,
    named_args,
    node_text,
    pattern_members,
    unwrap_parens,
)
from .usage_marker import UsageMarker

logger = logging.getLogger(__name__)


class UsedPropsTracker:
    """Single-pass prop usage tracker for one source unit."""

    def __init__(self, registry: ComponentRegistry, detector: ComponentDetector,
                 config: EngineConfig = None):
        self.config = config or EngineConfig()
        self.registry = registry
        self.detector = detector
        self.scopes = ScopeClassifier(self.config.check_async_safe_lifecycles)
        self.resolver = PropPathResolver(self.scopes, detector)
        self.marker = UsageMarker(registry, detector, self.scopes, self.resolver)
        self._pending: Deque[Tuple[Node, OwnerKey]] = deque()

    def track(self, root: Node) -> ComponentRegistry:
        """Walk ``root`` and record every prop usage in the registry."""
        self.scopes.reset()
        # (node, exiting) pairs: exit markers pop the scope frame after the subtree
        stack = [(root, False)]
        while stack:
            node, exiting = stack.pop()
            if exiting:
                self.scopes.pop()
                continue
            if node.type in FUNCTION_SCOPE_TYPES:
                self.scopes.push(node)
                stack.append((node, True))
            self.visit(node)
            stack.extend((child, False) for child in reversed(node.named_children))

        self.on_program_exit()
        return self.registry

    def visit(self, node: Node):
        if node.type == 'variable_declarator':
            self.on_variable_declarator(node)
        elif node.type in FUNCTION_SCOPE_TYPES:
            self.on_function(node)
        elif node.type == 'jsx_expression':
            self.on_jsx_expression(node)
        elif node.type in MEMBER_TYPES:
            self.on_member_expression(node)
        elif node.type == 'object_pattern':
            self.on_object_pattern(node)

    # ------------------------------------------------------------------
    # Observation points
    # ------------------------------------------------------------------

    def on_variable_declarator(self, node: Node):
        pattern = node.child_by_field_name('name')
        init = unwrap_parens(node.child_by_field_name('value'))
        if pattern is None or init is None or pattern.type != 'object_pattern':
            return
        # const {props: {a}} = this
        this_destructuring = init.type == 'this'
        # const {a} = props
        stateless_destructuring = (
            init.type == 'identifier'
            and node_text(init) in PROP_ROOT_NAMES
            and (self.detector.enclosing_stateless_component(node) is not None
                 or self.scopes.is_in_lifecycle_method_node(node))
        )
        if this_destructuring or stateless_destructuring:
            self.marker.mark(node)

    def on_function(self, node: Node):
        params = function_params(node)
        in_updater = self.scopes.in_set_state_updater()

        # this.setState((state, props) => ...)
        if len(params) >= 2 and in_updater:
            self.marker.mark(node)

        index = 1 if in_updater else 0
        param = params[index] if index < len(params) else None
        destructuring = param is not None and (
            param.type == 'object_pattern'
            or (param.type == 'assignment_pattern'
                and param.child_by_field_name('left') is not None
                and param.child_by_field_name('left').type == 'object_pattern')
        )
        if destructuring and (self.detector.is_component(node) or self.detector.is_component(estree_parent(node))):
            self.marker.mark(node)

    def on_jsx_expression(self, node: Node):
        """``{...props}`` forwarded as attributes hides which props are read."""
        parent = node.parent
        if parent is None or parent.type not in ('jsx_opening_element', 'jsx_self_closing_element'):
            return
        if not any(child.type == 'spread_element' for child in named_args(node)):
            return
        component = self.detector.enclosing_component(node)
        key = component.key if component is not None else OwnerKey.ungrouped(node)
        self.registry.merge(key, suppress=True, node=node)
        logger.debug("JSX spread at line %d suppresses unused-prop checks", node.start_point[0] + 1)

    def on_member_expression(self, node: Node):
        if self.is_props_usage(node):
            self.marker.mark(node)

    def on_object_pattern(self, node: Node):
        """``componentDidUpdate({visible}) {...}``: destructuring in a lifecycle signature."""
        parent = node.parent
        if parent is not None and parent.type in PARAMETER_WRAPPERS:
            parent = parent.parent
        if parent is None or parent.type != 'formal_parameters' or parent.parent is None:
            return
        fn = parent.parent
        if self.scopes.is_lifecycle_method_node(method_holder(fn)) and pattern_members(node):
            self.marker.mark(fn)

    def on_program_exit(self):
        """Re-enter the marker for every custom validator of a validated component."""
        for component in self.registry.list():
            if not component.must_validate:
                continue
            for declaration in component.declared_prop_types.values():
                if declaration.validator is not None:
                    self._pending.append((declaration.validator, component.key))

        while self._pending:
            validator, owner = self._pending.popleft()
            logger.debug("Analyzing custom validator at line %d", validator.start_point[0] + 1)
            self.marker.mark(validator, owner=owner)

    # ------------------------------------------------------------------
    # Predicates
    # ------------------------------------------------------------------

    def is_props_usage(self, node: Node) -> bool:
        """Whether an access reads the props object (``this.props``, ``props.x``, ...)."""
        obj = access_object(node)
        if obj is None:
            return False
        is_this_props = (
            obj.type == 'this'
            and node.type == 'member_expression'
            and node_text(node.child_by_field_name('property')) == 'props'
        )
        obj_name = node_text(obj) if obj.type == 'identifier' else None
        is_props_usage = is_this_props or obj_name in ('nextProps', 'prevProps')

        is_class_usage = (
            self.detector.enclosing_class_component(node) is not None
            and (is_this_props or self.scopes.is_prop_argument_in_set_state_updater(node))
        )
        is_stateless_usage = obj_name == 'props' and not is_assignment_lhs(node)
        return (
            is_class_usage
            or is_stateless_usage
            or (is_props_usage and self.scopes.in_lifecycle_method())
        )
