"""Lexical-context questions about the current traversal position.

The traversal driver pushes every function-like node it enters and pops it on
exit, so the frame stack is the chain of enclosing functions from the tree
root down to the node being visited. Each predicate walks that chain outward
independently; callers combine them with their own boolean logic.
"""
from typing import Iterator, List, Optional
from tree_sitter import Node

from .syntax import (
    FUNCTION_SCOPE_TYPES,
    access_object,
    ancestors,
    function_params,
    holder_key_name,
    is_constructor_method,
    method_holder,
    named_args,
    node_text,
    static_access_name,
    syntactic_parent,
    unwrap_parens,
)

LIFECYCLE_METHODS = (
    'componentWillReceiveProps',
    'shouldComponentUpdate',
    'componentWillUpdate',
    'componentDidUpdate',
)
ASYNC_SAFE_LIFECYCLE_METHODS = (
    'getDerivedStateFromProps',
    'getSnapshotBeforeUpdate',
    'UNSAFE_componentWillReceiveProps',
    'UNSAFE_componentWillUpdate',
)


class ScopeClassifier:
    """Answers "where am I" for the node currently being visited."""

    def __init__(self, check_async_safe_lifecycles: bool = False):
        """
        Args:
            check_async_safe_lifecycles: Count the React 16.3+ lifecycle names
                                         (getDerivedStateFromProps, UNSAFE_*) as
                                         lifecycle methods
        """
        self.check_async_safe_lifecycles = check_async_safe_lifecycles
        self._frames: List[Node] = []

    # ------------------------------------------------------------------
    # Frame stack
    # ------------------------------------------------------------------

    def push(self, node: Node):
        if node.type not in FUNCTION_SCOPE_TYPES:
            raise ValueError(f"{node.type} does not open a function scope")
        self._frames.append(node)

    def pop(self) -> Node:
        return self._frames.pop()

    def reset(self):
        self._frames.clear()

    @property
    def depth(self) -> int:
        return len(self._frames)

    def frames(self) -> Iterator[Node]:
        """Enclosing function-like nodes, innermost first."""
        return reversed(self._frames)

    # ------------------------------------------------------------------
    # Scope-chain predicates
    # ------------------------------------------------------------------

    def in_constructor(self) -> bool:
        return any(is_constructor_method(method_holder(frame)) for frame in self.frames())

    def in_component_will_receive_props(self) -> bool:
        return any(holder_key_name(method_holder(frame)) == 'componentWillReceiveProps'
                   for frame in self.frames())

    def in_lifecycle_method(self, include_async_safe: Optional[bool] = None) -> bool:
        if include_async_safe is None:
            include_async_safe = self.check_async_safe_lifecycles
        for frame in self.frames():
            name = holder_key_name(method_holder(frame))
            if name in LIFECYCLE_METHODS:
                return True
            if include_async_safe and name in ASYNC_SAFE_LIFECYCLE_METHODS:
                return True
        return False

    def in_set_state_updater(self) -> bool:
        return any(self.is_set_state_updater(frame) for frame in self.frames())

    def is_prop_argument_in_set_state_updater(self, access: Node) -> bool:
        """True when ``access`` reads from the props parameter of the enclosing updater.

        ``this.setState((state, p) => p.x)``: ``p.x`` qualifies. Updaters
        declaring fewer than two parameters are skipped.
        """
        for frame in self.frames():
            if not self.is_set_state_updater(frame):
                continue
            params = function_params(frame)
            if len(params) < 2:
                continue
            obj = access_object(access)
            return (
                obj is not None
                and obj.type == 'identifier'
                and params[1].type == 'identifier'
                and node_text(params[1]) == node_text(obj)
            )
        return False

    @staticmethod
    def is_set_state_updater(fn: Node) -> bool:
        """First-argument function of a ``*.setState(...)`` call.

        The optional second argument (the completion callback) has the same
        call parent but is not an updater.
        """
        if fn.type == 'method_definition':
            return False
        parent = syntactic_parent(fn)
        if parent is None or parent.type != 'arguments':
            return False
        call = parent.parent
        if call is None or call.type != 'call_expression':
            return False
        callee = call.child_by_field_name('function')
        if callee is None or callee.type != 'member_expression' or static_access_name(callee) != 'setState':
            return False
        args = named_args(parent)
        return bool(args) and unwrap_parens(args[0]).id == fn.id

    # ------------------------------------------------------------------
    # Node-ancestor predicates
    # ------------------------------------------------------------------

    def is_lifecycle_method_node(self, holder: Optional[Node]) -> bool:
        """True for a constructor or a lifecycle-named method, property or class field."""
        if holder is None:
            return False
        if is_constructor_method(holder):
            return True
        name = holder_key_name(holder)
        if name in LIFECYCLE_METHODS:
            return True
        return self.check_async_safe_lifecycles and name in ASYNC_SAFE_LIFECYCLE_METHODS

    def is_in_lifecycle_method_node(self, node: Node) -> bool:
        """Walk syntax parents (not frames) looking for a lifecycle method or property."""
        for current in ancestors(node, include_self=True):
            if current.type in ('method_definition', 'pair') and self.is_lifecycle_method_node(current):
                return True
        return False
