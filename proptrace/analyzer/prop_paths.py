"""Canonical prop names for member and subscript accesses."""
import re
from typing import Optional
from tree_sitter import Node

from .component_detector import ComponentDetector
from .scope import ScopeClassifier
from .syntax import MEMBER_TYPES, access_key, node_text, strip_quotes, unwrap_parens

# Marker for props[expr]: a read whose key cannot be known statically
COMPUTED_PROP = '__COMPUTED_PROP__'

PROP_ROOT_NAMES = ('props', 'nextProps', 'prevProps')
DIRECT_ROOT_PATTERNS = tuple(re.compile(rf'^{name}\s*(\?\.|\.|\[)') for name in PROP_ROOT_NAMES)


def is_direct_props_text(text: str) -> bool:
    """``props.x``, ``nextProps[x]``, ``prevProps?.x`` ..."""
    return any(pattern.match(text) for pattern in DIRECT_ROOT_PATTERNS)


class PropPathResolver:
    """Resolves one access node to a prop name."""

    def __init__(self, scopes: ScopeClassifier, detector: ComponentDetector):
        self.scopes = scopes
        self.detector = detector

    def resolve(self, access: Node) -> Optional[str]:
        """Name of the prop read at ``access``.

        Direct roots (``props.a``, ``nextProps.a``, ``prevProps.a`` or the
        second updater parameter) are read at the access itself; qualified
        roots (``this.props``) are read one level up, at the parent access.

        Returns:
            The prop name, COMPUTED_PROP for a computed key, or None when the
            access does not read a prop at all
        """
        is_direct = is_direct_props_text(node_text(access))
        is_direct_set_state = self.scopes.is_prop_argument_in_set_state_updater(access)

        # Bare props-like roots in a class component only count inside
        # constructors, lifecycle methods and setState updaters
        if (
            (is_direct or is_direct_set_state)
            and self.detector.enclosing_class_component(access) is not None
            and not self.scopes.in_constructor()
            and not self.scopes.in_lifecycle_method()
            and not self.scopes.in_set_state_updater()
        ):
            return None

        node = access
        if not is_direct and not is_direct_set_state:
            node = access.parent
        if node is None or node.type not in MEMBER_TYPES:
            return None
        return self.key_name(node)

    @staticmethod
    def key_name(node: Node) -> Optional[str]:
        key = access_key(node)
        if key is None:
            return None
        if node.type == 'member_expression':
            # a.#private is never a prop
            return node_text(key) if key.type == 'property_identifier' else None

        key = unwrap_parens(key)
        if key.type == 'identifier':
            return COMPUTED_PROP
        if key.type in MEMBER_TYPES:
            return None
        if key.type == 'string':
            return strip_quotes(node_text(key))
        return COMPUTED_PROP
