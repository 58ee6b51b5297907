"""Small helpers over tree-sitter JavaScript/TypeScript nodes.

tree-sitter and ESTree disagree on a few shapes that matter here:
class and object methods carry their parameters directly (no inner function
node), TypeScript wraps parameters in ``required_parameter`` and
parenthesized expressions survive as their own nodes. These helpers hide
those differences from the analyzers.
"""
from typing import Iterator, List, Optional
from tree_sitter import Node

FUNCTION_TYPES = frozenset({
    'function_declaration',
    'function_expression',
    'function',
    'arrow_function',
    'generator_function',
    'generator_function_declaration',
})
# Function-like nodes that open a new frame in the scope chain
FUNCTION_SCOPE_TYPES = FUNCTION_TYPES | {'method_definition'}
FUNCTION_EXPRESSION_TYPES = frozenset({'function_expression', 'function', 'arrow_function', 'generator_function'})
MEMBER_TYPES = frozenset({'member_expression', 'subscript_expression'})
CLASS_TYPES = frozenset({'class_declaration', 'class', 'abstract_class_declaration'})
FIELD_TYPES = frozenset({'field_definition', 'public_field_definition'})
PARAMETER_WRAPPERS = frozenset({'required_parameter', 'optional_parameter'})
JSX_TYPES = frozenset({'jsx_element', 'jsx_self_closing_element', 'jsx_fragment'})
ASSIGNMENT_TYPES = frozenset({'assignment_expression', 'augmented_assignment_expression'})


def node_text(node: Optional[Node]) -> str:
    """Decoded source text of a node ('' for None)."""
    if node is None:
        return ''
    return node.text.decode('utf-8')


def strip_quotes(text: str) -> str:
    return text.strip('"\'`')


def is_same(a: Optional[Node], b: Optional[Node]) -> bool:
    """Identity check that survives tree-sitter handing out fresh Node wrappers."""
    return a is not None and b is not None and a.id == b.id


def unwrap_parens(node: Optional[Node]) -> Optional[Node]:
    while node is not None and node.type == 'parenthesized_expression':
        inner = [child for child in node.named_children if child.type != 'comment']
        if not inner:
            break
        node = inner[0]
    return node


def syntactic_parent(node: Node) -> Optional[Node]:
    """Parent node, skipping parenthesized expressions."""
    parent = node.parent
    while parent is not None and parent.type == 'parenthesized_expression':
        parent = parent.parent
    return parent


def estree_parent(node: Node) -> Optional[Node]:
    """Parent as an ESTree consumer would see it.

    Arguments hang directly off their call and methods act as their own
    holder, so ``(props) => ...`` inside ``memo(...)`` reports the call and a
    method reports itself.
    """
    if node.type == 'method_definition':
        return node
    parent = syntactic_parent(node)
    if parent is not None and parent.type == 'arguments':
        return parent.parent
    return parent


def named_args(node: Optional[Node]) -> List[Node]:
    """Named children without comments (arguments, parameters, patterns)."""
    if node is None:
        return []
    return [child for child in node.named_children if child.type != 'comment']


def unwrap_parameter(param: Node) -> Node:
    """Strip the TypeScript parameter wrapper down to its binding pattern."""
    if param.type in PARAMETER_WRAPPERS:
        pattern = param.child_by_field_name('pattern')
        if pattern is not None:
            return pattern
    return param


def function_params(fn: Node) -> List[Node]:
    """Parameters of a function-like node, in declaration order."""
    single = fn.child_by_field_name('parameter')
    if single is not None:
        return [single]
    return [unwrap_parameter(p) for p in named_args(fn.child_by_field_name('parameters'))]


def access_object(node: Node) -> Optional[Node]:
    return node.child_by_field_name('object')


def access_key(node: Node) -> Optional[Node]:
    """The key sub-node of a member (``property``) or subscript (``index``) access."""
    if node.type == 'subscript_expression':
        return node.child_by_field_name('index')
    return node.child_by_field_name('property')


def static_access_name(node: Node) -> Optional[str]:
    """Statically known key of ``a.b`` or ``a['b']``, else None."""
    key = access_key(node)
    if key is None:
        return None
    if node.type == 'member_expression':
        return node_text(key) if key.type == 'property_identifier' else None
    key = unwrap_parens(key)
    if key.type == 'string':
        return strip_quotes(node_text(key))
    return None


def static_key_name(key: Optional[Node]) -> Optional[str]:
    """Name of a non-computed object key (identifier or string literal)."""
    if key is None:
        return None
    if key.type in ('property_identifier', 'identifier', 'shorthand_property_identifier'):
        return node_text(key)
    if key.type == 'string':
        return strip_quotes(node_text(key))
    if key.type == 'number':
        return node_text(key)
    return None


def identifier_key_name(key: Optional[Node]) -> Optional[str]:
    """Name of a plain identifier key; string-literal keys do not count."""
    if key is not None and key.type in ('property_identifier', 'identifier'):
        return node_text(key)
    return None


def pattern_members(pattern: Node) -> List[Node]:
    return named_args(pattern)


def pattern_key_value(member: Node) -> Optional[str]:
    """Key extracted by one member of an object pattern.

    ``{a}``, ``{a = 1}``, ``{a: b}`` and ``{'a': b}`` give ``a``; a rest element
    gives its binding name; a computed ``{[k]: v}`` gives ``k`` when ``k`` is
    an identifier or a string.
    """
    if member.type == 'shorthand_property_identifier_pattern':
        return node_text(member)
    if member.type == 'object_assignment_pattern':
        left = member.child_by_field_name('left')
        if left is not None and left.type == 'shorthand_property_identifier_pattern':
            return node_text(left)
        return None
    if member.type == 'pair_pattern':
        key = member.child_by_field_name('key')
        if key is not None and key.type == 'computed_property_name':
            inner = named_args(key)
            return static_key_name(inner[0]) if inner else None
        return static_key_name(key)
    if member.type == 'rest_pattern':
        inner = named_args(member)
        if inner and inner[0].type == 'identifier':
            return node_text(inner[0])
    return None


def is_computed_pattern_member(member: Node) -> bool:
    if member.type != 'pair_pattern':
        return False
    key = member.child_by_field_name('key')
    return key is not None and key.type == 'computed_property_name'


def method_holder(fn: Node) -> Optional[Node]:
    """Node carrying the key a function-like node is declared under.

    Methods carry their own name; function and arrow values sit under an
    object ``pair`` or a class field.
    """
    if fn.type == 'method_definition':
        return fn
    return syntactic_parent(fn)


def holder_key_name(holder: Optional[Node]) -> Optional[str]:
    if holder is None:
        return None
    if holder.type == 'method_definition':
        return identifier_key_name(holder.child_by_field_name('name'))
    if holder.type == 'pair':
        return identifier_key_name(holder.child_by_field_name('key'))
    if holder.type in FIELD_TYPES:
        key = holder.child_by_field_name('property') or holder.child_by_field_name('name')
        return identifier_key_name(key)
    return None


def is_constructor_method(holder: Optional[Node]) -> bool:
    return (
        holder is not None
        and holder.type == 'method_definition'
        and holder.parent is not None
        and holder.parent.type == 'class_body'
        and holder_key_name(holder) == 'constructor'
    )


def is_static_member(node: Node) -> bool:
    return any(child.type == 'static' for child in node.children)


def is_function_like_expression(node: Optional[Node]) -> bool:
    node = unwrap_parens(node)
    return node is not None and node.type in FUNCTION_EXPRESSION_TYPES


def is_assignment_lhs(node: Node) -> bool:
    parent = node.parent
    return (
        parent is not None
        and parent.type in ASSIGNMENT_TYPES
        and is_same(parent.child_by_field_name('left'), node)
    )


def ancestors(node: Node, include_self: bool = False) -> Iterator[Node]:
    current = node if include_self else node.parent
    while current is not None:
        yield current
        current = current.parent


def walk(root: Node) -> Iterator[Node]:
    """Pre-order walk over named nodes without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.named_children))
