"""Cross-check used props against declared propTypes."""
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from .components import Component
from .prop_paths import COMPUTED_PROP
from .prop_types import PropDeclaration


@dataclass
class PropFinding:
    """A declared-but-unused or used-but-undeclared prop."""
    component: str
    prop: str  # Dotted path, e.g. 'config.theme'
    kind: str  # 'unused' or 'undeclared'
    line: int

    def to_dict(self) -> dict:
        return {'component': self.component, 'prop': self.prop, 'kind': self.kind, 'line': self.line}


def _declared_paths(declarations: Dict[str, PropDeclaration],
                    prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], PropDeclaration]]:
    for name, declaration in declarations.items():
        path = prefix + (name,)
        yield path, declaration
        if declaration.children:
            yield from _declared_paths(declaration.children, path)


def find_unused_props(component: Component) -> List[PropFinding]:
    """Declared props (and shape entries) that no usage record reaches.

    Nothing is reported for components without a validated schema or whose
    usage set is known to be incomplete (spread, computed access).
    """
    if not component.must_validate or component.ignore_unused_props_validation:
        return []

    used_paths = [record.path for record in component.used_props]
    findings = []
    for path, declaration in _declared_paths(component.declared_prop_types):
        if any(used[:len(path)] == path for used in used_paths):
            continue
        findings.append(PropFinding(
            component=component.name,
            prop='.'.join(path),
            kind='unused',
            line=declaration.line,
        ))
    return findings


def _undeclared_prefix(path: Tuple[str, ...],
                       declarations: Dict[str, PropDeclaration]) -> Optional[Tuple[str, ...]]:
    """Shortest prefix of ``path`` missing from the schema, or None if covered."""
    current: Optional[Dict[str, PropDeclaration]] = declarations
    for depth, name in enumerate(path):
        if name == COMPUTED_PROP:
            return None
        declaration = current.get(name)
        if declaration is None:
            return path[:depth + 1]
        # Nested paths under PropTypes.object and friends are not checked
        if not declaration.children:
            return None
        current = declaration.children
    return None


def find_undeclared_props(component: Component) -> List[PropFinding]:
    """Used props missing from the declared schema, first occurrence each."""
    if not component.must_validate:
        return []

    seen = set()
    findings = []
    for record in component.used_props:
        missing = _undeclared_prefix(record.path, component.declared_prop_types)
        if missing is None:
            continue
        dotted = '.'.join(missing)
        if dotted in seen:
            continue
        seen.add(dotted)
        findings.append(PropFinding(
            component=component.name,
            prop=dotted,
            kind='undeclared',
            line=record.location[0],
        ))
    return findings
