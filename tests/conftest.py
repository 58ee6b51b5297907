"""Shared fixtures: parse JSX snippets and run the prop usage pipeline on them."""
import textwrap

import pytest

from proptrace.config import EngineConfig
from proptrace.analyzer.analysis import PropUsageAnalyzer
from proptrace.analyzer.parser import LanguageParser
from proptrace.analyzer.syntax import FUNCTION_SCOPE_TYPES, ancestors, node_text, walk


def find_node(root, node_type, text=None):
    """First node of ``node_type`` (optionally with exact source ``text``) in pre-order."""
    for node in walk(root):
        if node.type == node_type and (text is None or node_text(node) == text):
            return node
    raise AssertionError(f"No {node_type} node with text {text!r}")


def enter_frames(scopes, node):
    """Push the function frames enclosing ``node`` as the traversal driver would."""
    scopes.reset()
    for frame in reversed(list(ancestors(node, include_self=True))):
        if frame.type in FUNCTION_SCOPE_TYPES:
            scopes.push(frame)


@pytest.fixture
def parse():
    parser = LanguageParser('javascript')

    def _parse(code):
        return parser.parse_source(textwrap.dedent(code))
    return _parse


@pytest.fixture
def analyze():
    """Analyze a JSX snippet; returns the FileAnalysis."""
    def _analyze(code, language='javascript', config=None):
        analyzer = PropUsageAnalyzer(config or EngineConfig())
        return analyzer.analyze_source(textwrap.dedent(code), language=language)
    return _analyze


@pytest.fixture
def component_named():
    def _component_named(analysis, name):
        for component in analysis.components:
            if component.name == name:
                return component
        raise AssertionError(f"No component {name!r}; found {[c.name for c in analysis.components]}")
    return _component_named


@pytest.fixture(name='find_node')
def find_node_fixture():
    return find_node


@pytest.fixture(name='enter_frames')
def enter_frames_fixture():
    return enter_frames
