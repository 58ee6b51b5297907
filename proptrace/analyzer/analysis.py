"""Per-file analysis facade: parse, detect components, track usage, report."""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union
from tree_sitter import Tree

from ..config import EngineConfig
from .components import Component, ComponentRegistry
from .component_detector import ComponentDetector
from .parser import LanguageParser
from .prop_types import PropTypesExtractor
from .report import PropFinding, find_undeclared_props, find_unused_props
from .used_props import UsedPropsTracker

logger = logging.getLogger(__name__)


@dataclass
class FileAnalysis:
    """Outcome of analyzing one source unit."""
    file_path: str
    components: List[Component] = field(default_factory=list)
    ungrouped: List[Component] = field(default_factory=list)  # Usages outside any component
    unused: List[PropFinding] = field(default_factory=list)
    undeclared: List[PropFinding] = field(default_factory=list)
    has_syntax_errors: bool = False

    @property
    def findings(self) -> List[PropFinding]:
        return sorted(self.unused + self.undeclared, key=lambda f: (f.line, f.component, f.prop))


class PropUsageAnalyzer:
    """Runs the prop usage pipeline over one source unit at a time.

    Every call builds a fresh ComponentRegistry, so analyzing the same source
    twice yields identical results.
    """

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or EngineConfig()

    def build_tracker(self, tree: Tree) -> UsedPropsTracker:
        """Detect components and schemas; return a tracker ready to walk ``tree``."""
        registry = ComponentRegistry()
        detector = ComponentDetector(registry, pragma=self.config.pragma, create_class=self.config.create_class)
        detector.detect(tree.root_node)
        PropTypesExtractor(registry).extract(tree.root_node)
        return UsedPropsTracker(registry, detector, self.config)

    def analyze_tree(self, tree: Tree, file_path: str = '<source>') -> FileAnalysis:
        tracker = self.build_tracker(tree)
        registry = tracker.track(tree.root_node)

        analysis = FileAnalysis(file_path=file_path, has_syntax_errors=tree.root_node.has_error)
        analysis.components = registry.list()
        analysis.ungrouped = [c for c in registry.ungrouped()
                              if c.used_props or c.ignore_unused_props_validation]
        for component in analysis.components:
            analysis.unused.extend(find_unused_props(component))
            analysis.undeclared.extend(find_undeclared_props(component))
        return analysis

    def analyze_source(self, source_code: Union[str, bytes], language: str = 'javascript',
                       file_path: str = '<source>') -> FileAnalysis:
        tree = LanguageParser(language).parse_source(source_code)
        return self.analyze_tree(tree, file_path)

    def analyze_file(self, file_path: Union[str, Path]) -> Optional[FileAnalysis]:
        """Analyze a file on disk.

        Returns:
            FileAnalysis, or None if the extension is unsupported or the file
            cannot be read
        """
        parser = LanguageParser.from_file_extension(file_path)
        if parser is None:
            logger.debug("Skipping %s: unsupported extension", file_path)
            return None
        tree = parser.parse_file(file_path)
        if tree is None:
            logger.warning("Could not read %s", file_path)
            return None
        if tree.root_node.has_error:
            logger.warning("Syntax errors in %s; results may be incomplete", file_path)
        return self.analyze_tree(tree, str(file_path))
