"""Tree-sitter parser for JavaScript, TypeScript and TSX component sources."""
from pathlib import Path
from typing import Optional, Union
from tree_sitter import Language, Parser, Tree
import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript


class LanguageParser:
    """JSX-aware parser using the tree-sitter v0.23+ API."""

    SUPPORTED_LANGUAGES = {
        '.js': 'javascript',
        '.jsx': 'javascript',
        '.mjs': 'javascript',
        '.cjs': 'javascript',
        '.ts': 'typescript',
        '.tsx': 'tsx',
    }

    def __init__(self, language: str = 'javascript'):
        """Initialize parser for given language.

        Args:
            language: One of 'javascript', 'typescript', 'tsx'

        Raises:
            ValueError: If language is not supported
        """
        self.language = language
        self.parser = self._create_parser()

    def _create_parser(self) -> Parser:
        """Build a Parser bound to the grammar for ``self.language``.

        The javascript grammar already understands JSX; plain TypeScript does
        not, which is why ``.tsx`` files get their own grammar.

        Raises:
            ValueError: If language is not supported
        """
        if self.language == 'javascript':
            lang = Language(tsjavascript.language())
        elif self.language == 'typescript':
            lang = Language(tstypescript.language_typescript())
        elif self.language == 'tsx':
            lang = Language(tstypescript.language_tsx())
        else:
            raise ValueError(f"Unsupported language: {self.language}")

        return Parser(lang)

    def parse_source(self, source_code: Union[str, bytes]) -> Tree:
        """Parse in-memory source code.

        Args:
            source_code: Source text; str input is encoded as UTF-8

        Returns:
            Parsed Tree object
        """
        if isinstance(source_code, str):
            source_code = source_code.encode('utf-8')
        return self.parser.parse(source_code)

    def parse_file(self, file_path: Union[str, Path]) -> Optional[Tree]:
        """Parse file and return tree-sitter Tree.

        Args:
            file_path: Path to source file to parse

        Returns:
            Parsed Tree object, or None if the file cannot be read
        """
        file_path = Path(file_path)

        if not file_path.exists():
            return None

        try:
            source_code = file_path.read_bytes()
        except OSError:
            return None
        return self.parse_source(source_code)

    @classmethod
    def language_for(cls, file_path: Union[str, Path]) -> Optional[str]:
        """Map a file extension to a grammar name, or None when unsupported."""
        return cls.SUPPORTED_LANGUAGES.get(Path(file_path).suffix.lower())

    @classmethod
    def from_file_extension(cls, file_path: Union[str, Path]) -> Optional['LanguageParser']:
        """Create parser based on file extension.

        Args:
            file_path: Path to determine language from

        Returns:
            LanguageParser instance, or None if extension not supported
        """
        language = cls.language_for(file_path)
        if language:
            return cls(language)
        return None
