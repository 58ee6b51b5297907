"""Configuration management for proptrace.

Loads environment variables (optionally from a .env file) and resolves them
into the immutable EngineConfig the analyzers run with.
"""
import os
import re
from dataclasses import dataclass
from typing import Optional, Tuple
from dotenv import find_dotenv, load_dotenv

__version__ = "1.0.0"

# Versions absent from settings are treated as "latest React"
DEFAULT_REACT_VERSION = "999.999.999"
# getDerivedStateFromProps, getSnapshotBeforeUpdate and the UNSAFE_* names
ASYNC_SAFE_LIFECYCLES_VERSION = "16.3.0"

DEFAULT_EXCLUDED_DIRS = frozenset({
    'node_modules', '.git', 'dist', 'build', 'coverage', '.next', 'vendor', '__pycache__',
})

_VERSION_RE = re.compile(r'^\s*v?(\d+)(?:\.(\d+))?(?:\.(\d+))?')


def parse_version(version: str) -> Tuple[int, int, int]:
    """Parse 'X', 'X.Y' or 'X.Y.Z' (pre-release suffixes ignored).

    Raises:
        ValueError: If the string does not start with a version number
    """
    match = _VERSION_RE.match(version or '')
    if not match:
        raise ValueError(f"Invalid React version: '{version}' (expected X.Y.Z, e.g. 16.3.0)")
    return tuple(int(part) if part else 0 for part in match.groups())


def react_version_at_least(react_version: str, minimum: str) -> bool:
    return parse_version(react_version) >= parse_version(minimum)


@dataclass(frozen=True)
class EngineConfig:
    """Settings fixed before a traversal starts."""
    check_async_safe_lifecycles: bool = True
    pragma: str = 'React'
    create_class: str = 'createReactClass'

    @classmethod
    def from_react_version(cls, react_version: str = DEFAULT_REACT_VERSION, **kwargs) -> 'EngineConfig':
        """Resolve the async-safe lifecycle gate from a React version string."""
        return cls(
            check_async_safe_lifecycles=react_version_at_least(react_version, ASYNC_SAFE_LIFECYCLES_VERSION),
            **kwargs
        )


class Config:
    """Configuration loader with environment variable support."""

    def __init__(self):
        """Initialize config by loading the nearest .env file, if any."""
        load_dotenv(find_dotenv(usecwd=True))
        self._validate()

    def _validate(self):
        """Validate environment-provided values.

        Raises:
            ValueError: If PROPTRACE_REACT_VERSION is not a version number
        """
        parse_version(self.react_version)

    @property
    def react_version(self) -> str:
        """React version the analyzed code targets (PROPTRACE_REACT_VERSION)."""
        return os.getenv("PROPTRACE_REACT_VERSION", DEFAULT_REACT_VERSION)

    @property
    def pragma(self) -> str:
        """Name React is imported under (PROPTRACE_PRAGMA)."""
        return os.getenv("PROPTRACE_PRAGMA", "React")

    @property
    def create_class(self) -> str:
        """ES5 component factory name (PROPTRACE_CREATE_CLASS)."""
        return os.getenv("PROPTRACE_CREATE_CLASS", "createReactClass")

    @property
    def excluded_dirs(self) -> frozenset:
        """Directory names skipped when walking a project.

        PROPTRACE_EXCLUDE adds comma-separated names to the defaults.
        """
        extra = os.getenv("PROPTRACE_EXCLUDE", "")
        return DEFAULT_EXCLUDED_DIRS | {name.strip() for name in extra.split(',') if name.strip()}

    def engine_config(self, react_version: Optional[str] = None) -> EngineConfig:
        """Freeze the current settings, optionally overriding the React version."""
        return EngineConfig.from_react_version(
            react_version or self.react_version,
            pragma=self.pragma,
            create_class=self.create_class,
        )


# Singleton instance
_config = None


def get_config() -> Config:
    """Get or create singleton Config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config
