"""Rich Console wrapper that degrades gracefully on non-UTF-8 terminals."""
from typing import Any
from rich.console import Console
from .logger import sanitize_for_terminal, is_utf8_capable


class SafeConsole(Console):
    """Console whose ``print`` sanitizes glyphs when the terminal lacks UTF-8."""

    def __init__(self, *args, **kwargs):
        self._needs_sanitization = not is_utf8_capable()
        if self._needs_sanitization:
            kwargs.setdefault('legacy_windows', True)
        super().__init__(*args, **kwargs)

    def print(self, *objects: Any, **kwargs) -> None:
        if self._needs_sanitization:
            objects = tuple(sanitize_for_terminal(obj) if isinstance(obj, str) else obj for obj in objects)
        super().print(*objects, **kwargs)
