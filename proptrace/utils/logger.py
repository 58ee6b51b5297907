"""Terminal-safe output and logging setup.

Detects whether the terminal can render UTF-8 and swaps the few non-ASCII
glyphs proptrace prints for ASCII stand-ins when it cannot.
"""
import logging
import sys
import locale

from rich.logging import RichHandler

# Glyphs used in CLI output and their ASCII fallbacks
ICON_MAP = {
    '✓': '[OK]',     # check mark
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding, falling back to the locale, then ASCII."""
    if hasattr(sys.stdout, 'encoding') and sys.stdout.encoding:
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (AttributeError, ValueError):
        return 'ascii'


def is_utf8_capable() -> bool:
    return detect_terminal_encoding().replace('_', '-') in ('utf-8', 'utf8')


def sanitize_for_terminal(text: str) -> str:
    """Replace known glyphs with ASCII equivalents on non-UTF-8 terminals.

    Args:
        text: Text potentially containing glyphs from ICON_MAP

    Returns:
        str: Text safe for the current terminal
    """
    if is_utf8_capable():
        return text

    for glyph, replacement in ICON_MAP.items():
        text = text.replace(glyph, replacement)
    return text


def configure_logging(verbose: bool = False) -> None:
    """Route proptrace loggers through rich.

    Args:
        verbose: Show debug traces (marks, suppressions, validator re-entry)
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=verbose, markup=False)],
        force=True,
    )
