"""
ANSI color helpers for terminal output.
"""

import os
import sys


class Colors:
    """ANSI escape sequences."""
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[2m'

    MAGENTA = '\033[35m'
    YELLOW = '\033[33m'

    BRIGHT_RED = '\033[91m'
    BRIGHT_GREEN = '\033[92m'
    BRIGHT_YELLOW = '\033[93m'
    BRIGHT_BLUE = '\033[94m'
    BRIGHT_CYAN = '\033[96m'


def _supports_color() -> bool:
    if os.environ.get('NO_COLOR'):
        return False
    return hasattr(sys.stdout, 'isatty') and sys.stdout.isatty()


SUPPORTS_COLOR = _supports_color()


def _wrap(text, code: str) -> str:
    if not SUPPORTS_COLOR:
        return str(text)
    return f"{code}{text}{Colors.RESET}"


def bold(text) -> str:
    return _wrap(text, Colors.BOLD)


def dim(text) -> str:
    return _wrap(text, Colors.DIM)


# Semantic helpers

def error(text) -> str:
    """Format an error message."""
    return _wrap(text, Colors.BRIGHT_RED)


def warning(text) -> str:
    """Format a warning message."""
    return _wrap(text, Colors.BRIGHT_YELLOW)


def info(text) -> str:
    """Format an informational message."""
    return _wrap(text, Colors.BRIGHT_CYAN)


def success(text) -> str:
    """Format a success message."""
    return _wrap(text, Colors.BRIGHT_GREEN)


def address(text) -> str:
    return _wrap(text, Colors.MAGENTA)


def gas_value(text) -> str:
    return _wrap(text, Colors.YELLOW)


def function_name(text) -> str:
    return _wrap(text, Colors.BRIGHT_BLUE)
