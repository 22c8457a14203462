"""
CLI module for txseq commands.

This module provides the command-line interface for txseq,
including the generate and list-events commands.
"""

from .main import main

__all__ = [
    'main',
    'generate_command',
    'list_events_command',
]


def generate_command(args):
    """Execute the generate command."""
    from .generate import generate_command as _generate_command
    return _generate_command(args)


def list_events_command(args):
    """Execute the list-events command."""
    from .events import list_events_command as _list_events_command
    return _list_events_command(args)
