#!/usr/bin/env python3
"""
Main entry point for txseq

This module serves as the CLI entry point, handling argument parsing
and routing to the command implementations in the cli/ module.
"""

import sys
import argparse

from txseq import __version__
from .common import configure_logging
from .generate import generate_command
from .events import list_events_command


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='txseq - sequence diagrams from contract execution traces')
    parser.add_argument('--version', '-v', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--verbose', action='store_true', help='Enable trace-level logging of frame pushes and pops')
    parser.add_argument('--quiet', '-q', action='store_true', help='Suppress log output')
    parser.add_argument('--log-file', help='Also write logs to this file')

    subparsers = parser.add_subparsers(dest='command', help='Commands')
    subparsers.required = True

    # generate command
    generate_parser = subparsers.add_parser('generate', help='Generate a PlantUML sequence diagram from a trace file')
    generate_parser.add_argument('trace_file', help='JSON trace file (list of events, or object with events/contracts/details)')
    generate_parser.add_argument('--output', '-o', help='Output file (default: stdout)')
    generate_parser.add_argument('--gas', '-g', action='store_true', help='Show gas used on each message')
    generate_parser.add_argument('--params', '-p', action='store_true', help='Show function parameters on call messages')
    generate_parser.add_argument('--network', '-n', help='Network label for the diagram title')
    generate_parser.add_argument('--json', action='store_true', help='Output the instruction sequence as JSON instead of PlantUML')
    generate_parser.add_argument('--config', '-c', help='YAML config file (default: ./txseq.config.yaml if present)')
    generate_parser.add_argument('--save-config', action='store_true', help='Save the effective configuration to txseq.config.yaml')

    # list-events command
    events_parser = subparsers.add_parser('list-events', help='List the flat event sequence of a trace file')
    events_parser.add_argument('trace_file', help='JSON trace file')
    events_parser.add_argument('--json-events', action='store_true', help='Output events in JSON format')

    return parser


def main(argv=None):
    """Main entry point for txseq CLI."""
    args = build_parser().parse_args(argv)
    configure_logging(args)

    if args.command == 'generate':
        return generate_command(args)
    elif args.command == 'list-events':
        return list_events_command(args)

    return 0


if __name__ == '__main__':
    sys.exit(main())
