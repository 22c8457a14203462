"""
Generate command implementation.

This module turns a trace file into PlantUML sequence-diagram markup, or
into the raw instruction list as JSON.
"""

import json

from txseq.config import load_config
from txseq.core.diagram import build_diagram
from txseq.formatting.plantuml import PlantUmlEncoder
from txseq.utils.exceptions import OutputError, TxseqError
from txseq.utils.logging import logger
from txseq.cli.common import handle_command_error, read_trace, write_output


def generate_command(args) -> int:
    """
    Execute the generate command.

    Args:
        args: Parsed command arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    json_mode = getattr(args, 'json', False)

    try:
        config = load_config(getattr(args, 'config', None)).merge_args(args)
        trace = read_trace(args.trace_file)
        diagram = build_diagram(
            trace,
            options=config.reconstruction_options,
            network=config.network,
        )
    except TxseqError as e:
        return handle_command_error(e, json_mode)

    if getattr(args, 'save_config', False):
        config.save()

    logger.debug(f"Generated {len(diagram.instructions)} instructions")

    if json_mode:
        text = json.dumps(diagram.to_dict(), indent=2) + "\n"
    else:
        text = PlantUmlEncoder(config.style).encode(diagram)

    try:
        write_output(text, config.output)
    except OutputError as e:
        return handle_command_error(e, json_mode)
    return 0
