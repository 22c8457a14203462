"""
Formatting helpers and encoders for txseq diagrams.
"""

from .labels import (
    short_address,
    participant_id,
    display_address,
    format_ether,
    format_params,
    function_label,
    arrow_style,
)
from .plantuml import PlantUmlEncoder, DiagramStyle, to_plantuml

__all__ = [
    'short_address',
    'participant_id',
    'display_address',
    'format_ether',
    'format_params',
    'function_label',
    'arrow_style',
    'PlantUmlEncoder',
    'DiagramStyle',
    'to_plantuml',
]
