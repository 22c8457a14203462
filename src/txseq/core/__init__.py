"""
Core module for txseq.

This module contains the trace data model and the call hierarchy
reconstruction:
- InteractionEvent: One record of the flat execution trace
- CallFrameReconstructor: Infers frame closes from event adjacency
- build_diagram: Title, participants and reconstructed instructions
"""

from .events import (
    EventKind,
    DelegateContext,
    CallArgument,
    CallLabel,
    InteractionEvent,
    Contract,
    TransactionDetails,
    TransactionTrace,
    load_trace,
)
from .instructions import (
    InstructionKind,
    ArrowStyle,
    Instruction,
    ParticipantDeclaration,
    CallArrow,
    ValueArrow,
    Activation,
    Return,
    Destroy,
    Note,
    SequenceDiagram,
)
from .reconstructor import (
    CallFrameReconstructor,
    ReconstructionOptions,
    DelegateFrame,
    reconstruct,
)
from .diagram import build_diagram

__all__ = [
    'EventKind',
    'DelegateContext',
    'CallArgument',
    'CallLabel',
    'InteractionEvent',
    'Contract',
    'TransactionDetails',
    'TransactionTrace',
    'load_trace',
    'InstructionKind',
    'ArrowStyle',
    'Instruction',
    'ParticipantDeclaration',
    'CallArrow',
    'ValueArrow',
    'Activation',
    'Return',
    'Destroy',
    'Note',
    'SequenceDiagram',
    'CallFrameReconstructor',
    'ReconstructionOptions',
    'DelegateFrame',
    'reconstruct',
    'build_diagram',
]
