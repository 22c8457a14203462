"""
txseq - Sequence diagrams from flattened smart-contract execution traces
"""

__version__ = "0.1.0"

# Core components
from .core import (
    EventKind,
    InteractionEvent,
    TransactionTrace,
    CallFrameReconstructor,
    ReconstructionOptions,
    SequenceDiagram,
    build_diagram,
    load_trace,
    reconstruct,
)

# Formatting
from .formatting import PlantUmlEncoder, DiagramStyle, to_plantuml

# Configuration
from .config import DiagramConfig, load_config

# Utilities
from .utils import (
    TxseqError,
    MalformedTraceError,
    TraceLoadError,
    setup_logging,
)

__all__ = [
    # Version
    '__version__',
    # Core
    'EventKind',
    'InteractionEvent',
    'TransactionTrace',
    'CallFrameReconstructor',
    'ReconstructionOptions',
    'SequenceDiagram',
    'build_diagram',
    'load_trace',
    'reconstruct',
    # Formatting
    'PlantUmlEncoder',
    'DiagramStyle',
    'to_plantuml',
    # Config
    'DiagramConfig',
    'load_config',
    # Utils
    'TxseqError',
    'MalformedTraceError',
    'TraceLoadError',
    'setup_logging',
]
