"""
Diagram instruction data model

The reconstructor's output is a flat, ordered list of these instructions.
They reference participants by address and carry already formatted label
text; visual concerns such as colors and participant ids are left to an
encoder.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class InstructionKind(str, Enum):
    """Kind of a diagram instruction."""
    PARTICIPANT = "participant-declaration"
    CALL_ARROW = "call-arrow"
    VALUE_ARROW = "value-arrow"
    ACTIVATION = "activation"
    RETURN = "return"
    DESTROY = "destroy"
    NOTE = "note"


class ArrowStyle(str, Enum):
    """Arrow head shape, selected by event kind."""
    SIMPLE = "simple"
    DOUBLE = "double"
    CIRCLE = "circle"
    SLASHED = "slashed"


@dataclass(frozen=True)
class Instruction:
    """Base class for diagram instructions."""

    kind = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result = {"kind": self.kind.value}
        for name, value in self.__dict__.items():
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, tuple):
                value = list(value)
            result[name] = value
        return result


@dataclass(frozen=True)
class ParticipantDeclaration(Instruction):
    address: str
    stereotypes: tuple = ()

    kind = InstructionKind.PARTICIPANT


@dataclass(frozen=True)
class CallArrow(Instruction):
    source: str
    target: str
    label: str = ""
    arrow: ArrowStyle = ArrowStyle.SIMPLE
    gas_used: Optional[int] = None
    delegated: bool = False

    kind = InstructionKind.CALL_ARROW


@dataclass(frozen=True)
class ValueArrow(Instruction):
    source: str
    target: str
    amount: str
    arrow: ArrowStyle = ArrowStyle.DOUBLE
    gas_used: Optional[int] = None
    delegated: bool = False

    kind = InstructionKind.VALUE_ARROW


@dataclass(frozen=True)
class Activation(Instruction):
    participant: str
    delegated: bool = False

    kind = InstructionKind.ACTIVATION


@dataclass(frozen=True)
class Return(Instruction):
    """Returns from the participant's most recent activation."""
    participant: str
    label: str = ""
    delegated: bool = False

    kind = InstructionKind.RETURN


@dataclass(frozen=True)
class Destroy(Instruction):
    """Terminates a participant's lifeline after a failed call."""
    participant: str

    kind = InstructionKind.DESTROY


@dataclass(frozen=True)
class Note(Instruction):
    participant: str
    text: str

    kind = InstructionKind.NOTE


@dataclass
class SequenceDiagram:
    """Title plus ordered instructions, ready for an encoder."""
    title: str = ""
    instructions: List[Instruction] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "instructions": [i.to_dict() for i in self.instructions],
        }
