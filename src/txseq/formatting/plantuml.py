"""
PlantUML encoder

Renders a SequenceDiagram as PlantUML sequence-diagram markup. Producing an
image from the markup is left to the PlantUML tool itself.
"""

from dataclasses import dataclass
from typing import List

from txseq.core.instructions import (
    Activation,
    ArrowStyle,
    CallArrow,
    Destroy,
    Instruction,
    Note,
    ParticipantDeclaration,
    Return,
    SequenceDiagram,
    ValueArrow,
)
from txseq.formatting.labels import participant_id, short_address

DEFAULT_DELEGATE_LIFELINE_COLOR = "#809ECB"
DEFAULT_DELEGATE_MESSAGE_COLOR = "#3471CD"

_ARROW_HEADS = {
    ArrowStyle.SIMPLE: ">",
    ArrowStyle.DOUBLE: ">>",
    ArrowStyle.CIRCLE: ">o",
    ArrowStyle.SLASHED: "\\",
}


@dataclass
class DiagramStyle:
    """Accent colors used for delegated calls."""
    delegate_lifeline_color: str = DEFAULT_DELEGATE_LIFELINE_COLOR
    delegate_message_color: str = DEFAULT_DELEGATE_MESSAGE_COLOR


class PlantUmlEncoder:
    """Encodes diagram instructions as PlantUML text."""

    def __init__(self, style: DiagramStyle = None):
        self.style = style or DiagramStyle()

    def encode(self, diagram: SequenceDiagram) -> str:
        lines = ["@startuml"]
        if diagram.title:
            lines.append(f"title {diagram.title}")
        lines.extend(self.encode_instructions(diagram.instructions))
        lines.append("@enduml")
        return "\n".join(lines) + "\n"

    def encode_instructions(self, instructions: List[Instruction]) -> List[str]:
        return [self.encode_instruction(i) for i in instructions]

    def encode_instruction(self, instruction: Instruction) -> str:
        if isinstance(instruction, ParticipantDeclaration):
            line = f'participant "{short_address(instruction.address)}" as {participant_id(instruction.address)}'
            stereotypes = "".join(f"<<{s}>>" for s in instruction.stereotypes)
            return f"{line} {stereotypes}" if stereotypes else line
        if isinstance(instruction, CallArrow):
            return self._message(instruction, instruction.label)
        if isinstance(instruction, ValueArrow):
            return self._message(instruction, instruction.amount)
        if isinstance(instruction, Activation):
            line = f"activate {participant_id(instruction.participant)}"
            if instruction.delegated:
                line += f" {self.style.delegate_lifeline_color}"
            return line
        if isinstance(instruction, Return):
            return f"return {instruction.label}" if instruction.label else "return"
        if isinstance(instruction, Destroy):
            return f"destroy {participant_id(instruction.participant)}"
        if isinstance(instruction, Note):
            return f"note right of {participant_id(instruction.participant)}: {instruction.text}"
        raise TypeError(f"Cannot encode instruction {instruction!r}")

    def arrow(self, style: ArrowStyle, delegated: bool) -> str:
        color = f"[{self.style.delegate_message_color}]" if delegated else ""
        return f"-{color}{_ARROW_HEADS[style]}"

    def _message(self, instruction, text: str) -> str:
        gas = f" [{instruction.gas_used}]" if instruction.gas_used is not None else ""
        return (
            f"{participant_id(instruction.source)} "
            f"{self.arrow(instruction.arrow, instruction.delegated)} "
            f"{participant_id(instruction.target)}: {text}{gas}"
        )


def to_plantuml(diagram: SequenceDiagram, style: DiagramStyle = None) -> str:
    return PlantUmlEncoder(style).encode(diagram)
