"""
Assembles a complete sequence diagram from a transaction trace: the title
line, one participant declaration per known contract, then the
reconstructed call hierarchy.
"""

from typing import Dict, List, Optional

from txseq.core.events import Contract, TransactionDetails, TransactionTrace
from txseq.core.instructions import ParticipantDeclaration, SequenceDiagram
from txseq.core.reconstructor import CallFrameReconstructor, ReconstructionOptions


def diagram_title(details: TransactionDetails, network: Optional[str] = None) -> str:
    """Title is the network label followed by the transaction hash."""
    return f"{network or details.network or ''} {details.hash}".strip()


def contract_stereotypes(contract: Contract) -> tuple:
    stereotypes = []
    if contract.token_name:
        if contract.symbol:
            stereotypes.append(f"{contract.token_name} ({contract.symbol})")
        else:
            stereotypes.append(contract.token_name)
    if contract.contract_name:
        stereotypes.append(contract.contract_name)
    return tuple(stereotypes)


def participant_declarations(contracts: Dict[str, Contract]) -> List[ParticipantDeclaration]:
    return [
        ParticipantDeclaration(address=address, stereotypes=contract_stereotypes(contract))
        for address, contract in contracts.items()
    ]


def build_diagram(
    trace: TransactionTrace,
    options: Optional[ReconstructionOptions] = None,
    network: Optional[str] = None,
) -> SequenceDiagram:
    """
    Build the full instruction sequence for a trace.

    Args:
        trace: Loaded transaction trace
        options: Gas and parameter display options
        network: Overrides the network label from the trace details

    Returns:
        SequenceDiagram with participant declarations followed by messages
    """
    instructions = list(participant_declarations(trace.contracts))
    instructions.extend(CallFrameReconstructor(options).reconstruct(trace.events))
    return SequenceDiagram(
        title=diagram_title(trace.details, network),
        instructions=instructions,
    )
