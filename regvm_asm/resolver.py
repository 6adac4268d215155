"""
Label address resolution.

The address of a label is the number of slots occupied by every instruction
placed before it. An instruction occupies one slot for its selector plus one
per operand token the encoder emits for it; a conditional branch emits its
condition as an extra token. The encoder emits exactly instruction_size()
tokens per instruction, which is what keeps these addresses valid.
"""

from typing import Dict

from .errors import SymbolError
from .instructions import Instruction, Program


def instruction_size(insn: Instruction) -> int:
    """Number of slots an instruction occupies in the output stream."""
    size = 1 + insn.definition.arity
    if insn.condition is not None:
        size += 1
    return size


def label_size(label) -> int:
    return sum(instruction_size(insn) for insn in label.instructions)


def program_size(program: Program) -> int:
    """Total number of slots in the encoded program."""
    return sum(label_size(label) for label in program.labels)


def resolve(program: Program, label_name: str) -> int:
    """
    Compute the absolute slot address of a label.

    Args:
        program: Parsed program
        label_name: Label to look up (without the leading '.')

    Returns:
        Slot offset of the label's first instruction

    Raises:
        SymbolError: If the label is not defined
    """
    address = 0
    for label in program.labels:
        if label.name == label_name:
            return address
        address += label_size(label)
    raise SymbolError(f"Undefined label '{label_name}'")


def build_symbol_table(program: Program) -> Dict[str, int]:
    """Resolve every label in a single replay over the program."""
    symbols: Dict[str, int] = {}
    address = 0
    for label in program.labels:
        if label.name in symbols:
            raise SymbolError(f"Duplicate label: {label.name}")
        symbols[label.name] = address
        address += label_size(label)
    return symbols
