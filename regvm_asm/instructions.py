"""
Instruction set definitions and the parsed program model.

Each mnemonic has a fixed arity and, for every operand slot, a fixed set of
permitted operand kinds. Operand counts are checked by the parser, operand
kinds by the encoder.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .operands import Immediate, LabelRef, Operand, Register


class Condition(Enum):
    """Branch conditions for blt/bgt/beq/bneq."""

    LT = "LT"
    GT = "GT"
    EQ = "EQ"
    NEQ = "NEQ"


@dataclass(frozen=True)
class InstructionDef:
    """
    Definition of an instruction mnemonic.

    Attributes:
        mnemonic: Instruction name as written in source
        slots: Slot names, one per operand
        kinds: Permitted operand types, one tuple per slot
        condition: Implicit branch condition (conditional branches only)
    """

    mnemonic: str
    slots: Tuple[str, ...]
    kinds: Tuple[tuple, ...]
    condition: Optional[Condition] = None

    @property
    def arity(self) -> int:
        return len(self.slots)


REG = (Register,)
REG_IMM = (Register, Immediate)
REG_LABEL = (Register, LabelRef)
ANY = (Register, Immediate, LabelRef)


def _def(mnemonic, *slots, condition=None):
    return InstructionDef(
        mnemonic=mnemonic,
        slots=tuple(name for name, _ in slots),
        kinds=tuple(kinds for _, kinds in slots),
        condition=condition,
    )


INSTRUCTIONS: Dict[str, InstructionDef] = {
    d.mnemonic: d
    for d in (
        # Data movement and arithmetic
        _def("mov", ("dst", REG), ("src", REG_IMM)),
        _def("cmp", ("a", REG), ("b", REG_IMM)),
        _def("add", ("dst", REG), ("a", REG), ("b", REG_IMM)),
        _def("str", ("dst", REG_IMM), ("src", REG_IMM)),
        _def("inc", ("reg", REG)),
        _def("dec", ("reg", REG)),
        _def("push", ("value", REG_IMM)),
        # Control flow
        _def("b", ("target", REG_LABEL)),
        _def("blt", ("target", REG_LABEL), condition=Condition.LT),
        _def("bgt", ("target", REG_LABEL), condition=Condition.GT),
        _def("beq", ("target", REG_LABEL), condition=Condition.EQ),
        _def("bneq", ("target", REG_LABEL), condition=Condition.NEQ),
        _def("call", ("target", ANY)),
        _def("calljs", ("target", REG_IMM)),
        # Flags
        _def("cli"),
    )
}


def get_instruction(mnemonic: str) -> Optional[InstructionDef]:
    """Look up an instruction definition by mnemonic (case-sensitive)."""
    return INSTRUCTIONS.get(mnemonic)


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic is a valid instruction."""
    return mnemonic in INSTRUCTIONS


@dataclass
class Instruction:
    """A parsed instruction with its operands and source position."""

    definition: InstructionDef
    operands: Tuple[Operand, ...]
    line_num: Optional[int] = field(default=None, compare=False)
    line_text: Optional[str] = field(default=None, compare=False)

    @property
    def mnemonic(self) -> str:
        return self.definition.mnemonic

    @property
    def condition(self) -> Optional[Condition]:
        return self.definition.condition

    def __str__(self) -> str:
        if not self.operands:
            return self.mnemonic
        return f"{self.mnemonic} {', '.join(str(op) for op in self.operands)}"


@dataclass
class Label:
    """A named block of instructions."""

    name: str
    instructions: List[Instruction] = field(default_factory=list)


@dataclass
class Program:
    """Ordered labels; the order defines the address layout."""

    labels: List[Label] = field(default_factory=list)

    def get_label(self, name: str) -> Optional[Label]:
        for label in self.labels:
            if label.name == name:
                return label
        return None

    def instructions(self):
        """Iterate over every instruction in program order."""
        for label in self.labels:
            yield from label.instructions

    def __str__(self) -> str:
        lines = []
        for label in self.labels:
            lines.append(f".{label.name}:")
            for insn in label.instructions:
                lines.append(f"    {insn}")
        return "\n".join(lines) + "\n" if lines else ""
