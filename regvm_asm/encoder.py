"""
Instruction encoder.

Selects an opcode selector for each instruction from the concrete kinds of
its operands and emits the selector followed by the operand values, with
label operands replaced by their resolved slot addresses.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, List, Optional, Tuple

from .errors import EncodingError, SymbolError
from .instructions import Condition, Instruction, Program
from .operands import Immediate, LabelRef, Operand, Register
from .resolver import build_symbol_table, instruction_size


class Op(Enum):
    """Opcode selectors understood by the virtual machine."""

    PUSH_CONST = auto()
    PUSH_REG = auto()
    MOV_CONST = auto()
    MOV_REG = auto()
    CMP_REG_CONST = auto()
    CMP_REG_REG = auto()
    ADD_CONST = auto()
    ADD_REG = auto()
    STR_CONST_TO_CONST = auto()
    STR_CONST_TO_REG = auto()
    STR_REG_TO_CONST = auto()
    STR_REG_TO_REG = auto()
    BRANCH_CONST = auto()
    BRANCH_REG = auto()
    BRANCH_COND_CONST = auto()
    BRANCH_COND_REG = auto()
    CALL_CONST = auto()
    CALL_REG = auto()
    CALL_JS_CONST = auto()
    CALL_JS_REG = auto()
    INC = auto()
    DEC = auto()
    CLEAR_FLAGS = auto()


R, I, L = Register, Immediate, LabelRef

BRANCH_SELECTORS = {(L,): Op.BRANCH_CONST, (R,): Op.BRANCH_REG}
BRANCH_COND_SELECTORS = {(L,): Op.BRANCH_COND_CONST, (R,): Op.BRANCH_COND_REG}

# mnemonic -> operand type combination -> selector
SELECTORS: Dict[str, Dict[tuple, Op]] = {
    "mov": {(R, I): Op.MOV_CONST, (R, R): Op.MOV_REG},
    "cmp": {(R, I): Op.CMP_REG_CONST, (R, R): Op.CMP_REG_REG},
    "add": {(R, R, I): Op.ADD_CONST, (R, R, R): Op.ADD_REG},
    # str dst, src: named <src>_TO_<dst>
    "str": {
        (R, R): Op.STR_REG_TO_REG,
        (R, I): Op.STR_CONST_TO_REG,
        (I, R): Op.STR_REG_TO_CONST,
        (I, I): Op.STR_CONST_TO_CONST,
    },
    "b": BRANCH_SELECTORS,
    "blt": BRANCH_COND_SELECTORS,
    "bgt": BRANCH_COND_SELECTORS,
    "beq": BRANCH_COND_SELECTORS,
    "bneq": BRANCH_COND_SELECTORS,
    "push": {(R,): Op.PUSH_REG, (I,): Op.PUSH_CONST},
    "call": {(R,): Op.CALL_REG, (I,): Op.CALL_CONST, (L,): Op.CALL_CONST},
    "calljs": {(R,): Op.CALL_JS_REG, (I,): Op.CALL_JS_CONST},
    "inc": {(R,): Op.INC},
    "dec": {(R,): Op.DEC},
    "cli": {(): Op.CLEAR_FLAGS},
}


@dataclass(frozen=True)
class EncodedInstruction:
    """
    One encoded instruction.

    Attributes:
        address: Slot address of the selector token
        op: Opcode selector
        condition: Branch condition token (conditional branches only)
        values: Operand values, labels already resolved
        source: The instruction this was encoded from
    """

    address: int
    op: Op
    condition: Optional[Condition]
    values: Tuple[int, ...]
    source: Instruction

    @property
    def size(self) -> int:
        return 1 + (self.condition is not None) + len(self.values)

    def to_text(self, selector_prefix: str = "Op.", condition_prefix: str = "BranchType.") -> str:
        """Render as a comma-terminated token line, e.g. 'Op.MOV_REG, 1, 2,'."""
        tokens = [f"{selector_prefix}{self.op.name}"]
        if self.condition is not None:
            tokens.append(f"{condition_prefix}{self.condition.name}")
        tokens.extend(str(v) for v in self.values)
        return ", ".join(tokens) + ","


def _describe_kinds(kinds: tuple) -> str:
    return " or ".join(k.kind for k in kinds)


def check_operand_kinds(insn: Instruction) -> None:
    """
    Check every operand against the kinds its slot permits.

    Raises:
        EncodingError: Naming the instruction and the violated slot
    """
    definition = insn.definition
    for index, (slot, kinds, operand) in enumerate(
        zip(definition.slots, definition.kinds, insn.operands)
    ):
        if not isinstance(operand, kinds):
            raise EncodingError(
                f"Wrong argument type for {definition.mnemonic} "
                f"(argument {index} '{slot}' must be a {_describe_kinds(kinds)}, "
                f"got {operand.kind} {operand})",
                insn.line_num,
                insn.line_text,
            )


def operand_value(insn: Instruction, operand: Operand, symbols: Dict[str, int]) -> int:
    """Numeric value emitted for an operand."""
    if isinstance(operand, Register):
        return operand.index
    if isinstance(operand, Immediate):
        return operand.value
    if operand.name not in symbols:
        raise SymbolError(
            f"Undefined label '{operand.name}'", insn.line_num, insn.line_text
        )
    return symbols[operand.name]


def encode_instruction(
    insn: Instruction, symbols: Dict[str, int], address: int = 0
) -> EncodedInstruction:
    """
    Encode a single instruction.

    Args:
        insn: Parsed instruction
        symbols: Label name -> slot address
        address: Slot address this instruction is placed at

    Returns:
        EncodedInstruction
    """
    check_operand_kinds(insn)

    combination = tuple(type(op) for op in insn.operands)
    op = SELECTORS[insn.mnemonic].get(combination)
    if op is None:
        raise EncodingError(
            f"No encoding for {insn.mnemonic} with operands "
            f"({', '.join(o.kind for o in insn.operands)})",
            insn.line_num,
            insn.line_text,
        )

    values = tuple(operand_value(insn, operand, symbols) for operand in insn.operands)
    return EncodedInstruction(
        address=address,
        op=op,
        condition=insn.condition,
        values=values,
        source=insn,
    )


def encode(program: Program, symbols: Dict[str, int] = None) -> List[EncodedInstruction]:
    """
    Encode a whole program.

    Args:
        program: Parsed program
        symbols: Precomputed label addresses (resolved here if omitted)

    Returns:
        Encoded instructions in program order
    """
    if symbols is None:
        symbols = build_symbol_table(program)

    encoded = []
    address = 0
    for insn in program.instructions():
        enc = encode_instruction(insn, symbols, address)
        if enc.size != instruction_size(insn):
            raise EncodingError(
                f"{insn.mnemonic} emitted {enc.size} tokens, expected {instruction_size(insn)}",
                insn.line_num,
                insn.line_text,
            )
        encoded.append(enc)
        address += enc.size
    return encoded


def format_tokens(
    encoded: List[EncodedInstruction],
    selector_prefix: str = "Op.",
    condition_prefix: str = "BranchType.",
) -> str:
    """Render encoded instructions as the textual token stream, one line each."""
    return "".join(
        enc.to_text(selector_prefix, condition_prefix) + "\n" for enc in encoded
    )
