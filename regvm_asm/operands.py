"""
Operand types and the operand classifier.

Turns a raw argument substring into a typed operand: a register, an
unsigned 32-bit immediate, or a reference to a label.
"""

import re
from dataclasses import dataclass
from typing import Union

from .errors import ParseError
from .registers import RESERVED_NAMES, get_register_name, parse_register

IMM_MAX = 0xFFFFFFFF

# Radix prefix -> (base, digit pattern)
RADIX_PREFIXES = {
    "x": (16, re.compile(r"[0-9a-fA-F]+")),
    "o": (8, re.compile(r"[0-7]+")),
    "b": (2, re.compile(r"[01]+")),
}

DECIMAL_PATTERN = re.compile(r"[1-9][0-9]*")


@dataclass(frozen=True)
class Register:
    """A machine register, r0-r127."""

    index: int

    kind = "register"

    def __str__(self) -> str:
        return get_register_name(self.index)


@dataclass(frozen=True)
class Immediate:
    """An unsigned 32-bit constant."""

    value: int

    kind = "immediate"

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class LabelRef:
    """Symbolic reference to a label, resolved to an address at encode time."""

    name: str

    kind = "label"

    def __str__(self) -> str:
        return f".{self.name}"


Operand = Union[Register, Immediate, LabelRef]


def parse_immediate(value_str: str) -> int:
    """
    Parse an unsigned immediate literal.

    Supports:
    - Decimal: 42 (no leading zeros)
    - Hexadecimal: 0x1A
    - Octal: 0o17
    - Binary: 0b101
    - Zero: 0

    Returns:
        Integer value (0 to 0xFFFFFFFF)
    """
    if value_str == "0":
        return 0

    if value_str.startswith("0"):
        if len(value_str) < 2 or value_str[1] not in RADIX_PREFIXES:
            raise ParseError(f"Wrong radix number: {value_str}")
        base, pattern = RADIX_PREFIXES[value_str[1]]
        digits = value_str[2:]
    else:
        base, pattern = 10, DECIMAL_PATTERN
        digits = value_str

    if not pattern.fullmatch(digits):
        raise ParseError(f"Invalid immediate value: {value_str}")

    result = int(digits, base)
    if result > IMM_MAX:
        raise ParseError(f"Immediate value does not fit in 32 bits: {value_str}")
    return result


def classify(raw: str) -> Operand:
    """
    Classify a raw operand string.

    Args:
        raw: Operand text as scanned from the source

    Returns:
        Register, Immediate or LabelRef

    Raises:
        ParseError: If the operand cannot be classified
    """
    arg = raw.strip()
    if not arg:
        raise ParseError("Empty operand")

    if arg in RESERVED_NAMES:
        return Register(RESERVED_NAMES[arg])

    lead = arg[0]
    if lead == ".":
        name = arg[1:]
        if not name:
            raise ParseError(f"Empty label reference: {arg}")
        return LabelRef(name)

    if lead == "r":
        try:
            return Register(parse_register(arg))
        except ValueError as e:
            raise ParseError(str(e)) from None

    if lead in "0123456789":
        return Immediate(parse_immediate(arg))

    raise ParseError(f"Wrong arg: {arg}")
