"""
regvm Assembler - A two-pass assembler for the regvm register machine.

Translates labeled assembly blocks into a flat, address-resolved stream of
opcode selectors and operand values.
"""

__version__ = "1.0.0"

from .assembler import Assembler
from .encoder import Op, encode, format_tokens
from .errors import AssemblerError, EncodingError, ParseError, SymbolError
from .operands import Immediate, LabelRef, Register, classify
from .parser import parse
from .resolver import build_symbol_table, resolve

__all__ = [
    "Assembler",
    "AssemblerError",
    "ParseError",
    "EncodingError",
    "SymbolError",
    "Op",
    "Register",
    "Immediate",
    "LabelRef",
    "classify",
    "parse",
    "resolve",
    "build_symbol_table",
    "encode",
    "format_tokens",
]
