"""
Main assembler implementation.

Two-pass assembler for regvm assembly to a flat token stream.
"""

import sys
from typing import Dict, List, Optional

from .encoder import EncodedInstruction, encode, format_tokens
from .errors import AssemblerError
from .instructions import Program
from .parser import Parser
from .resolver import build_symbol_table, program_size
from .target import Target, default_target

OUTPUT_FORMATS = ("text", "numeric", "binary")


class Assembler:
    """
    Two-pass regvm assembler.

    Pass 1: Compute label addresses from the slot size model
    Pass 2: Encode instructions with resolved labels
    """

    def __init__(self, verbose: bool = False, target: Optional[Target] = None):
        """
        Initialize the assembler.

        Args:
            verbose: If True, print detailed assembly information to stderr
            target: Target profile for numeric/binary output (default profile if None)
        """
        self.verbose = verbose
        self.target = target or default_target()
        self.parser = Parser()
        self.program: Optional[Program] = None
        self.symbols: Dict[str, int] = {}  # label -> slot address
        self.encoded: List[EncodedInstruction] = []

    def log(self, message: str) -> None:
        """Print message if verbose mode is enabled."""
        if self.verbose:
            print(message, file=sys.stderr)

    def assemble_file(
        self, input_path: str, output_path: str = None, fmt: str = "text"
    ) -> List[EncodedInstruction]:
        """
        Assemble an assembly file.

        Args:
            input_path: Path to input .asm file
            output_path: Path to output file (optional)
            fmt: Output format, one of OUTPUT_FORMATS

        Returns:
            List of encoded instructions
        """
        self.log(f"Assembling: {input_path}")
        self._reset()
        program = self.parser.parse_file(input_path)
        self._assemble(program)

        # Nothing is written unless every pass succeeded
        if output_path:
            self.write_output(output_path, fmt)
            self.log(f"Output written to: {output_path}")

        return self.encoded

    def assemble_string(self, source: str) -> List[EncodedInstruction]:
        """
        Assemble from a string.

        Args:
            source: Assembly source code

        Returns:
            List of encoded instructions
        """
        self._reset()
        program = self.parser.parse_string(source)
        self._assemble(program)
        return self.encoded

    def _reset(self) -> None:
        self.program = None
        self.symbols = {}
        self.encoded = []

    def _assemble(self, program: Program) -> None:
        symbols = self._pass1(program)
        encoded = self._pass2(program, symbols)

        self.program = program
        self.symbols = symbols
        self.encoded = encoded

    def _pass1(self, program: Program) -> Dict[str, int]:
        """
        First pass: Compute label addresses.
        """
        self.log("\n=== Pass 1: Resolving labels ===")
        symbols = build_symbol_table(program)
        for name, address in symbols.items():
            self.log(f"  Label '{name}' at {address}")

        self.log(f"  Total symbols: {len(symbols)}")
        self.log(f"  Program size: {program_size(program)} slots")
        return symbols

    def _pass2(self, program: Program, symbols: Dict[str, int]) -> List[EncodedInstruction]:
        """
        Second pass: Encode instructions with resolved labels.
        """
        self.log("\n=== Pass 2: Encoding instructions ===")
        encoded = encode(program, symbols)

        remaining = iter(encoded)
        for label in program.labels:
            self.log(f"  .{label.name}:")
            for insn in label.instructions:
                enc = next(remaining)
                self.log(f"  {enc.address:5d}: {self._token_line(enc):<40} {insn}")

        self.log(f"\n  Total instructions: {len(encoded)}")
        return encoded

    def _token_line(self, enc: EncodedInstruction) -> str:
        return enc.to_text(self.target.selector_prefix, self.target.condition_prefix)

    def get_token_string(self) -> str:
        """
        Get the symbolic token stream.

        Returns:
            One comma-terminated line per instruction, e.g. 'Op.MOV_REG, 1, 2,'
        """
        return format_tokens(
            self.encoded, self.target.selector_prefix, self.target.condition_prefix
        )

    def get_numeric_string(self) -> str:
        """
        Get the token stream with selectors and conditions numbered by the target.

        Returns:
            One comma-terminated line of decimal values per instruction
        """
        return "".join(
            ", ".join(str(w) for w in self.target.words(enc)) + ",\n"
            for enc in self.encoded
        )

    def get_words(self) -> List[int]:
        """All numeric tokens of the program, one per slot."""
        words = []
        for enc in self.encoded:
            words.extend(self.target.words(enc))
        return words

    def get_binary(self) -> bytes:
        """Packed binary image, one target word per slot."""
        return self.target.pack(self.get_words())

    def render(self, fmt: str = "text"):
        """Render the last run in the given output format (bytes for binary)."""
        if fmt == "text":
            return self.get_token_string()
        if fmt == "numeric":
            return self.get_numeric_string()
        if fmt == "binary":
            return self.get_binary()
        raise ValueError(f"Unknown output format: {fmt}")

    def write_output(self, output_path: str, fmt: str = "text") -> None:
        """
        Write the assembled program to a file.

        Args:
            output_path: Path to output file
            fmt: Output format, one of OUTPUT_FORMATS
        """
        data = self.render(fmt)
        if isinstance(data, bytes):
            with open(output_path, "wb") as f:
                f.write(data)
        else:
            with open(output_path, "w", encoding="utf-8") as f:
                f.write(data)

    def get_listing(self) -> str:
        """
        Get an assembly listing showing addresses, tokens, and source.

        Returns:
            Formatted listing string
        """
        lines = []
        lines.append("Addr   Tokens                                    Source")
        lines.append("-" * 72)

        for enc in self.encoded:
            source = (enc.source.line_text or str(enc.source)).strip()
            lines.append(f"{enc.address:5d}  {self._token_line(enc):<40}  {source}")

        return "\n".join(lines)

    def get_program_dump(self) -> str:
        """Canonical assembly text of the parsed program."""
        if self.program is None:
            raise AssemblerError("Nothing assembled yet")
        return str(self.program)
