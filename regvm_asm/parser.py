"""
Assembly source block parser.

Splits the source into labeled blocks and reads each instruction's operands
with a fixed-arity reader built on the scanner and the operand classifier.
The parser makes a single forward pass, has no lookahead correction and
fails closed on any malformed input.

Source layout:

    .label_name:
        mnemonic arg1, arg2
        mnemonic arg1
    .next_label:
        ...
"""

from typing import Dict, List, Optional

from .errors import ParseError, SymbolError
from .instructions import Instruction, InstructionDef, Label, Program, get_instruction
from .operands import Operand, classify
from .scanner import WHITESPACE, Scanner


class Parser:
    """
    Assembly source parser.

    Builds a Program from source text. A new Program is produced on every
    call; nothing is retained between runs except the last result.
    """

    def __init__(self):
        self.program: Optional[Program] = None
        self.labels: Dict[str, int] = {}  # label -> index in program.labels

    def parse_file(self, filepath: str) -> Program:
        """
        Parse an assembly file.

        Args:
            filepath: Path to the assembly file

        Returns:
            Parsed Program
        """
        with open(filepath, "r", encoding="utf-8") as f:
            content = f.read()
        return self.parse_string(content)

    def parse_string(self, content: str) -> Program:
        """
        Parse assembly source from a string.

        Args:
            content: Assembly source code string

        Returns:
            Parsed Program
        """
        self.program = None
        self.labels = {}

        scanner = Scanner(content)
        program = Program()

        while True:
            scanner.skip_whitespace()
            if scanner.at_end:
                break

            line_num = scanner.line_num
            if scanner.peek() != ".":
                found = scanner.scan_until_whitespace()
                raise ParseError(
                    f"Expected label, found '{found}'",
                    line_num,
                    scanner.line_text(line_num),
                )

            label = self._parse_label(scanner)
            if label.name in self.labels:
                raise SymbolError(
                    f"Duplicate label: {label.name}",
                    line_num,
                    scanner.line_text(line_num),
                )
            self.labels[label.name] = len(program.labels)
            program.labels.append(label)

        self.program = program
        return program

    def _parse_label(self, scanner: Scanner) -> Label:
        """Parse a '.name:' header and the instructions that follow it."""
        line_num = scanner.line_num
        line_text = scanner.line_text(line_num)

        scanner.advance()  # '.'
        name = scanner.scan_until(":")
        if scanner.at_end:
            raise ParseError("Label is missing ':'", line_num, line_text)
        scanner.advance()  # ':'

        if not name or any(c in WHITESPACE or c == "," for c in name):
            raise ParseError(f"Invalid label name: '{name}'", line_num, line_text)

        instructions: List[Instruction] = []
        while True:
            scanner.skip_whitespace()
            if scanner.at_end or scanner.peek() == ".":
                break
            instructions.append(self._parse_instruction(scanner))

        return Label(name=name, instructions=instructions)

    def _parse_instruction(self, scanner: Scanner) -> Instruction:
        line_num = scanner.line_num
        line_text = scanner.line_text(line_num)

        mnemonic = scanner.scan_until_whitespace()
        definition = get_instruction(mnemonic)
        if definition is None:
            raise ParseError(f"No such instruction: {mnemonic}", line_num, line_text)

        scanner.skip_blanks()
        operands = []
        for i in range(definition.arity):
            is_last = i == definition.arity - 1
            operands.append(
                self._next_operand(scanner, definition, is_last, line_num, line_text)
            )

        return Instruction(
            definition=definition,
            operands=tuple(operands),
            line_num=line_num,
            line_text=line_text,
        )

    def _next_operand(
        self,
        scanner: Scanner,
        definition: InstructionDef,
        is_last: bool,
        line_num: int,
        line_text: str,
    ) -> Operand:
        """
        Read one operand: up to ',' for all but the last, up to newline for the last.
        """
        if is_last:
            raw = scanner.scan_until("\n")
            if "," in raw:
                raise ParseError(
                    f"Too many operands for {definition.mnemonic} "
                    f"(expects {definition.arity})",
                    line_num,
                    line_text,
                )
        else:
            raw = scanner.scan_until(",")
            if scanner.at_end or "\n" in raw:
                raise ParseError(
                    f"{definition.mnemonic} expects {definition.arity} operands",
                    line_num,
                    line_text,
                )
            scanner.advance()  # ','
            scanner.skip_blanks()

        try:
            return classify(raw)
        except ParseError as e:
            raise ParseError(e.reason, line_num, line_text) from None


def parse(source: str) -> Program:
    """Parse assembly source text into a Program."""
    return Parser().parse_string(source)
