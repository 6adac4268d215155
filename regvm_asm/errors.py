"""
Custom exception types for the regvm assembler.

Every error is fatal for the run: the assembler never recovers locally and
never produces partial output.
"""


class AssemblerError(Exception):
    """Base exception for assembler errors."""

    def __init__(self, message: str, line_num: int = None, line_text: str = None):
        self.reason = message
        self.line_num = line_num
        self.line_text = line_text
        if line_num is not None:
            if line_text:
                message = f"Line {line_num}: {message}\n  {line_text.strip()}"
            else:
                message = f"Line {line_num}: {message}"
        super().__init__(message)


class ParseError(AssemblerError):
    """Syntax error: unknown mnemonic, malformed literal, bad operand count."""

    pass


class EncodingError(AssemblerError):
    """Operand of a kind not permitted for its instruction slot."""

    pass


class SymbolError(AssemblerError):
    """Duplicate or undefined label."""

    pass
