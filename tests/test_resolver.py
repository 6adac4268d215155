"""
Tests for label address resolution.
"""

import pytest

from regvm_asm.errors import SymbolError
from regvm_asm.parser import parse
from regvm_asm.resolver import (
    build_symbol_table,
    instruction_size,
    program_size,
    resolve,
)


SRC = """
.main:
    mov r0, 0
    push 5
.loop:
    inc r0
    cmp r0, 5
    blt .done
    b .loop
.done:
    add r1, r2, r3
    cli
.end:
"""


class TestInstructionSize:
    """Slot counts per instruction."""

    @pytest.mark.parametrize("line, size", [
        ("cli", 1),
        ("inc r0", 2),
        ("push 1", 2),
        ("b .x", 2),
        ("call .x", 2),
        ("mov r1, r2", 3),
        ("str 1, 2", 3),
        ("add r1, r2, 3", 4),
        ("beq .x", 3),  # selector, condition, target
        ("bneq r4", 3),
    ])
    def test_sizes(self, line, size):
        insn = parse(f".x:\n    {line}\n").labels[0].instructions[0]
        assert instruction_size(insn) == size


class TestResolve:
    """Tests for resolve and build_symbol_table."""

    def test_first_label_is_zero(self):
        assert resolve(parse(SRC), "main") == 0

    def test_addresses(self):
        program = parse(SRC)
        assert resolve(program, "loop") == 5     # mov(3) + push(2)
        assert resolve(program, "done") == 15    # + inc(2) cmp(3) blt(3) b(2)
        assert resolve(program, "end") == 20     # + add(4) cli(1)

    def test_consecutive_labels(self):
        """Each label starts where the previous label's instructions end."""
        program = parse(SRC)
        for prev, nxt in zip(program.labels, program.labels[1:]):
            assert resolve(program, nxt.name) == resolve(program, prev.name) + sum(
                instruction_size(i) for i in prev.instructions
            )

    def test_branch_example(self):
        program = parse(".a:\n    inc r0\n    b .b\n.b:\n    cli\n")
        assert resolve(program, "b") == 4

    def test_undefined_label(self):
        with pytest.raises(SymbolError, match="Undefined label 'nowhere'"):
            resolve(parse(SRC), "nowhere")

    def test_symbol_table_matches_resolve(self):
        program = parse(SRC)
        symbols = build_symbol_table(program)
        assert symbols == {name: resolve(program, name) for name in symbols}
        assert list(symbols) == ["main", "loop", "done", "end"]

    def test_program_size(self):
        assert program_size(parse(SRC)) == 20
        assert program_size(parse("")) == 0
