"""
Target Profile Module

Parses and validates YAML target profiles describing the virtual machine
that consumes the assembled stream: the numeric value of every opcode
selector and branch condition, the symbolic prefixes of the text format,
and the word layout of the binary format.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List

import yaml

from .encoder import EncodedInstruction, Op
from .instructions import Condition

DEFAULT_TARGET_PATH = Path(__file__).parent / "targets" / "default.yaml"

VALID_WORD_SIZES = {1, 2, 4, 8}
VALID_BYTEORDERS = {"little", "big"}


class TargetError(Exception):
    """Raised when a target profile is invalid."""
    pass


@dataclass(frozen=True)
class Target:
    """A validated target profile."""

    name: str
    description: str
    selector_prefix: str
    condition_prefix: str
    word_size: int
    byteorder: str
    opcodes: Dict[str, int]
    conditions: Dict[str, int]

    @property
    def max_word(self) -> int:
        return (1 << (8 * self.word_size)) - 1

    def opcode(self, op: Op) -> int:
        return self.opcodes[op.name]

    def condition(self, cond: Condition) -> int:
        return self.conditions[cond.name]

    def words(self, enc: EncodedInstruction) -> List[int]:
        """Numeric tokens of one encoded instruction."""
        result = [self.opcode(enc.op)]
        if enc.condition is not None:
            result.append(self.condition(enc.condition))
        result.extend(enc.values)
        return result

    def pack(self, values: Iterable[int]) -> bytes:
        """Pack tokens as unsigned words, one word per slot."""
        out = bytearray()
        for value in values:
            if not 0 <= value <= self.max_word:
                raise TargetError(
                    f"Value {value} does not fit in a {self.word_size}-byte word"
                )
            out += value.to_bytes(self.word_size, self.byteorder)
        return bytes(out)


def parse_target(yaml_content: str) -> Target:
    """
    Parse and validate a YAML target profile.

    Args:
        yaml_content: Raw YAML string content

    Returns:
        Validated Target

    Raises:
        TargetError: If the profile is invalid
    """
    try:
        data = yaml.safe_load(yaml_content)
    except yaml.YAMLError as e:
        raise TargetError(f"Invalid YAML syntax: {e}")

    if not isinstance(data, dict):
        raise TargetError("Target profile must be a YAML mapping/dictionary")

    _validate_target(data)

    return Target(
        name=str(data['name']),
        description=str(data.get('description', '')),
        selector_prefix=data.get('selector_prefix', 'Op.'),
        condition_prefix=data.get('condition_prefix', 'BranchType.'),
        word_size=data.get('word_size', 4),
        byteorder=data.get('byteorder', 'little'),
        opcodes=dict(data['opcodes']),
        conditions=dict(data['conditions']),
    )


def load_target(path) -> Target:
    """Load a target profile from a YAML file."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            content = f.read()
    except OSError as e:
        raise TargetError(f"Cannot read target profile {path}: {e}")
    return parse_target(content)


def default_target() -> Target:
    """The packaged default profile."""
    return load_target(DEFAULT_TARGET_PATH)


def _validate_target(data: dict) -> None:
    """Validate target structure and contents."""

    if 'name' not in data:
        raise TargetError("Missing required field 'name'")

    for field in ['selector_prefix', 'condition_prefix']:
        if field in data and not isinstance(data[field], str):
            raise TargetError(f"'{field}' must be a string")

    word_size = data.get('word_size', 4)
    if not isinstance(word_size, int) or isinstance(word_size, bool) or word_size not in VALID_WORD_SIZES:
        raise TargetError(
            f"'word_size' must be one of {sorted(VALID_WORD_SIZES)}, got {word_size!r}"
        )

    byteorder = data.get('byteorder', 'little')
    if not isinstance(byteorder, str) or byteorder not in VALID_BYTEORDERS:
        raise TargetError(f"'byteorder' must be 'little' or 'big', got {byteorder!r}")

    max_word = (1 << (8 * word_size)) - 1
    _validate_numbering(data, 'opcodes', [op.name for op in Op], max_word)
    _validate_numbering(data, 'conditions', [c.name for c in Condition], max_word)


def _validate_numbering(data: dict, field: str, names: list[str], max_word: int) -> None:
    """Validate a name -> number table covering exactly the given names."""
    if field not in data:
        raise TargetError(f"Missing required field '{field}'")

    table = data[field]
    if not isinstance(table, dict):
        raise TargetError(f"'{field}' must be a mapping/dictionary")

    for name in names:
        if name not in table:
            raise TargetError(f"{field}: missing '{name}'")

    seen = {}
    for name, value in table.items():
        if name not in names:
            raise TargetError(f"{field}: unknown name '{name}'")
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise TargetError(f"{field}.{name} must be a non-negative integer")
        if value > max_word:
            raise TargetError(f"{field}.{name} value {value} does not fit the word size")
        if value in seen:
            raise TargetError(
                f"{field}: '{name}' and '{seen[value]}' share the value {value}"
            )
        seen[value] = name


def get_target_summary(target: Target) -> dict:
    """
    Get a summary of the target for display.

    Args:
        target: Validated target profile

    Returns:
        Summary dictionary with key info
    """
    return {
        'name': target.name,
        'description': target.description,
        'selector_prefix': target.selector_prefix,
        'condition_prefix': target.condition_prefix,
        'word_size': target.word_size,
        'byteorder': target.byteorder,
        'opcode_count': len(target.opcodes),
    }
