"""
Tests for target profile loading and validation.
"""

import pytest
import yaml

from regvm_asm.encoder import Op, encode
from regvm_asm.instructions import Condition
from regvm_asm.parser import parse
from regvm_asm.target import (
    DEFAULT_TARGET_PATH,
    TargetError,
    default_target,
    get_target_summary,
    load_target,
    parse_target,
)


def _profile(**overrides) -> dict:
    """The default profile as a dict, with top-level overrides applied."""
    with open(DEFAULT_TARGET_PATH, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    data.update(overrides)
    return data


def _dump(data: dict) -> str:
    return yaml.safe_dump(data)


class TestDefaultTarget:
    """Tests for the packaged default profile."""

    def test_loads(self):
        target = default_target()
        assert target.name == "default"
        assert target.selector_prefix == "Op."
        assert target.condition_prefix == "BranchType."
        assert target.word_size == 4
        assert target.byteorder == "little"

    def test_numbers_every_selector_and_condition(self):
        target = default_target()
        assert {target.opcode(op) for op in Op} == set(range(len(Op)))
        assert target.condition(Condition.EQ) == 0
        assert target.condition(Condition.NEQ) == 3

    def test_summary(self):
        summary = get_target_summary(default_target())
        assert summary["name"] == "default"
        assert summary["opcode_count"] == len(Op)


class TestParseTarget:
    """Tests for parse_target validation."""

    def test_minimal_profile_uses_defaults(self):
        data = _profile()
        for key in ["description", "selector_prefix", "condition_prefix", "word_size", "byteorder"]:
            del data[key]
        target = parse_target(_dump(data))
        assert target.word_size == 4
        assert target.selector_prefix == "Op."

    def test_invalid_yaml_syntax(self):
        with pytest.raises(TargetError, match="Invalid YAML"):
            parse_target("name: [unclosed")

    def test_not_a_mapping(self):
        with pytest.raises(TargetError, match="mapping"):
            parse_target("- a\n- b\n")

    def test_missing_name(self):
        data = _profile()
        del data["name"]
        with pytest.raises(TargetError, match="'name'"):
            parse_target(_dump(data))

    def test_missing_opcode(self):
        data = _profile()
        del data["opcodes"]["INC"]
        with pytest.raises(TargetError, match="missing 'INC'"):
            parse_target(_dump(data))

    def test_unknown_opcode(self):
        data = _profile()
        data["opcodes"]["JUMP"] = 99
        with pytest.raises(TargetError, match="unknown name 'JUMP'"):
            parse_target(_dump(data))

    def test_duplicate_values(self):
        data = _profile()
        data["conditions"]["NEQ"] = 0
        with pytest.raises(TargetError, match="share the value 0"):
            parse_target(_dump(data))

    def test_negative_value(self):
        data = _profile()
        data["opcodes"]["DEC"] = -1
        with pytest.raises(TargetError, match="non-negative integer"):
            parse_target(_dump(data))

    @pytest.mark.parametrize("word_size", [3, "4", [4], True])
    def test_bad_word_size(self, word_size):
        with pytest.raises(TargetError, match="word_size"):
            parse_target(_dump(_profile(word_size=word_size)))

    def test_bad_byteorder(self):
        with pytest.raises(TargetError, match="byteorder"):
            parse_target(_dump(_profile(byteorder="middle")))

    def test_value_too_large_for_word(self):
        data = _profile(word_size=1)
        data["opcodes"]["INC"] = 300
        with pytest.raises(TargetError, match="does not fit"):
            parse_target(_dump(data))

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(TargetError, match="Cannot read"):
            load_target(tmp_path / "nope.yaml")


class TestPacking:
    """Tests for numeric words and binary packing."""

    def test_words(self):
        target = default_target()
        enc = encode(parse(".main:\n    blt .main\n"))[0]
        assert target.words(enc) == [
            target.opcode(Op.BRANCH_COND_CONST),
            target.condition(Condition.LT),
            0,
        ]

    def test_pack_little_endian(self):
        assert default_target().pack([1, 0x0300]) == b"\x01\x00\x00\x00\x00\x03\x00\x00"

    def test_pack_big_endian_two_byte_words(self):
        target = parse_target(_dump(_profile(word_size=2, byteorder="big")))
        assert target.pack([1, 0x0300]) == b"\x00\x01\x03\x00"

    def test_pack_overflow(self):
        target = parse_target(_dump(_profile(word_size=1)))
        with pytest.raises(TargetError, match="does not fit"):
            target.pack([256])
