"""
Parser tests: command table, operand checking, instruction numbering,
whole-program parsing and its error reporting.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from urm.entries import (
    InstructionCounter, Inc, Zero, Move, Jump,
    RangeZero, RangeSet, BlockCopy, Dump, ListProgram, RunProgram,
)
from urm.errors import (
    URMError, UnknownCommand, ArityMismatch, MalformedOperand, ProgramLoadError,
)
from urm.parser import build_entry, parse_program, read_program, tokenize


def _build(line: str, counter=None):
    return build_entry(tokenize(line), counter or InstructionCounter())


# ─── Building entries ─────────────────────

class TestBuildEntry:
    def test_instructions(self):
        c = InstructionCounter()
        assert _build("ZERO 4", c) == Zero(reg=4, index=0)
        assert _build("INC 2", c) == Inc(reg=2, index=1)
        assert _build("MOVE 1 3", c) == Move(src=1, dst=3, index=2)
        assert c.value == 3

    def test_jump_three_operands(self):
        assert _build("JUMP 1 2 7") == Jump(target=7, x=1, y=2, index=0)

    def test_jump_one_operand_compares_register_zero(self):
        assert _build("JUMP 5") == Jump(target=5, x=0, y=0, index=0)

    def test_commands(self):
        assert _build("/zero 0 5") == RangeZero(lo=0, hi=5)
        assert _build("/set 1 4") == RangeSet(addr=1, value=4)
        assert _build("/copy 0 5 3") == BlockCopy(src=0, dst=5, length=3)
        assert _build("/mem 2 3") == Dump(lo=2, hi=3)
        assert _build("/code") == ListProgram()
        assert _build("/run") == RunProgram()

    def test_commands_do_not_use_counter(self):
        c = InstructionCounter()
        _build("/set 1 1", c)
        _build("/zero 0 1", c)
        assert c.value == 0

    def test_extra_whitespace(self):
        assert _build("  MOVE\t1    2  \n") == Move(src=1, dst=2, index=0)


class TestBuildErrors:
    def test_unknown_command(self):
        with pytest.raises(UnknownCommand) as exc:
            _build("DEC 1")
        assert exc.value.name == "DEC"

    def test_names_are_case_sensitive(self):
        with pytest.raises(UnknownCommand):
            _build("inc 1")

    def test_meta_commands_have_no_entry(self):
        with pytest.raises(UnknownCommand):
            _build("/exit")

    @pytest.mark.parametrize("line", [
        "INC", "INC 1 2", "ZERO", "MOVE 1", "MOVE 1 2 3",
        "JUMP", "JUMP 1 2", "JUMP 1 2 3 4",
        "/zero 1", "/set 1", "/copy 1 2", "/mem 0", "/code 1", "/run now",
    ])
    def test_arity(self, line):
        with pytest.raises(ArityMismatch):
            _build(line)

    @pytest.mark.parametrize("line", [
        "INC -1", "INC x", "MOVE 1 2.0", "/set 1 -4", "JUMP 0x10", "ZERO +3",
    ])
    def test_malformed_operand(self, line):
        with pytest.raises(MalformedOperand):
            _build(line)

    def test_rejected_line_uses_no_index(self):
        c = InstructionCounter()
        with pytest.raises(URMError):
            _build("MOVE 1 x", c)
        assert c.value == 0

    def test_arity_message(self):
        with pytest.raises(ArityMismatch) as exc:
            _build("JUMP 1 2")
        assert "1 or 3" in str(exc.value)


# ─── Whole programs ─────────────────────

class TestParseProgram:
    def test_skips_blank_and_comment_lines(self):
        text = "/comment header\n\nINC 0\n   \n/comment x y z\nINC 1\n"
        entries = parse_program(text, InstructionCounter())
        assert entries == [Inc(reg=0, index=0), Inc(reg=1, index=1)]

    def test_quote_is_dropped(self):
        entries = parse_program("/quote INC 3\n/quote /quote ZERO 1\n",
                                InstructionCounter())
        assert entries == [Inc(reg=3, index=0), Zero(reg=1, index=1)]

    def test_commands_between_instructions(self):
        entries = parse_program("/set 0 1\nINC 0\n/mem 0 0\nINC 1\n",
                                InstructionCounter())
        assert [type(e) for e in entries] == [RangeSet, Inc, Dump, Inc]
        assert [e.index for e in entries if isinstance(e, Inc)] == [0, 1]

    def test_bad_line_reports_line_number(self):
        with pytest.raises(ProgramLoadError) as exc:
            parse_program("INC 0\nINC 1\nBOGUS 2\n", InstructionCounter(),
                          source="prog.urm")
        err = exc.value
        assert err.line_num == 3
        assert err.line_text == "BOGUS 2"
        assert isinstance(err.cause, UnknownCommand)
        assert "prog.urm" in str(err)
        assert str(err).startswith("Line 3:")

    @pytest.mark.parametrize("meta", ["/load x.urm", "/add x.urm", "/exit"])
    def test_console_only_commands_rejected(self, meta):
        with pytest.raises(ProgramLoadError) as exc:
            parse_program(f"INC 0\n{meta}\n", InstructionCounter())
        assert exc.value.line_num == 2


class TestReadProgram:
    def test_reads_file(self, tmp_path):
        path = tmp_path / "p.urm"
        path.write_text("ZERO 1\n/set 2 9\n", encoding="utf-8")
        entries = read_program(path, InstructionCounter())
        assert entries == [Zero(reg=1, index=0), RangeSet(addr=2, value=9)]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ProgramLoadError) as exc:
            read_program(tmp_path / "missing.urm", InstructionCounter())
        assert "missing.urm" in str(exc.value)
