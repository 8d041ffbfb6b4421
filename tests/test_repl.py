"""
Console and CLI tests: line-by-line execution, error recovery, /exit,
and the urmi entry point.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import io

import pytest
import urmi
from urm.machine import Machine
from urm.repl import repl


def _session(text: str, machine: Machine = None):
    machine = machine or Machine()
    out, err = io.StringIO(), io.StringIO()
    status = repl(machine, stdin=io.StringIO(text), stdout=out, stderr=err,
                  prompt=None)
    return machine, status, err.getvalue()


class TestRepl:
    def test_lines_execute_immediately(self):
        m, status, err = _session("/set 1 3\nINC 1\n/exit\n")
        assert status == 0
        assert m.registers.get(1) == 4
        assert m.program == []
        assert err == ""

    def test_bad_line_does_not_stop_loop(self):
        m, status, err = _session("INC\nFOO 1\nINC x\nINC 2\n/exit\n")
        assert status == 0
        assert m.registers.get(2) == 1
        assert err.count("Error:") == 3

    def test_exit_stops_reading(self):
        m, _, _ = _session("INC 0\n/exit\nINC 0\n")
        assert m.registers.get(0) == 1

    def test_exit_with_operands_is_an_error(self):
        m, _, err = _session("/exit now\nINC 0\n")
        assert "Error:" in err
        assert m.registers.get(0) == 1

    def test_eof_ends_session(self):
        m, status, _ = _session("INC 0")
        assert status == 0
        assert m.registers.get(0) == 1

    def test_quote_then_run(self):
        m, _, _ = _session("/quote INC 0\n/quote INC 0\n/run\n/run\n/exit\n")
        assert m.registers.get(0) == 4

    def test_invalid_jump_reported(self):
        m, _, err = _session("/quote JUMP 0 0 7\n/run\n/exit\n")
        assert "Invalid jump target 7" in err

    def test_prompt_written(self):
        out = io.StringIO()
        repl(Machine(), stdin=io.StringIO("/exit\n"), stdout=out,
             stderr=io.StringIO())
        assert out.getvalue() == "$ "

    def test_mem_output(self, capsys):
        _session("/set 0 2\n/mem 0 1\n/exit\n")
        assert capsys.readouterr().out == "registry[0]: 2\nregistry[1]: 0\n"


class TestCli:
    def test_program_runs_before_console(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "p.urm"
        path.write_text("/set 1 2\nINC 1\n/mem 1 1\n", encoding="utf-8")
        monkeypatch.setattr(sys, "stdin", io.StringIO("/mem 1 1\n/exit\n"))
        status = urmi.main([str(path), "--no-prompt"])
        assert status == 0
        assert capsys.readouterr().out == "registry[1]: 3\nregistry[1]: 3\n"

    def test_no_run_only_loads(self, tmp_path, monkeypatch, capsys):
        path = tmp_path / "p.urm"
        path.write_text("/set 1 2\nINC 1\n/mem 1 1\n", encoding="utf-8")
        monkeypatch.setattr(sys, "stdin", io.StringIO("/mem 1 1\n/code\n"))
        assert urmi.main([str(path), "--no-run", "--no-prompt"]) == 0
        assert capsys.readouterr().out == (
            "registry[1]: 0\n/set 1 2\nINC 1\n/mem 1 1\n")

    def test_default_program_loaded_from_cwd(self, tmp_path, monkeypatch, capsys):
        (tmp_path / urmi.DEFAULT_PROGRAM).write_text("INC 4\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(sys, "stdin", io.StringIO("/code\n/exit\n"))
        assert urmi.main(["--no-prompt"]) == 0
        assert capsys.readouterr().out == "INC 4\n"

    def test_missing_default_program_starts_empty(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(sys, "stdin", io.StringIO("INC 0\n/mem 0 0\n"))
        assert urmi.main(["--no-prompt"]) == 0
        assert capsys.readouterr().out == "registry[0]: 1\n"

    def test_missing_explicit_program_fails(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setattr(sys, "stdin", io.StringIO(""))
        assert urmi.main([str(tmp_path / "nope.urm")]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            urmi.main(["--version"])
        assert exc.value.code == 0
        assert "urmi" in capsys.readouterr().out
