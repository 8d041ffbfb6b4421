"""
URM — Unlimited Register Machine interpreter
============================================
An interpreter for the Unlimited Register Machine: unbounded integer
registers and four instructions (INC, ZERO, MOVE, JUMP), plus console
commands for setting, copying and printing registers.

Architecture:
    ┌───────────┐    ┌──────────┐    ┌───────────┐    ┌───────────┐
    │ .urm text │───>│  Parser  │───>│  Machine  │───>│ Registers │
    │ / console │    │ (entries)│    │ (run loop)│    │ (sparse)  │
    └───────────┘    └──────────┘    └───────────┘    └───────────┘
                                           │
                                      ┌──────────┐
                                      │  Merger  │  /add: splice a program
                                      └──────────┘  in front of another

    - parser.py:    tokenize lines, build entries, read program files
    - entries.py:   dataclass entries + InstructionCounter
    - registers.py: RegisterStore (absent address reads 0)
    - machine.py:   Machine: dispatch table, run/step, jump resolution
    - merger.py:    merge(base, incoming)
    - repl.py:      interactive console loop
"""

__version__ = "1.0.0"

from .errors import (
    URMError, UnknownCommand, ArityMismatch, MalformedOperand,
    InvalidTarget, ProgramLoadError,
)
from .entries import (
    InstructionCounter,
    Inc, Zero, Move, Jump,
    RangeZero, RangeSet, BlockCopy, Dump, ListProgram, RunProgram,
    is_instruction,
)
from .registers import RegisterStore
from .parser import tokenize, build_entry, parse_program, read_program
from .machine import Machine, LoadMode
from .merger import merge


def run_source(source: str) -> RegisterStore:
    """Load program text into a new machine, run it, return its registers.

    Output from /mem and /code inside the program is printed.
    """
    machine = Machine()
    machine.load_text(source)
    machine.run()
    return machine.registers
