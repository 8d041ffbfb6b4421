"""
Program entries for the Unlimited Register Machine.

A loaded program is a list of entries of two families:

  Instructions  INC, ZERO, MOVE, JUMP
                Each takes a slot in the instruction-index sequence when it is
                built, and is the only kind of entry a JUMP can land on.

  Commands      /zero, /set, /copy, /mem, /code, /run
                No instruction index; invisible to JUMP targeting.

Entries are plain dataclasses. They hold operands only; execution lives in
the Machine's dispatch table, which receives the entry and the machine.

The instruction index and the sequence position of an entry are different
numbering schemes. They only agree while no command sits in front of an
instruction:

    position  entry        index
    0         /set 1 3     -
    1         ZERO 0       0
    2         /mem 0 0     -
    3         INC 0        1
"""

from __future__ import annotations
from dataclasses import dataclass, replace
from typing import ClassVar, Tuple, Union

__all__ = [
    'InstructionCounter',
    'Inc', 'Zero', 'Move', 'Jump',
    'RangeZero', 'RangeSet', 'BlockCopy', 'Dump', 'ListProgram', 'RunProgram',
    'ProgramEntry', 'Instruction', 'INSTRUCTION_TYPES', 'COMMAND_TYPES',
    'is_instruction', 'relocate',
]


# ──────────────────────────────────────────────
# Instruction-index sequence
# ──────────────────────────────────────────────

class InstructionCounter:
    """Hands out instruction indices: 0, 1, 2, ...

    One counter numbers every instruction built for a machine, including
    instructions executed immediately and then discarded, so indices in a
    program can have gaps. A Machine owns its counter; pass the same counter
    to several machines to make them share one numbering. Loading a program
    file gives a machine a counter of its own again.
    """

    def __init__(self, start: int = 0):
        self.value = start

    def next(self) -> int:
        index = self.value
        self.value += 1
        return index

    def advance(self, count: int):
        self.value += count

    def reset(self, start: int = 0):
        self.value = start

    def __repr__(self) -> str:
        return f"InstructionCounter(value={self.value})"


# ──────────────────────────────────────────────
# Instructions
# ──────────────────────────────────────────────

@dataclass
class Inc:
    """INC r: register r += 1."""
    reg: int
    index: int

    REG_FIELDS: ClassVar[Tuple[str, ...]] = ('reg',)

    def to_text(self) -> str:
        return f"INC {self.reg}"


@dataclass
class Zero:
    """ZERO r: register r := 0."""
    reg: int
    index: int

    REG_FIELDS: ClassVar[Tuple[str, ...]] = ('reg',)

    def to_text(self) -> str:
        return f"ZERO {self.reg}"


@dataclass
class Move:
    """MOVE src dst: register dst := register src."""
    src: int
    dst: int
    index: int

    REG_FIELDS: ClassVar[Tuple[str, ...]] = ('src', 'dst')

    def to_text(self) -> str:
        return f"MOVE {self.src} {self.dst}"


@dataclass
class Jump:
    """JUMP x y target: go to instruction `target` if register x == register y.

    `target` is an instruction index, not a position in the program list.
    The one-operand form `JUMP target` compares register 0 with itself and
    is always taken.
    """
    target: int
    x: int
    y: int
    index: int

    REG_FIELDS: ClassVar[Tuple[str, ...]] = ('x', 'y')

    def to_text(self) -> str:
        return f"JUMP {self.x} {self.y} {self.target}"


# ──────────────────────────────────────────────
# Commands
# ──────────────────────────────────────────────

@dataclass
class RangeZero:
    """/zero lo hi"""
    lo: int
    hi: int

    REG_FIELDS: ClassVar[Tuple[str, ...]] = ('lo', 'hi')

    def to_text(self) -> str:
        return f"/zero {self.lo} {self.hi}"


@dataclass
class RangeSet:
    """/set addr value"""
    addr: int
    value: int

    REG_FIELDS: ClassVar[Tuple[str, ...]] = ('addr',)

    def to_text(self) -> str:
        return f"/set {self.addr} {self.value}"


@dataclass
class BlockCopy:
    """/copy src dst length"""
    src: int
    dst: int
    length: int

    REG_FIELDS: ClassVar[Tuple[str, ...]] = ('src', 'dst')

    def to_text(self) -> str:
        return f"/copy {self.src} {self.dst} {self.length}"


@dataclass
class Dump:
    """/mem lo hi"""
    lo: int
    hi: int

    REG_FIELDS: ClassVar[Tuple[str, ...]] = ('lo', 'hi')

    def to_text(self) -> str:
        return f"/mem {self.lo} {self.hi}"


@dataclass
class ListProgram:
    """/code"""

    REG_FIELDS: ClassVar[Tuple[str, ...]] = ()

    def to_text(self) -> str:
        return "/code"


@dataclass
class RunProgram:
    """/run"""

    REG_FIELDS: ClassVar[Tuple[str, ...]] = ()

    def to_text(self) -> str:
        return "/run"


Instruction = Union[Inc, Zero, Move, Jump]
ProgramEntry = Union[Inc, Zero, Move, Jump,
                     RangeZero, RangeSet, BlockCopy, Dump, ListProgram, RunProgram]

INSTRUCTION_TYPES = (Inc, Zero, Move, Jump)
COMMAND_TYPES = (RangeZero, RangeSet, BlockCopy, Dump, ListProgram, RunProgram)


def is_instruction(entry) -> bool:
    return isinstance(entry, INSTRUCTION_TYPES)


def relocate(entry: ProgramEntry, reg_shift: int = 0,
             index_shift: int = 0) -> ProgramEntry:
    """Return a copy of `entry` moved by the given offsets.

    Register operands move by `reg_shift`. For instructions, the index moves
    by `index_shift`, and so does a JUMP target, so the jump still reaches
    the same instruction after the move.
    """
    changes = {name: getattr(entry, name) + reg_shift
               for name in entry.REG_FIELDS}
    if is_instruction(entry):
        changes['index'] = entry.index + index_shift
    if isinstance(entry, Jump):
        changes['target'] = entry.target + index_shift
    return replace(entry, **changes)
