"""
URM Machine — program, registers, and the run loop.

The machine owns:
  - program    list of entries, in program order
  - registers  sparse RegisterStore
  - pc         program counter: a position in `program`, not an
               instruction index
  - counter    InstructionCounter numbering the instructions it builds

Execution model (run):
  1. pc = 0
  2. Execute the entry at pc through the dispatch table
  3. pc += 1
  4. Stop when pc reaches len(program)

A taken JUMP sets pc to (target position - 1), so step 3 lands on the
target. There is no step limit: a program that jumps in a cycle forever
runs forever. Callers that need a bound drive step() themselves.

Console lines come in through execute_line(), in one of two modes:
  IMMEDIATE  build the entry, execute it, discard it
  DEFER      build the entry, append it to the program
"""

from __future__ import annotations
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from .entries import (
    InstructionCounter, ProgramEntry, is_instruction,
    Inc, Zero, Move, Jump,
    RangeZero, RangeSet, BlockCopy, Dump, ListProgram, RunProgram,
)
from .errors import InvalidTarget
from .parser import tokenize, build_entry, check_arity, parse_program, read_program
from .registers import RegisterStore

logger = logging.getLogger(__name__)


class LoadMode(Enum):
    IMMEDIATE = 'IMMEDIATE'
    DEFER = 'DEFER'


class Machine:
    """Unlimited Register Machine.

    Usage:
        m = Machine()
        m.load_text("INC 0\\nINC 0\\n")
        m.run()
        m.registers.get(0)   # 2
    """

    def __init__(self, counter: Optional[InstructionCounter] = None,
                 output: Optional[Callable[[str], None]] = None):
        self.program: List[ProgramEntry] = []
        self.registers = RegisterStore()
        self.counter = counter if counter is not None else InstructionCounter()
        # /mem and /code write their lines here
        self.output = output if output is not None else print
        self.pc = 0
        self.running = False

        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_entry(self, entry: ProgramEntry, mode: LoadMode = LoadMode.DEFER):
        """Append `entry` to the program, or execute it right away."""
        if mode is LoadMode.DEFER:
            self.program.append(entry)
        else:
            self.execute(entry)

    def load_file(self, path: Union[str, Path]):
        """Replace the current program with the one in `path`.

        The machine switches to a new counter, so instruction numbering
        restarts at 0 for the new program. The load is all-or-nothing: if
        any line fails, ProgramLoadError is raised and the machine keeps its
        previous program, registers and counter.
        """
        counter = InstructionCounter()
        entries = read_program(path, counter)
        self._commit(entries, counter)
        logger.info(f"Loaded {path}: {len(entries)} entries, "
                    f"{counter.value} instructions")

    def load_text(self, text: str, source: str = "<string>"):
        """Like load_file(), from program text."""
        counter = InstructionCounter()
        entries = parse_program(text, counter, source=source)
        self._commit(entries, counter)
        logger.debug(f"Loaded {source}: {len(entries)} entries")

    def _commit(self, entries: List[ProgramEntry], counter: InstructionCounter):
        self.erase()
        self.program = entries
        # Fresh numbering; a counter shared with other machines is not rewound
        self.counter = counter

    def add_file(self, path: Union[str, Path]):
        """Load `path` into a fresh machine and merge it in front of ours."""
        from .merger import merge

        incoming = Machine(output=self.output)
        incoming.load_file(path)
        merge(self, incoming)

    def erase(self):
        """Drop the program and clear all registers.

        The instruction counter is left alone.
        """
        self.program = []
        self.registers.clear()
        self.pc = 0

    # ══════════════════════════════════════════════
    # Console dispatch
    # ══════════════════════════════════════════════

    def execute_line(self, line: Union[str, Sequence[str]],
                     mode: LoadMode = LoadMode.IMMEDIATE):
        """Handle one console or program line.

        Meta commands are handled here:
          /comment ...   ignored
          /quote rest    `rest` is handled in DEFER mode
          /load path     load_file(path)
          /add path      add_file(path)
        Everything else becomes an entry and goes through load_entry().
        Blank lines do nothing. /exit is the console's business and is
        rejected here as an unknown command.
        """
        tokens = tokenize(line) if isinstance(line, str) else list(line)
        if not tokens:
            return
        name, rest = tokens[0], tokens[1:]

        if name == '/comment':
            return
        if name == '/quote':
            if rest:
                self.execute_line(rest, LoadMode.DEFER)
            return
        if name == '/load':
            check_arity(name, rest, (1,))
            self.load_file(rest[0])
            return
        if name == '/add':
            check_arity(name, rest, (1,))
            self.add_file(rest[0])
            return

        self.load_entry(build_entry(tokens, self.counter), mode)

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def run(self):
        """Run the program from position 0 until pc passes the end."""
        logger.debug(f"Running {len(self.program)} entries")
        self.pc = 0
        self.running = True
        try:
            while self.step():
                pass
        finally:
            self.running = False

    def step(self) -> bool:
        """Execute the entry at pc and advance.

        Returns False, without doing anything, once pc is past the end.
        """
        if self.pc >= len(self.program):
            return False
        self.execute(self.program[self.pc], position=self.pc)
        self.pc += 1
        return True

    def reset_pc(self):
        self.pc = 0

    def execute(self, entry: ProgramEntry, position: Optional[int] = None):
        """Execute one entry.

        `position` is the entry's place in the program when it runs from
        there, and None for an entry executed immediately from the console.
        """
        handler = self._dispatch.get(type(entry))
        if handler is None:
            raise TypeError(f"Not a program entry: {entry!r}")
        handler(entry, position)

    # ══════════════════════════════════════════════
    # Jump resolution
    # ══════════════════════════════════════════════

    def resolve_jump(self, jump: Jump, position: Optional[int] = None) -> int:
        """Find the program position of the instruction numbered jump.target.

        From a jump inside the program the scan starts at the jump's own
        position and walks towards the target: backwards if the target index
        is below the jump's index, forwards otherwise. Commands are passed
        over. An immediate jump scans the whole program.

        Raises:
            InvalidTarget: the target index was never issued, or the scan
                reaches an end of the program without finding it.
        """
        target = jump.target
        if target >= self.counter.value:
            raise InvalidTarget(
                target, f"only {self.counter.value} instruction indices issued")

        if position is None:
            for pos, entry in enumerate(self.program):
                if is_instruction(entry) and entry.index == target:
                    return pos
            raise InvalidTarget(target)

        direction = -1 if target < jump.index else 1
        pos = position
        while 0 <= pos < len(self.program):
            entry = self.program[pos]
            if is_instruction(entry) and entry.index == target:
                return pos
            pos += direction
        raise InvalidTarget(target)

    # ══════════════════════════════════════════════
    # Inspection
    # ══════════════════════════════════════════════

    def listing(self) -> List[str]:
        """Program text, one entry per line."""
        return [entry.to_text() for entry in self.program]

    def dump(self, lo: int, hi: int) -> List[str]:
        """Register lines for addresses lo..hi."""
        return [f"registry[{addr}]: {self.registers.get(addr)}"
                for addr in range(lo, hi + 1)]

    @property
    def instruction_count(self) -> int:
        return sum(1 for entry in self.program if is_instruction(entry))

    # ══════════════════════════════════════════════
    # Entry handlers
    # ══════════════════════════════════════════════

    def _build_dispatch(self) -> dict:
        """Build entry type → handler dispatch table."""
        return {
            # ── Instructions ──
            Inc:  self._op_inc,
            Zero: self._op_zero,
            Move: self._op_move,
            Jump: self._op_jump,

            # ── Commands ──
            RangeZero:   self._op_range_zero,
            RangeSet:    self._op_range_set,
            BlockCopy:   self._op_block_copy,
            Dump:        self._op_dump,
            ListProgram: self._op_list_program,
            RunProgram:  self._op_run_program,
        }

    def _op_inc(self, entry: Inc, position):
        self.registers.increment(entry.reg)

    def _op_zero(self, entry: Zero, position):
        self.registers.set(entry.reg, 0)

    def _op_move(self, entry: Move, position):
        self.registers.set(entry.dst, self.registers.get(entry.src))

    def _op_jump(self, entry: Jump, position):
        if self.registers.get(entry.x) != self.registers.get(entry.y):
            return
        target_pos = self.resolve_jump(entry, position)
        if position is None:
            # Console jump: pc is left on the target for a caller driving
            # step() by hand. run() and /run always start again at 0.
            self.pc = target_pos
        else:
            self.pc = target_pos - 1

    def _op_range_zero(self, entry: RangeZero, position):
        self.registers.range_zero(entry.lo, entry.hi)

    def _op_range_set(self, entry: RangeSet, position):
        self.registers.set(entry.addr, entry.value)

    def _op_block_copy(self, entry: BlockCopy, position):
        self.registers.block_copy(entry.src, entry.dst, entry.length)

    def _op_dump(self, entry: Dump, position):
        for line in self.dump(entry.lo, entry.hi):
            self.output(line)

    def _op_list_program(self, entry: ListProgram, position):
        for line in self.listing():
            self.output(line)

    def _op_run_program(self, entry: RunProgram, position):
        if self.running:
            # Restart in place; step() moves pc on to 0
            logger.debug("/run inside a running program: restarting")
            self.pc = -1
            return
        self.run()

    def __repr__(self) -> str:
        return (f"Machine(entries={len(self.program)}, pc={self.pc}, "
                f"counter={self.counter.value}, registers={len(self.registers)})")
