"""
Line parser for URM programs and console input.

One command per line, whitespace-delimited tokens:

    INC 3
    JUMP 1 2 7
    /set 1 4

tokenize() splits a line; build_entry() turns the tokens of an instruction
or command into a program entry. Meta commands (/load, /add, /quote,
/comment, /exit) act on the machine or the console rather than producing
an entry; they are handled by the Machine and the REPL, and only
skipped or rejected here when parsing whole programs.
"""

from __future__ import annotations
import re
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple, Union

from .entries import (
    InstructionCounter, ProgramEntry,
    Inc, Zero, Move, Jump,
    RangeZero, RangeSet, BlockCopy, Dump, ListProgram, RunProgram,
)
from .errors import (
    URMError, UnknownCommand, ArityMismatch, MalformedOperand, ProgramLoadError,
)

__all__ = ['tokenize', 'parse_operand', 'check_arity', 'build_entry',
           'parse_program', 'read_program', 'COMMANDS']


_NUMBER_RE = re.compile(r'[0-9]+')


def tokenize(line: str) -> List[str]:
    """Split a source line into tokens. Blank lines give []."""
    return line.split()


def parse_operand(name: str, token: str) -> int:
    """Parse a non-negative decimal operand of command `name`."""
    if not _NUMBER_RE.fullmatch(token):
        raise MalformedOperand(name, token)
    return int(token)


# ──────────────────────────────────────────────
# Entry builders
# ──────────────────────────────────────────────
# Each builder receives the parsed operands and the counter that numbers
# instructions. Commands ignore the counter.

Builder = Callable[[List[int], InstructionCounter], ProgramEntry]


def _jump(ops: List[int], counter: InstructionCounter) -> Jump:
    if len(ops) == 1:
        return Jump(target=ops[0], x=0, y=0, index=counter.next())
    x, y, target = ops
    return Jump(target=target, x=x, y=y, index=counter.next())


# name -> (allowed operand counts, builder)
COMMANDS: Dict[str, Tuple[Tuple[int, ...], Builder]] = {
    'ZERO':  ((1,), lambda ops, c: Zero(reg=ops[0], index=c.next())),
    'INC':   ((1,), lambda ops, c: Inc(reg=ops[0], index=c.next())),
    'MOVE':  ((2,), lambda ops, c: Move(src=ops[0], dst=ops[1], index=c.next())),
    'JUMP':  ((1, 3), _jump),
    '/zero': ((2,), lambda ops, c: RangeZero(lo=ops[0], hi=ops[1])),
    '/set':  ((2,), lambda ops, c: RangeSet(addr=ops[0], value=ops[1])),
    '/copy': ((3,), lambda ops, c: BlockCopy(src=ops[0], dst=ops[1], length=ops[2])),
    '/mem':  ((2,), lambda ops, c: Dump(lo=ops[0], hi=ops[1])),
    '/code': ((0,), lambda ops, c: ListProgram()),
    '/run':  ((0,), lambda ops, c: RunProgram()),
}


def check_arity(name: str, operands: Sequence[str], allowed: Tuple[int, ...]):
    if len(operands) not in allowed:
        expected = " or ".join(str(n) for n in allowed)
        raise ArityMismatch(name, expected, len(operands))


def build_entry(tokens: Sequence[str],
                counter: InstructionCounter) -> ProgramEntry:
    """Build the program entry for one tokenized line.

    The counter is only consulted once the line is known to be valid, so a
    rejected line never uses up an instruction index.

    Raises:
        UnknownCommand: first token is not an instruction or command
            (meta commands included; they have no entry form).
        ArityMismatch: wrong number of operands.
        MalformedOperand: an operand is not a non-negative integer.
    """
    if not tokens:
        raise UnknownCommand("")
    name, raw_ops = tokens[0], list(tokens[1:])
    entry_def = COMMANDS.get(name)
    if entry_def is None:
        raise UnknownCommand(name)
    allowed, builder = entry_def
    check_arity(name, raw_ops, allowed)
    operands = [parse_operand(name, tok) for tok in raw_ops]
    return builder(operands, counter)


# ──────────────────────────────────────────────
# Whole programs
# ──────────────────────────────────────────────

# Meta commands that only make sense at the console
_CONSOLE_ONLY = ('/load', '/add', '/exit')


def parse_program(text: str, counter: InstructionCounter,
                  source: str = "<string>") -> List[ProgramEntry]:
    """Parse program text into entries, in order.

    Blank lines and /comment lines are skipped; /quote is dropped (every
    line of a program is already deferred). The first bad line aborts the
    whole parse with ProgramLoadError carrying its line number.
    """
    entries: List[ProgramEntry] = []
    for line_num, raw in enumerate(text.splitlines(), start=1):
        tokens = tokenize(raw)
        while tokens and tokens[0] == '/quote':
            tokens = tokens[1:]
        if not tokens or tokens[0] == '/comment':
            continue
        if tokens[0] in _CONSOLE_ONLY:
            raise ProgramLoadError(
                source, f"{tokens[0]} is not allowed inside a program",
                line_num=line_num, line_text=raw)
        try:
            entries.append(build_entry(tokens, counter))
        except URMError as e:
            raise ProgramLoadError(source, e.message, line_num=line_num,
                                   line_text=raw, cause=e) from e
    return entries


def read_program(path: Union[str, Path],
                 counter: InstructionCounter) -> List[ProgramEntry]:
    """Read and parse a program file."""
    try:
        text = Path(path).read_text(encoding='utf-8')
    except OSError as e:
        raise ProgramLoadError(str(path), f"cannot read file ({e.strerror or e})") from e
    return parse_program(text, counter, source=str(path))
