"""
Program merge: splice one machine's program in front of another's.

merge(base, incoming) rewrites `base` in place so that it holds incoming's
program followed by its own, with both register spaces side by side:

    registers   incoming's keep addresses [0, shift)
                base's move from a to a + shift
                shift = incoming's highest written address + 1 (0 if none)

    indices     incoming's instructions become 0 .. n-1, in program order
                base's instructions move from i to i + n
                n = number of instructions in incoming's program

Base entries are relocated along with their registers: register operands
move by `shift` and JUMP targets by `n`, so base's program still addresses
its own registers and instructions after the splice. Incoming's jump
targets follow its renumbering.

When incoming has no registers but base does, shift is 0 and the two
programs share one register space. That is accepted (it is what /add
always sees, since loading a file never writes registers) and logged as a
warning.
"""

from __future__ import annotations
import logging
from dataclasses import replace
from typing import TYPE_CHECKING, Dict, List

from .entries import Jump, ProgramEntry, is_instruction, relocate

if TYPE_CHECKING:
    from .machine import Machine

logger = logging.getLogger(__name__)

__all__ = ['merge', 'register_shift']


def register_shift(incoming: Machine) -> int:
    """First register address free of incoming's registers."""
    top = incoming.registers.max_address()
    return 0 if top is None else top + 1


def _renumber(entries: List[ProgramEntry]) -> List[ProgramEntry]:
    """Number the instructions of `entries` 0, 1, 2, ... in order.

    Jump targets are mapped through the same renumbering. A target that
    names no instruction in `entries` is left as it is.
    """
    mapping: Dict[int, int] = {}
    for entry in entries:
        if is_instruction(entry):
            mapping[entry.index] = len(mapping)

    result = []
    for entry in entries:
        if is_instruction(entry):
            entry = replace(entry, index=mapping[entry.index])
            if isinstance(entry, Jump):
                entry = replace(entry, target=mapping.get(entry.target, entry.target))
        result.append(entry)
    return result


def merge(base: Machine, incoming: Machine) -> Machine:
    """Put incoming's program and registers in front of base's.

    Returns `base`, which now holds the merged program. `incoming` is
    erased.
    """
    shift = register_shift(incoming)
    n = incoming.instruction_count

    if shift == 0 and len(base.registers) > 0:
        logger.warning("Merging a program with no registers of its own: "
                       "both programs share one register space")

    head = _renumber(incoming.program)
    tail = [relocate(entry, reg_shift=shift, index_shift=n)
            for entry in base.program]

    registers = base.registers.relocated(shift)
    registers.update(incoming.registers)

    base.program = head + tail
    base.registers = registers
    base.counter.advance(n)
    base.pc = 0
    incoming.erase()

    logger.info(f"Merged {len(head)} entries ({n} instructions) in front of "
                f"{len(tail)}; base registers shifted by {shift}")
    return base
