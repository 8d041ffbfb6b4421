"""
Sparse register store for the Unlimited Register Machine.

Registers are addressed by non-negative integers with no upper bound and
hold arbitrary Python integers. An address that was never written reads
as 0. Writes keep their key, including writes of 0, so max_address()
reports the highest address ever written.
"""

from __future__ import annotations
from typing import Dict, Iterator, List, Optional, Tuple


class RegisterStore:
    """Mapping of register address to value, zero by default."""

    __slots__ = ('_regs',)

    def __init__(self, initial: Optional[Dict[int, int]] = None):
        self._regs: Dict[int, int] = dict(initial) if initial else {}

    # --- Core read/write ---

    def get(self, addr: int) -> int:
        return self._regs.get(addr, 0)

    def set(self, addr: int, value: int):
        self._regs[addr] = value

    def increment(self, addr: int):
        self._regs[addr] = self._regs.get(addr, 0) + 1

    # --- Block operations ---

    def range_zero(self, lo: int, hi: int):
        """Zero every address in [lo, hi]. Empty when lo > hi."""
        for addr in range(lo, hi + 1):
            self._regs[addr] = 0

    def block_copy(self, src: int, dst: int, length: int):
        """Copy `length` registers from src.. to dst.., lowest address first.

        This is a forward scalar copy, not a memmove: when the ranges overlap
        with dst > src, values already written at the destination are read
        again as source. Copying src=0, dst=1, length=3 over [1, 2, 3]
        leaves registers 0..3 as [1, 1, 1, 1].
        """
        for i in range(length):
            self._regs[dst + i] = self._regs.get(src + i, 0)

    def snapshot(self, lo: int, hi: int) -> List[int]:
        """Return the values of registers lo..hi inclusive."""
        return [self.get(addr) for addr in range(lo, hi + 1)]

    # --- Whole-store operations (used by the merger) ---

    def max_address(self) -> Optional[int]:
        """Highest address present, or None for an empty store."""
        return max(self._regs) if self._regs else None

    def relocated(self, shift: int) -> RegisterStore:
        """Return a copy with every address moved up by `shift`."""
        return RegisterStore({addr + shift: value
                              for addr, value in self._regs.items()})

    def update(self, other: RegisterStore):
        self._regs.update(other._regs)

    def clear(self):
        self._regs.clear()

    def items(self) -> List[Tuple[int, int]]:
        """(address, value) pairs in ascending address order."""
        return sorted(self._regs.items())

    def __contains__(self, addr: int) -> bool:
        return addr in self._regs

    def __len__(self) -> int:
        return len(self._regs)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._regs))

    def __eq__(self, other) -> bool:
        if not isinstance(other, RegisterStore):
            return NotImplemented
        return self._regs == other._regs

    def __repr__(self) -> str:
        body = ", ".join(f"{a}: {v}" for a, v in self.items())
        return f"RegisterStore({{{body}}})"
