"""
Error types raised by the URM interpreter.

Every failure the interpreter reports derives from URMError, so callers
(the REPL, the file loader) catch one base class and keep going.

    URMError
    ├── UnknownCommand      first token matches no command
    ├── ArityMismatch       wrong number of operands
    ├── MalformedOperand    operand is not a non-negative integer
    ├── InvalidTarget       JUMP target cannot be resolved
    └── ProgramLoadError    a program file could not be loaded
"""

from __future__ import annotations
from typing import Optional

__all__ = [
    'URMError', 'UnknownCommand', 'ArityMismatch', 'MalformedOperand',
    'InvalidTarget', 'ProgramLoadError',
]


class URMError(Exception):
    """Base class for interpreter errors."""
    def __init__(self, message: str, line_num: int = 0, line_text: str = ""):
        self.message = message
        self.line_num = line_num
        self.line_text = line_text
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


class UnknownCommand(URMError):
    """Raised when a line starts with an unrecognised command name."""
    def __init__(self, name: str, **kwargs):
        self.name = name
        super().__init__(f"Unknown command: {name!r}", **kwargs)


class ArityMismatch(URMError):
    """Raised when a command gets the wrong number of operands."""
    def __init__(self, name: str, expected: str, got: int, **kwargs):
        self.name = name
        self.expected = expected
        self.got = got
        super().__init__(
            f"{name} expects {expected} operand(s), got {got}", **kwargs)


class MalformedOperand(URMError):
    """Raised when an operand is not a non-negative decimal integer."""
    def __init__(self, name: str, token: str, **kwargs):
        self.name = name
        self.token = token
        super().__init__(
            f"{name}: operand {token!r} is not a non-negative integer", **kwargs)


class InvalidTarget(URMError):
    """Raised when a JUMP target names no instruction in the program."""
    def __init__(self, target: int, reason: str = "no such instruction"):
        self.target = target
        super().__init__(f"Invalid jump target {target}: {reason}")


class ProgramLoadError(URMError):
    """Raised when a program file cannot be read or one of its lines fails."""
    def __init__(self, path: str, message: str, line_num: int = 0,
                 line_text: str = "", cause: Optional[URMError] = None):
        self.path = str(path)
        self.cause = cause
        super().__init__(f"{path}: {message}", line_num=line_num,
                         line_text=line_text)
