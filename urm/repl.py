"""
Interactive console for the URM machine.

Reads one line at a time and executes it immediately. A bad line prints an
error and the loop carries on; /exit or end of input ends the session.
"""

from __future__ import annotations
import logging
import sys
from typing import Optional, TextIO

from .errors import URMError
from .machine import LoadMode, Machine
from .parser import check_arity, tokenize

logger = logging.getLogger(__name__)

PROMPT = "$ "


def repl(machine: Machine, stdin: Optional[TextIO] = None,
         stdout: Optional[TextIO] = None, stderr: Optional[TextIO] = None,
         prompt: Optional[str] = PROMPT) -> int:
    """Run the read-execute loop until /exit or EOF. Returns exit status 0.

    Pass prompt=None to read without printing a prompt (piped input).
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    while True:
        if prompt:
            stdout.write(prompt)
            stdout.flush()
        line = stdin.readline()
        if not line:
            logger.debug("End of input")
            break

        tokens = tokenize(line)
        try:
            if tokens and tokens[0] == '/exit':
                check_arity('/exit', tokens[1:], (0,))
                break
            machine.execute_line(tokens, LoadMode.IMMEDIATE)
        except URMError as e:
            print(f"Error: {e}", file=stderr)
        except KeyboardInterrupt:
            print("Interrupted", file=stderr)

    return 0
