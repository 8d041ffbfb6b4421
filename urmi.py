#!/usr/bin/env python3
"""
urmi — Unlimited Register Machine interpreter

Usage:
    python urmi.py [program.urm] [--no-run] [--no-prompt] [--verbose]

With no arguments, loads test1.urm from the current directory (if present),
runs it once and starts the console. Every console line runs immediately:

    $ /set 1 3
    $ INC 1
    $ /mem 0 1
    registry[0]: 0
    registry[1]: 4
    $ /quote INC 0        (append to the program instead)
    $ /load other.urm     (replace the program)
    $ /add lib.urm        (splice lib.urm in front of the program)
    $ /run
    $ /exit

Examples:
    python urmi.py                       # run default program, console
    python urmi.py add.urm --no-run      # load add.urm without running it
    echo "/mem 0 3" | python urmi.py add.urm --no-prompt
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from urm import __version__
from urm.errors import URMError
from urm.machine import Machine
from urm.repl import PROMPT, repl

DEFAULT_PROGRAM = "test1.urm"


def setup_logging(name: str = "urm", console_level: int = logging.WARNING,
                  log_file: Optional[Path] = None) -> logging.Logger:
    """Configure and return the package logger.

    Console records go to stderr through rich, so they never mix with
    /mem and /code output on stdout. With `log_file`, everything at
    DEBUG and above is also written there.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        logger.handlers[0].setLevel(console_level)
        return logger
    logger.setLevel(logging.DEBUG)

    # ── Console handler: WARNING+ unless --verbose ──
    ch = RichHandler(
        console=Console(stderr=True),
        level=console_level,
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
    )
    logger.addHandler(ch)

    # ── File handler: captures everything (DEBUG+) ──
    if log_file is not None:
        fh = logging.FileHandler(str(log_file), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(
            "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        logger.addHandler(fh)

    return logger


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="urmi",
        description="Unlimited Register Machine interpreter",
    )
    parser.add_argument("program", nargs="?", default=None,
                        help=f"Program to load (default: {DEFAULT_PROGRAM} if present)")
    parser.add_argument("--no-run", action="store_true",
                        help="Load the program but do not run it before the console")
    parser.add_argument("--no-prompt", action="store_true",
                        help="Do not print the console prompt")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Log loads, merges and runs to stderr")
    parser.add_argument("--log-file", type=Path, default=None,
                        help="Also write a DEBUG log to this file")
    parser.add_argument("--version", action="version",
                        version=f"urmi {__version__}")

    args = parser.parse_args(argv)

    setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING,
                  log_file=args.log_file)
    logger = logging.getLogger("urm.cli")

    machine = Machine()

    path = args.program or DEFAULT_PROGRAM
    if args.program is None and not os.path.exists(path):
        logger.warning(f"Default program {path} not found, starting empty")
    else:
        try:
            machine.load_file(path)
        except URMError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    if not args.no_run:
        try:
            machine.run()
        except URMError as e:
            print(f"Error: {e}", file=sys.stderr)
        except KeyboardInterrupt:
            print("Interrupted", file=sys.stderr)

    return repl(machine, prompt=None if args.no_prompt else PROMPT)


if __name__ == "__main__":
    sys.exit(main())
