"""
Terminal prompts
Blocking reads from the user: a single-key y/n question and a hidden
secret entry. Raw mode is scoped by a context manager so the terminal is
restored on every exit path, Ctrl-C included.
"""

import getpass
import os
import sys
import termios
import tty
from contextlib import contextmanager

CTRL_C = b"\x03"


@contextmanager
def raw_mode(fd: int):
    """Put the terminal on fd into raw mode for the duration of the block."""
    saved = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, saved)


def ask(message: str, stdin=None, stderr=None) -> bool:
    """
    Ask a y/N question. Anything but 'y' or 'Y' means no.

    On a terminal a single keypress answers; otherwise one line is read.
    """
    stdin = stdin or sys.stdin
    stderr = stderr or sys.stderr

    stderr.write(f"{message} [y/N] ")
    stderr.flush()

    if stdin.isatty():
        fd = stdin.fileno()
        with raw_mode(fd):
            key = os.read(fd, 1)
        stderr.write("\n")
        if key == CTRL_C:
            # Raw mode turns off ISIG, so the interrupt arrives as a byte
            raise KeyboardInterrupt
        answer = key.decode("ascii", errors="ignore")
    else:
        answer = stdin.readline()

    return answer[:1] in ("y", "Y")


def read_secret(prompt: str = "secret: ") -> str:
    """Read a secret without echo."""
    return getpass.getpass(prompt)
