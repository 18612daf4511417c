"""Loader for ``.ls8`` program listings.

A listing holds one byte per line as eight binary digits. Everything after
``#`` is a comment, and lines that do not start with a binary byte are
ignored::

    10011001 # LDI R0,8
    00000000
    00001000
"""
import logging
import re
from pathlib import Path

from .memory import MEM_SIZE

logger = logging.getLogger(__name__)

_BYTE_RE = re.compile(r"^\s*([01]{8})\b")


class ProgramLoadError(RuntimeError):
    """Raised when a listing cannot be placed in memory."""


def parse_listing(lines):
    """Return the program bytes found in an iterable of listing lines."""
    program = []
    for line in lines:
        m = _BYTE_RE.match(line.split("#", 1)[0])
        if m:
            program.append(int(m.group(1), 2))
    return program


def load_program(cpu, program, start: int = 0) -> int:
    """Poke `program` into the CPU's memory. Returns the number of bytes written."""
    if start + len(program) > MEM_SIZE:
        raise ProgramLoadError(
            f"program of {len(program)} bytes does not fit at address {start:#04x}")
    for offset, value in enumerate(program):
        cpu.poke(start + offset, value)
    logger.info("loaded %d bytes at 0x%02X", len(program), start)
    return len(program)


def load_file(cpu, path) -> int:
    path = Path(path)
    try:
        with path.open() as handle:
            program = parse_listing(handle)
    except OSError as e:
        raise ProgramLoadError(f"cannot read {path}: {e}") from e
    return load_program(cpu, program)
