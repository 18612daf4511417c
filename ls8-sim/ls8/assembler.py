"""Minimal LS-8 assembler (one instruction per line).

    LDI  R0, 8        ; register, immediate
    MUL  R0, R1       ; register, register
    PRN  R0
    HLT

Immediates may be decimal, ``0x`` hex or ``0b`` binary. Labels are not
supported; jump targets are loaded into a register with LDI.
"""
import re

from .opcodes import IMMEDIATE_OPERANDS, OPCODES, operand_count


class AssemblyError(ValueError):
    pass


_LINE_RE = re.compile(r"^([A-Za-z]+)(?:\s+(.*))?$")
_REG_RE = re.compile(r"^R([0-7])$", re.I)


def _num(tok: str) -> int:
    try:
        v = int(tok, 0)
    except ValueError:
        raise AssemblyError(f"bad number {tok!r}") from None
    if not 0 <= v <= 0xFF:
        raise AssemblyError(f"immediate {tok} out of range for 8-bit field")
    return v


def _reg(tok: str) -> int:
    m = _REG_RE.match(tok)
    if not m:
        raise AssemblyError(f"expected register R0-R7, got {tok!r}")
    return int(m.group(1))


def assemble_line(line: str):
    """Turn one line into its bytes. Blank and comment-only lines give []."""
    line = re.sub(r';.*$', '', line).strip()
    if not line:
        return []

    m = _LINE_RE.match(line)
    if not m:
        raise AssemblyError("syntax error")
    mnemonic, rest = m.group(1).upper(), m.group(2)
    if mnemonic not in OPCODES:
        raise AssemblyError(f"unknown mnemonic {mnemonic}")

    opcode = OPCODES[mnemonic]
    tokens = [t.strip() for t in rest.split(",")] if rest else []
    count = operand_count(opcode)
    if len(tokens) != count:
        raise AssemblyError(f"{mnemonic} takes {count} operand(s), got {len(tokens)}")

    immediates = IMMEDIATE_OPERANDS.get(opcode, (False, False))
    operands = [_num(tok) if imm else _reg(tok) for tok, imm in zip(tokens, immediates)]
    return [opcode] + operands


def assemble(text: str):
    program = []
    for lineno, line in enumerate(text.splitlines(), 1):
        try:
            program.extend(assemble_line(line))
        except AssemblyError as e:
            raise AssemblyError(f"line {lineno}: {e}") from None
    return program
