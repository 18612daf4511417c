import logging

import pytest

from ls8.assembler import assemble
from ls8.cpu_core import (ADVANCE, CPU, DivisionByZeroError, IllegalOpcodeError,
                          Jump)
from ls8.opcodes import HLT, LDI, PRN
from ls8.registers import FL_EQ, FL_GT, FL_LT, SP, SP_START


def make_cpu(source: str = "", **kwargs):
    lines = []
    cpu = CPU(output=lines.append, **kwargs)
    for addr, byte in enumerate(assemble(source)):
        cpu.poke(addr, byte)
    return cpu, lines


def test_mult_program_prints_72():
    cpu, out = make_cpu("""
        LDI R0, 8
        LDI R1, 9
        MUL R0, R1
        PRN R0
        HLT
    """)
    cpu.run()
    assert out == ["72"]
    assert cpu.halted
    assert cpu.fault is None
    assert cpu.reg.pc == 12

def test_step_advances_by_operand_count():
    cpu, _ = make_cpu("LDI R0, 1\nINC R0\nNOP\nHLT")
    assert cpu.step()
    assert cpu.reg.pc == 3
    assert cpu.reg.ir == LDI
    cpu.step()
    assert cpu.reg.pc == 5
    cpu.step()
    assert cpu.reg.pc == 6
    assert not cpu.step()

def test_step_on_halted_cpu_does_nothing():
    cpu, _ = make_cpu("HLT")
    cpu.run()
    pc = cpu.reg.pc
    assert cpu.step() is False
    assert cpu.reg.pc == pc

def test_run_respects_max_steps():
    cpu, _ = make_cpu("LDI R0, 0\nJMP R0")   # loops forever
    assert cpu.run(max_steps=10) == 10
    assert cpu.running

def test_branch_table_is_read_only():
    cpu, _ = make_cpu()
    with pytest.raises(TypeError):
        cpu.branch_table[0xFF] = cpu.HLT

def test_handlers_return_explicit_result():
    cpu, _ = make_cpu()
    assert cpu.LDI(0, 4) is ADVANCE
    cpu.reg[1] = 0x40
    assert cpu.JMP(1) == Jump(0x40)

def test_invalid_opcode_halts_without_advancing(caplog):
    cpu, out = make_cpu("NOP")
    cpu.poke(1, 0xFF)
    cpu.poke(2, PRN)
    with caplog.at_level(logging.ERROR):
        cpu.run()
    assert cpu.halted
    assert cpu.reg.pc == 1
    assert cpu.reg.ir == 0xFF
    assert isinstance(cpu.fault, IllegalOpcodeError)
    assert out == ["Instruction 255 is invalid"]
    assert "Instruction 255 is invalid" in caplog.text

@pytest.mark.parametrize("mnemonic", ["DIV", "MOD"])
def test_divide_by_zero_halts_before_prn(mnemonic):
    cpu, out = make_cpu(f"""
        LDI R0, 5
        LDI R1, 0
        {mnemonic} R0, R1
        PRN R0
    """)
    cpu.run()
    assert cpu.halted
    assert isinstance(cpu.fault, DivisionByZeroError)
    assert cpu.reg[0] == 5
    assert cpu.reg.pc == 6
    assert out == ["regB should not be zero"]
    assert "5" not in out

def test_div_and_mod():
    cpu, out = make_cpu("""
        LDI R0, 17
        LDI R1, 5
        LDI R2, 17
        DIV R0, R1
        MOD R2, R1
        PRN R0
        PRN R2
        HLT
    """)
    cpu.run()
    assert out == ["3", "2"]

def test_arithmetic_wraps():
    cpu, _ = make_cpu("""
        LDI R0, 250
        LDI R1, 10
        ADD R0, R1
        LDI R2, 3
        SUB R2, R1
        LDI R3, 255
        INC R3
        LDI R4, 0
        DEC R4
        HLT
    """)
    cpu.run()
    assert cpu.reg[0] == 4
    assert cpu.reg[2] == 249
    assert cpu.reg[3] == 0
    assert cpu.reg[4] == 255

def test_bitwise_handlers():
    cpu, _ = make_cpu("""
        LDI R0, 0b1100
        LDI R1, 0b1010
        LDI R2, 0b1100
        LDI R3, 0b1100
        AND R0, R1
        OR R2, R1
        XOR R3, R1
        LDI R4, 0
        NOT R4
        HLT
    """)
    cpu.run()
    assert cpu.reg[0] == 0b1000
    assert cpu.reg[2] == 0b1110
    assert cpu.reg[3] == 0b0110
    assert cpu.reg[4] == -1

def test_not_masked_when_configured():
    cpu, _ = make_cpu("LDI R4, 0\nNOT R4\nHLT", mask_not=True)
    cpu.run()
    assert cpu.reg[4] == 0xFF

def test_ld_and_st():
    cpu, _ = make_cpu("""
        LDI R0, 0x80
        LDI R1, 42
        ST R0, R1
        LD R2, R0
        HLT
    """)
    cpu.run()
    assert cpu.peek(0x80) == 42
    assert cpu.reg[2] == 42

@pytest.mark.parametrize("a, b, flag", [(3, 3, FL_EQ), (4, 3, FL_GT), (2, 3, FL_LT)])
def test_cmp_sets_flags_only(a, b, flag):
    cpu, _ = make_cpu(f"LDI R0, {a}\nLDI R1, {b}\nCMP R0, R1\nHLT")
    cpu.run()
    assert cpu.reg.fl == flag
    assert (cpu.reg[0], cpu.reg[1]) == (a, b)

JEQ_PROGRAM = """
    LDI R0, {a}
    LDI R1, {b}
    LDI R2, 20
    CMP R0, R1
    JEQ R2
"""

def test_jeq_taken_on_equal():
    cpu, _ = make_cpu(JEQ_PROGRAM.format(a=7, b=7))
    cpu.run(max_steps=5)
    assert cpu.reg.pc == 20

def test_jeq_falls_through_on_unequal():
    cpu, _ = make_cpu(JEQ_PROGRAM.format(a=7, b=8))
    cpu.run(max_steps=4)
    jeq_addr = cpu.reg.pc
    cpu.step()
    assert cpu.reg.pc == jeq_addr + 2

@pytest.mark.parametrize("jump, a, b, taken", [
    ("JNE", 1, 2, True), ("JNE", 2, 2, False),
    ("JGT", 3, 2, True), ("JGT", 2, 3, False),
    ("JLT", 2, 3, True), ("JLT", 3, 3, False),
])
def test_conditional_jumps(jump, a, b, taken):
    cpu, _ = make_cpu(f"""
        LDI R0, {a}
        LDI R1, {b}
        LDI R2, 0x40
        CMP R0, R1
        {jump} R2
    """)
    cpu.run(max_steps=5)
    assert cpu.reg.pc == (0x40 if taken else 14)

def test_push_pop_restores_register_and_sp():
    cpu, _ = make_cpu("""
        LDI R0, 99
        PUSH R0
        LDI R0, 1
        POP R0
        HLT
    """)
    cpu.run(max_steps=2)
    assert cpu.reg[SP] == SP_START - 1
    assert cpu.peek(SP_START - 1) == 99
    cpu.run()
    assert cpu.reg[0] == 99
    assert cpu.reg[SP] == SP_START

def test_push_pop_moves_value_between_registers():
    cpu, _ = make_cpu("LDI R0, 7\nPUSH R0\nPOP R3\nHLT")
    cpu.run()
    assert cpu.reg[3] == 7

def test_stack_pointer_wraps_without_checks():
    cpu, _ = make_cpu("LDI R7, 0\nLDI R0, 5\nPUSH R0\nHLT")
    cpu.run()
    assert cpu.reg[SP] == 0xFF
    assert cpu.peek(0xFF) == 5

def test_call_and_ret():
    cpu, out = make_cpu("""
        LDI R1, 0x20
        CALL R1
        PRN R0
        HLT
    """)
    sub = assemble("LDI R0, 11\nRET")
    for i, byte in enumerate(sub):
        cpu.poke(0x20 + i, byte)

    cpu.step()
    call_site = cpu.reg.pc
    cpu.step()
    assert cpu.reg.pc == 0x20
    assert cpu.reg[SP] == SP_START - 1
    assert cpu.peek(cpu.reg[SP]) == call_site + 2
    cpu.step()
    cpu.step()
    assert cpu.reg.pc == call_site + 2
    assert cpu.reg[SP] == SP_START
    cpu.run()
    assert out == ["11"]

def test_trace_line():
    cpu, _ = make_cpu("LDI R0, 8")
    assert cpu.trace() == "00 | 99 00 08 | 00 00 00 00 00 00 00 F4 | 00"

def test_trace_logged_at_debug(caplog):
    cpu, _ = make_cpu("HLT")
    with caplog.at_level(logging.DEBUG, logger="ls8.cpu_core"):
        cpu.step()
    assert "00 | 01 00 00 |" in caplog.text

def test_reset_restores_initial_state():
    cpu, _ = make_cpu("LDI R0, 5\nHLT")
    cpu.run()
    cpu.reset()
    assert cpu.running
    assert cpu.reg.pc == 0
    assert cpu.reg[0] == 0
    assert cpu.reg[SP] == SP_START
    assert cpu.peek(0) == 0
    assert cpu.fault is None

def test_poke_raw_bytes():
    cpu, out = make_cpu()
    for addr, byte in enumerate([LDI, 2, 200, PRN, 2, HLT]):
        cpu.poke(addr, byte)
    cpu.run()
    assert out == ["200"]

def test_cmp_after_not_is_unsigned():
    cpu, out = make_cpu("""
        LDI R0, 0
        NOT R0
        LDI R1, 0
        CMP R0, R1
        PRN R0
        HLT
    """)
    cpu.run()
    assert cpu.reg.fl == FL_GT
    assert cpu.reg[0] == -1
    assert out == ["-1"]
