import logging
from dataclasses import dataclass
from types import MappingProxyType

from . import opcodes as op
from .alu import ALU
from .memory import Memory
from .opcodes import operand_count
from .registers import GENERAL_REGS, FL_EQ, FL_GT, FL_LT, Registers

logger = logging.getLogger(__name__)


class CPUFault(RuntimeError):
    """Fatal condition inside one cycle. Caught by step(), halts the CPU."""


class IllegalOpcodeError(CPUFault):
    pass


class DivisionByZeroError(CPUFault):
    pass


@dataclass(frozen=True)
class Jump:
    """Handler result: continue at `address`."""
    address: int


class Advance:
    """Handler result: default PC advancement (1 + operand count)."""
    def __repr__(self):
        return "ADVANCE"


ADVANCE = Advance()


class CPU:
    """
    LS-8 soft CPU: 8 x 8-bit registers, 256 bytes of memory.
    ─────────────────────────────────────────────────────
    • step()   : one fetch → decode → execute → advance cycle
    • run()    : call step() until HLT or a fault
    • reset()  : fresh registers and memory
    Program output (PRN, fault reports) goes to the `output` callable,
    one line per call.
    """

    def __init__(self, mem=None, output=print, mask_not=False):
        self.reg = Registers()   # R0..R7, PC, IR, FL
        self.mem = mem if mem is not None else Memory()
        self.output = output
        self.mask_not = mask_not
        self.running = True
        self.fault = None
        self.branch_table = self._build_branch_table()

    def _build_branch_table(self):
        table = {
            op.HLT:  self.HLT,
            op.NOP:  self.NOP,
            op.LDI:  self.LDI,
            op.LD:   self.LD,
            op.ST:   self.ST,
            op.PRN:  self.PRN,

            op.ADD:  self.ADD,
            op.SUB:  self.SUB,
            op.MUL:  self.MUL,
            op.DIV:  self.DIV,
            op.MOD:  self.MOD,
            op.INC:  self.INC,
            op.DEC:  self.DEC,

            op.AND:  self.AND,
            op.OR:   self.OR,
            op.XOR:  self.XOR,
            op.NOT:  self.NOT,

            op.CMP:  self.CMP,
            op.JMP:  self.JMP,
            op.JEQ:  self.JEQ,
            op.JNE:  self.JNE,
            op.JGT:  self.JGT,
            op.JLT:  self.JLT,

            op.PUSH: self.PUSH,
            op.POP:  self.POP,
            op.CALL: self.CALL,
            op.RET:  self.RET,
        }
        return MappingProxyType(table)

    @property
    def halted(self) -> bool:
        return not self.running

    # ───────────────────────────── memory ─────────────────────────────
    def poke(self, addr: int, value: int):
        """Store a byte in memory, used for program loading"""
        self.mem.write(addr, value)

    def peek(self, addr: int) -> int:
        return self.mem.read(addr)

    # ───────────────────────────── ALU ────────────────────────────────
    def alu(self, name: str, reg_a: int, reg_b: int = 0):
        """Run ALU op `name` on registers, result written back to reg_a"""
        if name == "CMP":
            self.reg.fl = ALU.compare(self.reg[reg_a], self.reg[reg_b])
            return
        self.reg[reg_a] = ALU.execute(name, self.reg[reg_a], self.reg[reg_b],
                                      mask_not=self.mask_not)

    # ───────────────────────────── cycle ──────────────────────────────
    def step(self) -> bool:
        """한 명령어 사이클(fetch-decode-exec) 실행. Returns True while running."""
        if not self.running:
            return False

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(self.trace())

        # fetch
        self.reg.ir = self.mem.read(self.reg.pc)

        # decode: both operand bytes are read regardless of the instruction
        handler = self.branch_table.get(self.reg.ir)
        operand_a = self.mem.read(self.reg.pc + 1)
        operand_b = self.mem.read(self.reg.pc + 2)

        try:
            if handler is None:
                raise IllegalOpcodeError(f"Instruction {self.reg.ir} is invalid")
            result = handler(operand_a, operand_b)
        except CPUFault as e:
            self._fault(e)
            return False

        # advance
        if isinstance(result, Jump):
            self.reg.pc = result.address & 0xFF
        else:
            self.reg.pc = (self.reg.pc + 1 + operand_count(self.reg.ir)) & 0xFF
        return self.running

    def run(self, max_steps=None) -> int:
        """Step until halted (or `max_steps` cycles). Returns cycles executed."""
        steps = 0
        while self.running and (max_steps is None or steps < max_steps):
            self.step()
            steps += 1
        return steps

    def reset(self):
        """CPU/레지스터/메모리를 초기 상태로 되돌림"""
        self.reg = Registers()
        self.mem.clear()
        self.running = True
        self.fault = None

    def halt(self):
        self.running = False
        logger.info("halted at PC=0x%02X", self.reg.pc)

    def _fault(self, error: CPUFault):
        self.fault = error
        logger.error("%s (PC=0x%02X)", error, self.reg.pc)
        self.output(str(error))
        self.halt()

    def trace(self) -> str:
        """PC | IN P1 P2 | R0..R7 | FL"""
        pc = self.reg.pc
        line = "%02X | %02X %02X %02X |" % (
            pc, self.mem.read(pc), self.mem.read(pc + 1), self.mem.read(pc + 2))
        for i in range(GENERAL_REGS):
            line += " %02X" % (self.reg[i] & 0xFF)
        line += " | %02X" % self.reg.fl
        return line

    # ───────────────────────────── stack ──────────────────────────────
    def push_value(self, value: int):
        self.reg.sp = ALU.execute("DEC", self.reg.sp)
        self.mem.write(self.reg.sp, value)

    def pop_value(self) -> int:
        value = self.mem.read(self.reg.sp)
        self.reg.sp = ALU.execute("INC", self.reg.sp)
        return value

    # ──────────────────────── instruction handlers ───────────────────
    def HLT(self, *_):
        self.halt()
        return ADVANCE

    def NOP(self, *_):
        return ADVANCE

    def LDI(self, reg, value):
        self.reg[reg] = value
        return ADVANCE

    def LD(self, reg_a, reg_b):
        self.reg[reg_a] = self.mem.read(self.reg[reg_b])
        return ADVANCE

    def ST(self, reg_a, reg_b):
        self.mem.write(self.reg[reg_a], self.reg[reg_b])
        return ADVANCE

    def PRN(self, reg, _=0):
        self.output(str(self.reg[reg]))
        return ADVANCE

    def ADD(self, reg_a, reg_b):
        self.alu("ADD", reg_a, reg_b)
        return ADVANCE

    def SUB(self, reg_a, reg_b):
        self.alu("SUB", reg_a, reg_b)
        return ADVANCE

    def MUL(self, reg_a, reg_b):
        self.alu("MUL", reg_a, reg_b)
        return ADVANCE

    def DIV(self, reg_a, reg_b):
        if self.reg[reg_b] == 0:
            raise DivisionByZeroError("regB should not be zero")
        self.alu("DIV", reg_a, reg_b)
        return ADVANCE

    def MOD(self, reg_a, reg_b):
        if self.reg[reg_b] == 0:
            raise DivisionByZeroError("regB should not be zero")
        self.alu("MOD", reg_a, reg_b)
        return ADVANCE

    def INC(self, reg, _=0):
        self.alu("INC", reg)
        return ADVANCE

    def DEC(self, reg, _=0):
        self.alu("DEC", reg)
        return ADVANCE

    def AND(self, reg_a, reg_b):
        self.alu("AND", reg_a, reg_b)
        return ADVANCE

    def OR(self, reg_a, reg_b):
        self.alu("OR", reg_a, reg_b)
        return ADVANCE

    def XOR(self, reg_a, reg_b):
        self.alu("XOR", reg_a, reg_b)
        return ADVANCE

    def NOT(self, reg, _=0):
        self.alu("NOT", reg)
        return ADVANCE

    def CMP(self, reg_a, reg_b):
        self.alu("CMP", reg_a, reg_b)
        return ADVANCE

    def JMP(self, reg, _=0):
        return Jump(self.reg[reg])

    def _jump_if(self, condition, reg):
        return Jump(self.reg[reg]) if condition else ADVANCE

    def JEQ(self, reg, _=0):
        return self._jump_if(self.reg.fl & FL_EQ, reg)

    def JNE(self, reg, _=0):
        return self._jump_if(not self.reg.fl & FL_EQ, reg)

    def JGT(self, reg, _=0):
        return self._jump_if(self.reg.fl & FL_GT, reg)

    def JLT(self, reg, _=0):
        return self._jump_if(self.reg.fl & FL_LT, reg)

    def PUSH(self, reg, _=0):
        self.push_value(self.reg[reg])
        return ADVANCE

    def POP(self, reg, _=0):
        self.reg[reg] = self.pop_value()
        return ADVANCE

    def CALL(self, reg, _=0):
        self.push_value(self.reg.pc + 2)
        return Jump(self.reg[reg])

    def RET(self, *_):
        return Jump(self.pop_value())
