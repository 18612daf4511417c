from dataclasses import dataclass, field
from typing import List

GENERAL_REGS = 8          # R0–R7
SPECIAL_REGS = ["PC", "IR", "FL"]

# R5-R7 are reserved
IM = 5                    # interrupt mask
IS = 6                    # interrupt status
SP = 7                    # stack pointer
SP_START = 0xF4

# FL bits, set only by CMP
FL_EQ = 0b001
FL_GT = 0b010
FL_LT = 0b100


def _reset_gpr() -> List[int]:
    gpr = [0]*GENERAL_REGS
    gpr[IM] = 0
    gpr[IS] = 0
    gpr[SP] = SP_START
    return gpr


@dataclass
class Registers:
    gpr: List[int] = field(default_factory=_reset_gpr)
    pc: int = 0
    ir: int = 0
    fl: int = 0

    def __getitem__(self, idx: int) -> int:
        return self.gpr[idx]

    def __setitem__(self, idx: int, value: int) -> None:
        # No masking here: wraparound belongs to the ALU
        self.gpr[idx] = value

    @property
    def sp(self) -> int:
        return self.gpr[SP]

    @sp.setter
    def sp(self, value: int) -> None:
        self.gpr[SP] = value
