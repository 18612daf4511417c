"""LS-8 instruction encodings.

Opcode layout: ``AABCDDDD``. The top two bits ``AA`` hold the number of
operand bytes that follow the opcode; the remaining bits identify the
instruction. Only the operand count is decoded structurally, everything
else is a table lookup.
"""

NOP  = 0b00000000
HLT  = 0b00000001
RET  = 0b00001001

PRN  = 0b01000011
CALL = 0b01001000
POP  = 0b01001100
PUSH = 0b01001101

JMP  = 0b01010000
JEQ  = 0b01010001
JNE  = 0b01010010
JLT  = 0b01010011
JGT  = 0b01010100

NOT  = 0b01110000
INC  = 0b01111000
DEC  = 0b01111001

LD   = 0b10011000
LDI  = 0b10011001
ST   = 0b10011010

CMP  = 0b10100000
ADD  = 0b10101000
SUB  = 0b10101001
MUL  = 0b10101010
DIV  = 0b10101011
MOD  = 0b10101100

OR   = 0b10110001
XOR  = 0b10110010
AND  = 0b10110011

MNEMONICS = {
    NOP:  "NOP",
    HLT:  "HLT",
    RET:  "RET",

    PRN:  "PRN",
    CALL: "CALL",
    POP:  "POP",
    PUSH: "PUSH",

    JMP:  "JMP",
    JEQ:  "JEQ",
    JNE:  "JNE",
    JLT:  "JLT",
    JGT:  "JGT",

    NOT:  "NOT",
    INC:  "INC",
    DEC:  "DEC",

    LD:   "LD",
    LDI:  "LDI",
    ST:   "ST",

    CMP:  "CMP",
    ADD:  "ADD",
    SUB:  "SUB",
    MUL:  "MUL",
    DIV:  "DIV",
    MOD:  "MOD",

    OR:   "OR",
    XOR:  "XOR",
    AND:  "AND",
}
OPCODES = {name: value for value, name in MNEMONICS.items()}

# LDI takes an immediate as its second operand, every other operand is a register
IMMEDIATE_OPERANDS = {LDI: (False, True)}


def operand_count(opcode: int) -> int:
    return (opcode >> 6) & 0b11


def disassemble(opcode: int, a: int = 0, b: int = 0) -> str:
    """Render one instruction, e.g. ``LDI R0,8``. Unknown opcodes come back as ``??``."""
    name = MNEMONICS.get(opcode)
    if name is None:
        return f"?? 0x{opcode:02X}"
    count = operand_count(opcode)
    immediates = IMMEDIATE_OPERANDS.get(opcode, (False, False))
    args = []
    for value, immediate in list(zip((a, b), immediates))[:count]:
        args.append(str(value) if immediate else f"R{value}")
    return f"{name} {','.join(args)}" if args else name
