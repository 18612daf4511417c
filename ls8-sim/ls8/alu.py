import operator

from .registers import FL_EQ, FL_GT, FL_LT


class ALU:
    # (function, wraps at 8 bits)
    OPS = {
        "ADD": (operator.add, True),
        "SUB": (operator.sub, True),
        "MUL": (operator.mul, True),
        "DIV": (operator.floordiv, False),   # integer quotient
        "MOD": (operator.mod, False),
        "INC": (lambda a, _: a + 1, True),
        "DEC": (lambda a, _: a - 1, True),
        "AND": (operator.and_, False),
        "OR" : (operator.or_, False),
        "XOR": (operator.xor, False),
        "NOT": (lambda a, _: ~a, False),
    }

    @classmethod
    def execute(cls, op: str, a: int, b: int = 0, mask_not: bool = False) -> int:
        try:
            func, wraps = cls.OPS[op]
        except KeyError as e:
            raise ValueError(f"Unsupported ALU op {op}") from e
        result = func(a, b)
        if wraps or (op == "NOT" and mask_not):
            result &= 0xFF
        return result

    @staticmethod
    def compare(a: int, b: int) -> int:
        """Unsigned compare of `a` and `b`, returned as a FL byte"""
        # NOT can leave a negative value in a register; compare its byte
        a, b = a & 0xFF, b & 0xFF
        if a == b:
            return FL_EQ
        if a > b:
            return FL_GT
        return FL_LT
