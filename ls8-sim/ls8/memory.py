MEM_SIZE = 256  # Number of bytes in memory (8-bit address space)

class Memory:
    def __init__(self):
        self.mem = [0]*MEM_SIZE

    def read(self, addr: int) -> int:
        """Read a byte from memory"""
        return self.mem[addr & 0xFF]

    def write(self, addr: int, value: int):
        """Write a byte to memory"""
        self.mem[addr & 0xFF] = value & 0xFF  # Mask to 8 bits

    def load(self, data, start: int = 0):
        """Copy a sequence of bytes into memory starting at `start`"""
        for offset, value in enumerate(data):
            self.write(start + offset, value)

    def clear(self):
        self.mem = [0]*MEM_SIZE

    def dump(self, start: int = 0, length: int = MEM_SIZE):
        """Return `length` bytes starting at `start` (wraps at the top of memory)"""
        return [self.read(start + i) for i in range(length)]
