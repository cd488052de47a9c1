"""
Chip-8 disassembler.

Turns opcode/argument byte pairs back into the classic Chip-8 assembler
mnemonics. Used for instruction tracing and program listings.
"""

from typing import Iterator, Tuple


def disassemble(opcode: int, argument: int) -> str:
    """Mnemonic for one instruction, `.word` if it is not a valid one"""
    x = opcode & 0x0F
    y = argument >> 4
    n = argument & 0x0F
    nnn = (x << 8) | argument
    op = opcode >> 4

    if op == 0x0:
        if opcode == 0x00:
            if argument == 0xE0:
                return "cls"
            if argument == 0xEE:
                return "rts"
            if argument == 0xFE:
                return "low"
            if argument == 0xFF:
                return "high"
            if argument & 0xF0 == 0xC0:
                return f"scdown {n}"
    elif op == 0x1:
        return f"jmp {nnn:03x}"
    elif op == 0x2:
        return f"jsr {nnn:03x}"
    elif op == 0x3:
        return f"skeq v{x:x},{argument:02x}"
    elif op == 0x4:
        return f"skne v{x:x},{argument:02x}"
    elif op == 0x5:
        if n == 0:
            return f"skeq v{x:x},v{y:x}"
    elif op == 0x6:
        return f"mov v{x:x},{argument:02x}"
    elif op == 0x7:
        return f"add v{x:x},{argument:02x}"
    elif op == 0x8:
        name = _ALU_NAMES.get(n)
        if name in ("shr", "shl"):
            return f"{name} v{x:x}"
        if name:
            return f"{name} v{x:x},v{y:x}"
    elif op == 0x9:
        if n == 0:
            return f"skne v{x:x},v{y:x}"
    elif op == 0xA:
        return f"mvi {nnn:03x}"
    elif op == 0xB:
        return f"jmi {nnn:03x}"
    elif op == 0xC:
        return f"rand v{x:x},{argument:02x}"
    elif op == 0xD:
        return f"sprite v{x:x},v{y:x},{n:x}"
    elif op == 0xE:
        if argument == 0x9E:
            return f"skpr v{x:x}"
        if argument == 0xA1:
            return f"skup v{x:x}"
    elif op == 0xF:
        name = _MISC_NAMES.get(argument)
        if name in ("str", "ldr"):
            return f"{name} v0-v{x:x}"
        if name:
            return f"{name} v{x:x}"

    return f".word {opcode:02x}{argument:02x}"


_ALU_NAMES = {
    0x0: "mov",
    0x1: "or",
    0x2: "and",
    0x3: "xor",
    0x4: "add",
    0x5: "sub",
    0x6: "shr",
    0x7: "rsb",
    0xE: "shl",
}

_MISC_NAMES = {
    0x07: "gdelay",
    0x0A: "key",
    0x15: "sdelay",
    0x18: "ssound",
    0x1E: "adi",
    0x29: "font",
    0x33: "bcd",
    0x55: "str",
    0x65: "ldr",
}


def disassemble_program(data: bytes, origin: int = 0x200) -> Iterator[Tuple[int, int, str]]:
    """Yield (address, word, mnemonic) for each byte pair of a program image"""
    for offset in range(0, len(data) - 1, 2):
        opcode, argument = data[offset], data[offset + 1]
        yield origin + offset, (opcode << 8) | argument, disassemble(opcode, argument)
    if len(data) % 2:
        # Trailing odd byte
        yield origin + len(data) - 1, data[-1], f".byte {data[-1]:02x}"
