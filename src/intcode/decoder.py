"""Intcode Instruction Decoder

Splits an instruction word into opcode and addressing modes and resolves
operands against memory. Decoding is a pure function of
(memory, pc, relative_base): it only peeks memory and keeps no state between
calls. Each Instruction lists the addresses it reads so the CPU can perform
those reads, and the memory growth they imply, when it executes.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Dict, Tuple

from .memory import Memory


class DecodeError(Exception):
    """Base exception for instruction decoding errors."""

    def __init__(self, message: str, pc: int, word: int):
        super().__init__(f"{message} (pc={pc}, word={word})")
        self.pc = pc
        self.word = word


class UnknownOpcodeError(DecodeError):
    """Exception for opcodes outside the instruction set."""

    def __init__(self, opcode: int, pc: int, word: int):
        super().__init__(f"Unknown opcode {opcode}", pc, word)
        self.opcode = opcode


class InvalidAddressModeError(DecodeError):
    """Exception for bad mode digits or immediate-mode write targets."""
    pass


class NegativeAddressError(DecodeError):
    """Exception for a program counter or resolved address below zero."""
    pass


class Opcode(IntEnum):
    """Instruction selectors (low two decimal digits of a word)."""
    ADD = 1
    MULTIPLY = 2
    INPUT = 3
    OUTPUT = 4
    JUMP_IF_TRUE = 5
    JUMP_IF_FALSE = 6
    LESS_THAN = 7
    EQUALS = 8
    ADJUST_RELATIVE_BASE = 9
    HALT = 99


class AddressMode(IntEnum):
    """Per-operand addressing modes."""
    POSITION = 0
    IMMEDIATE = 1
    RELATIVE = 2


class Access(Enum):
    """How an operand is used by its instruction."""
    READ = "read"
    WRITE = "write"


R = Access.READ
W = Access.WRITE

# Operand order for every opcode; instruction length is 1 + len(layout)
OPERAND_LAYOUT: Dict[Opcode, Tuple[Access, ...]] = {
    Opcode.ADD: (R, R, W),
    Opcode.MULTIPLY: (R, R, W),
    Opcode.INPUT: (W,),
    Opcode.OUTPUT: (R,),
    Opcode.JUMP_IF_TRUE: (R, R),
    Opcode.JUMP_IF_FALSE: (R, R),
    Opcode.LESS_THAN: (R, R, W),
    Opcode.EQUALS: (R, R, W),
    Opcode.ADJUST_RELATIVE_BASE: (R,),
    Opcode.HALT: (),
}

MNEMONICS: Dict[Opcode, str] = {
    Opcode.ADD: "ADD",
    Opcode.MULTIPLY: "MUL",
    Opcode.INPUT: "IN",
    Opcode.OUTPUT: "OUT",
    Opcode.JUMP_IF_TRUE: "JNZ",
    Opcode.JUMP_IF_FALSE: "JZ",
    Opcode.LESS_THAN: "LT",
    Opcode.EQUALS: "EQ",
    Opcode.ADJUST_RELATIVE_BASE: "ARB",
    Opcode.HALT: "HALT",
}


@dataclass(frozen=True)
class Instruction:
    """Represents a decoded instruction.

    ``operands`` holds resolved values for read operands and absolute
    addresses for write operands, in declared operand order. ``reads`` lists
    every address the instruction reads: its own words followed by the
    sources of position and relative read operands.
    """
    opcode: Opcode
    operands: Tuple[int, ...]
    address: int
    raw_data: int
    modes: Tuple[AddressMode, ...] = ()
    reads: Tuple[int, ...] = ()

    @property
    def length(self) -> int:
        return 1 + len(self.operands)

    @property
    def target(self) -> int:
        """Write address of instructions that store a result."""
        return self.operands[-1]

    def __str__(self) -> str:
        parts = []
        for access, operand in zip(OPERAND_LAYOUT[self.opcode], self.operands):
            parts.append(f"[{operand}]" if access is Access.WRITE else str(operand))
        mnemonic = MNEMONICS[self.opcode]
        return f"{mnemonic} {', '.join(parts)}" if parts else mnemonic


def instruction_length(opcode: Opcode) -> int:
    """Number of words occupied by an instruction with this opcode."""
    return 1 + len(OPERAND_LAYOUT[opcode])


def split_word(word: int, pc: int) -> Tuple[Opcode, Tuple[AddressMode, ...]]:
    """Split an instruction word into its opcode and operand modes."""
    if word < 0:
        raise UnknownOpcodeError(word, pc, word)

    try:
        opcode = Opcode(word % 100)
    except ValueError:
        raise UnknownOpcodeError(word % 100, pc, word) from None

    digits = word // 100
    modes = []
    for _ in OPERAND_LAYOUT[opcode]:
        digit = digits % 10
        try:
            modes.append(AddressMode(digit))
        except ValueError:
            raise InvalidAddressModeError(
                f"Unrecognized address mode {digit}", pc, word) from None
        digits //= 10

    if digits:
        raise InvalidAddressModeError(
            f"Mode digits beyond operand count for {opcode.name}", pc, word)

    return opcode, tuple(modes)


def _resolve_address(raw: int, mode: AddressMode, relative_base: int, pc: int, word: int) -> int:
    address = raw + relative_base if mode is AddressMode.RELATIVE else raw
    if address < 0:
        raise NegativeAddressError(f"Negative address {address}", pc, word)
    return address


def decode(memory: Memory, pc: int, relative_base: int = 0) -> Tuple[Instruction, int]:
    """Decode the instruction at pc.

    Args:
        memory: Memory to fetch from (only peeked, never grown)
        pc: Address of the instruction word
        relative_base: Current relative base register

    Returns:
        Tuple of (instruction, number of words consumed)
    """
    if pc < 0:
        raise NegativeAddressError("Negative program counter", pc, 0)

    word = memory.peek(pc)
    opcode, modes = split_word(word, pc)

    operands = []
    reads = list(range(pc, pc + instruction_length(opcode)))
    for position, (access, mode) in enumerate(zip(OPERAND_LAYOUT[opcode], modes), 1):
        raw = memory.peek(pc + position)
        if access is Access.WRITE:
            if mode is AddressMode.IMMEDIATE:
                raise InvalidAddressModeError(
                    f"Immediate mode on write operand {position}", pc, word)
            operands.append(_resolve_address(raw, mode, relative_base, pc, word))
        elif mode is AddressMode.IMMEDIATE:
            operands.append(raw)
        else:
            address = _resolve_address(raw, mode, relative_base, pc, word)
            reads.append(address)
            operands.append(memory.peek(address))

    instruction = Instruction(opcode, tuple(operands), pc, word, modes, tuple(reads))
    return instruction, instruction.length
