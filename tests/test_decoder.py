"""
Tests for instruction decoding: opcode and mode extraction, operand
resolution, and decode failures.
"""

import unittest

from test_program_framework import BaseProgramTestCase

from intcode.decoder import (
    AddressMode, Instruction, InvalidAddressModeError, NegativeAddressError,
    Opcode, UnknownOpcodeError, decode, instruction_length, split_word,
)
from intcode.memory import Memory


class TestSplitWord(BaseProgramTestCase):
    """Test opcode and mode digit extraction."""

    def test_modes_read_right_to_left(self):
        opcode, modes = split_word(1002, 0)

        self.assertEqual(opcode, Opcode.MULTIPLY)
        self.assertEqual(modes, (AddressMode.POSITION, AddressMode.IMMEDIATE, AddressMode.POSITION))

    def test_missing_mode_digits_default_to_position(self):
        opcode, modes = split_word(7, 0)

        self.assertEqual(opcode, Opcode.LESS_THAN)
        self.assertEqual(modes, (AddressMode.POSITION,) * 3)

    def test_relative_mode_digit(self):
        _, modes = split_word(204, 0)

        self.assertEqual(modes, (AddressMode.RELATIVE,))

    def test_halt_has_no_modes(self):
        self.assertEqual(split_word(99, 0), (Opcode.HALT, ()))

    def test_instruction_lengths(self):
        expected = {
            Opcode.ADD: 4, Opcode.MULTIPLY: 4, Opcode.INPUT: 2, Opcode.OUTPUT: 2,
            Opcode.JUMP_IF_TRUE: 3, Opcode.JUMP_IF_FALSE: 3, Opcode.LESS_THAN: 4,
            Opcode.EQUALS: 4, Opcode.ADJUST_RELATIVE_BASE: 2, Opcode.HALT: 1,
        }
        for opcode, length in expected.items():
            with self.subTest(opcode.name):
                self.assertEqual(instruction_length(opcode), length)


class TestDecode(BaseProgramTestCase):
    """Test operand resolution."""

    def test_position_and_immediate_operands(self):
        instruction, consumed = decode(Memory([1002, 4, 3, 4, 33]), 0)

        self.assertEqual(instruction.opcode, Opcode.MULTIPLY)
        self.assertEqual(instruction.operands, (33, 3, 4))
        self.assertEqual(instruction.raw_data, 1002)
        self.assertEqual(instruction.address, 0)
        self.assertEqual(consumed, 4)

    def test_relative_operands(self):
        memory = Memory([2201, 1, 2, 3, 10, 20, 30])
        instruction, _ = decode(memory, 0, relative_base=3)

        self.assertEqual(instruction.operands, (10, 20, 3))

    def test_relative_write_target(self):
        instruction, _ = decode(Memory([203, -2]), 0, relative_base=7)

        self.assertEqual(instruction.opcode, Opcode.INPUT)
        self.assertEqual(instruction.target, 5)

    def test_decode_at_nonzero_pc(self):
        instruction, consumed = decode(Memory([99, 104, -6, 99]), 1)

        self.assertEqual(instruction.opcode, Opcode.OUTPUT)
        self.assertEqual(instruction.operands, (-6,))
        self.assertEqual(consumed, 2)

    def test_reads_list_operand_sources(self):
        """Test that decoding records read addresses and leaves memory alone."""
        memory = Memory([1101, 10, 11, 12])
        instruction, _ = decode(memory, 0)
        self.assertEqual(instruction.reads, (0, 1, 2, 3))

        memory = Memory([2201, 10, 11, 12])
        instruction, _ = decode(memory, 0, relative_base=5)

        self.assertEqual(instruction.operands, (0, 0, 12))
        self.assertEqual(instruction.reads, (0, 1, 2, 3, 15, 16))
        self.assertEqual(len(memory), 4)
        self.assertEqual(memory.read_count, 0)

    def test_instruction_str(self):
        instruction, _ = decode(Memory([1002, 4, 3, 4, 33]), 0)

        self.assertEqual(str(instruction), "MUL 33, 3, [4]")
        self.assertEqual(str(Instruction(Opcode.HALT, (), 0, 99)), "HALT")


class TestDecodeErrors(BaseProgramTestCase):
    """Test decode failures carry the pc and raw word."""

    def test_unknown_opcode(self):
        with self.assertRaises(UnknownOpcodeError) as ctx:
            decode(Memory([99, 42]), 1)

        self.assertEqual(ctx.exception.opcode, 42)
        self.assertEqual(ctx.exception.pc, 1)
        self.assertEqual(ctx.exception.word, 42)

    def test_negative_word_is_unknown(self):
        with self.assertRaises(UnknownOpcodeError):
            decode(Memory([-1]), 0)

    def test_immediate_write_target_rejected(self):
        with self.assertRaises(InvalidAddressModeError) as ctx:
            decode(Memory([11101, 1, 1, 0]), 0)

        self.assertEqual(ctx.exception.word, 11101)
        self.assertEqual(ctx.exception.pc, 0)

    def test_immediate_input_target_rejected(self):
        with self.assertRaises(InvalidAddressModeError):
            decode(Memory([103, 0]), 0)

    def test_unrecognized_mode_digit(self):
        with self.assertRaises(InvalidAddressModeError):
            decode(Memory([301, 0, 0, 0]), 0)

    def test_extra_mode_digits(self):
        with self.assertRaises(InvalidAddressModeError):
            decode(Memory([10099]), 0)

    def test_negative_position_operand(self):
        with self.assertRaises(NegativeAddressError):
            decode(Memory([4, -1, 99]), 0)

    def test_negative_program_counter(self):
        with self.assertRaises(NegativeAddressError):
            decode(Memory([99]), -1)


if __name__ == '__main__':
    unittest.main()
