"""
Tests for arithmetic and comparison instructions: ADD, MUL, LT, EQ.

Each instruction is exercised in position, immediate and relative mode.
"""

import unittest
from test_program_framework import BaseProgramTestCase, ProgramTestCase


class TestArithmeticInstructions(BaseProgramTestCase):
    """Test arithmetic instructions."""

    def test_add_and_multiply_position_mode(self):
        """Test ADD and MUL with position-mode operands."""
        test_cases = [
            ProgramTestCase(
                "add_in_place",
                "1,0,0,0,99",
                expected_memory={0: 2, 1: 0, 2: 0, 3: 0, 4: 99}
            ),
            ProgramTestCase(
                "multiply_into_later_cell",
                "2,3,0,3,99",
                expected_memory={3: 6}
            ),
            ProgramTestCase(
                "multiply_past_halt",
                "2,4,4,5,99,0",
                expected_memory={5: 9801}
            ),
            ProgramTestCase(
                "self_modifying_halt",
                "1,1,1,4,99,5,6,0,99",  # ADD rewrites cell 4 into a MUL
                expected_memory={0: 30, 4: 2}
            )
        ]

        self.run_test_cases(test_cases)

    def test_immediate_mode_operands(self):
        """Test immediate-mode reads mixed with position-mode reads."""
        test_cases = [
            ProgramTestCase(
                "multiply_immediate",
                "1002,4,3,4,33",
                expected_memory={4: 99}
            ),
            ProgramTestCase(
                "add_negative_immediate",
                "1101,100,-1,4,0",
                expected_memory={4: 99}
            ),
            ProgramTestCase(
                "large_product",
                "1102,34915192,34915192,7,4,7,99,0",
                expected_output=[1219070632396864]
            )
        ]

        self.run_test_cases(test_cases)

    def test_comparisons(self):
        """Test LT and EQ against input values."""
        equals_position = "3,9,8,9,10,9,4,9,99,-1,8"
        less_position = "3,9,7,9,10,9,4,9,99,-1,8"
        equals_immediate = "3,3,1108,-1,8,3,4,3,99"
        less_immediate = "3,3,1107,-1,8,3,4,3,99"

        test_cases = [
            ProgramTestCase("equals_position_true", equals_position, [8], [1]),
            ProgramTestCase("equals_position_false", equals_position, [7], [0]),
            ProgramTestCase("less_position_true", less_position, [5], [1]),
            ProgramTestCase("less_position_false", less_position, [8], [0]),
            ProgramTestCase("equals_immediate_true", equals_immediate, [8], [1]),
            ProgramTestCase("equals_immediate_false", equals_immediate, [-8], [0]),
            ProgramTestCase("less_immediate_true", less_immediate, [-100], [1]),
            ProgramTestCase("less_immediate_false", less_immediate, [9], [0]),
        ]

        self.run_test_cases(test_cases)

    def test_relative_mode(self):
        """Test arithmetic with relative-mode reads and writes."""
        test_cases = [
            ProgramTestCase(
                "relative_write_grows_memory",
                "109,10,21101,3,4,0,204,0,99",  # rb=10, [rb+0] = 3 + 4
                expected_output=[7],
                expected_memory={10: 7}
            ),
            ProgramTestCase(
                "relative_read",
                "109,2,2201,0,1,20,4,20,99",  # rb=2, [20] = [2] + [3]
                expected_output=[2201]
            )
        ]

        self.run_test_cases(test_cases)


if __name__ == '__main__':
    unittest.main()
