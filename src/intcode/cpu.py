"""Intcode Virtual Machine CPU

Holds the program counter, relative base and halted flag, owns memory and the
I/O queues, and dispatches decoded instructions. The run-mode entry points
return control to the caller at instruction boundaries so execution can be
interleaved with the caller's own I/O.
"""

import logging
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from .decoder import DecodeError, Instruction, Opcode, decode
from .memory import Memory

logger = logging.getLogger(__name__)


class CPUException(Exception):
    """Base exception for CPU-related errors."""
    pass


class MachineHaltedError(CPUException):
    """Exception for asking a halted machine to make further progress."""
    pass


class InputRequiredError(CPUException):
    """Exception for an Input instruction reached with no input queued.

    Only raised where the caller promised input would be preloaded
    (``run_to_halt``, ``step`` and direct ``dispatch``). The cooperative run
    modes report ``RunStatus.AWAITING_INPUT`` instead.
    """
    pass


class CPUState(Enum):
    """CPU execution states."""
    RUNNING = "running"
    AWAITING_INPUT = "awaiting_input"
    HALTED = "halted"
    ERROR = "error"


class RunStatus(Enum):
    """Why a run-mode entry point returned control."""
    HALTED = "halted"
    ALREADY_HALTED = "already_halted"
    AWAITING_INPUT = "awaiting_input"
    OUTPUT = "output"
    STEP_LIMIT = "step_limit"
    BREAKPOINT = "breakpoint"


@dataclass(frozen=True)
class RunResult:
    """Outcome of one run-mode call.

    ``value`` is only set for ``RunStatus.OUTPUT`` and is the single value
    produced by the Output instruction that ended the call.
    """
    status: RunStatus
    value: Optional[int] = None
    steps: int = 0

    @property
    def halted(self) -> bool:
        return self.status in (RunStatus.HALTED, RunStatus.ALREADY_HALTED)

    @property
    def awaiting_input(self) -> bool:
        return self.status is RunStatus.AWAITING_INPUT


class CPU:
    """Intcode Virtual Machine CPU.

    Input convention: ``set_input`` replaces whatever input is still pending,
    ``add_input`` appends to it. Output is an append-only log; use
    ``read_new_output`` to collect only what was produced since the previous
    call.
    """

    def __init__(self, program: Iterable[int], inputs: Optional[Iterable[int]] = None,
                 trace: bool = False):
        """Initialize CPU with a program.

        Args:
            program: Initial memory cells (copied)
            inputs: Optional values to preload into the input queue
            trace: Log every dispatched instruction at DEBUG level
        """
        self.memory = Memory(program)
        self.pc = 0
        self.relative_base = 0

        # CPU state
        self.state = CPUState.RUNNING
        self.halt_reason: Optional[str] = None

        # I/O
        self.input_queue = deque(inputs or ())
        self.output: List[int] = []
        self.output_cursor = 0

        self.trace = trace
        self.instruction_count = 0

        # Instruction set
        self.instruction_handlers = {
            Opcode.ADD: self._exec_add,
            Opcode.MULTIPLY: self._exec_multiply,
            Opcode.INPUT: self._exec_input,
            Opcode.OUTPUT: self._exec_output,
            Opcode.JUMP_IF_TRUE: self._exec_jump_if_true,
            Opcode.JUMP_IF_FALSE: self._exec_jump_if_false,
            Opcode.LESS_THAN: self._exec_less_than,
            Opcode.EQUALS: self._exec_equals,
            Opcode.ADJUST_RELATIVE_BASE: self._exec_adjust_relative_base,
            Opcode.HALT: self._exec_halt,
        }

    @property
    def halted(self) -> bool:
        return self.state is CPUState.HALTED

    # Input / output

    def set_input(self, values: Iterable[int]) -> None:
        """Replace any pending input with values."""
        self.input_queue = deque(values)

    def add_input(self, *values: int) -> None:
        """Append values to the pending input."""
        self.input_queue.extend(values)

    def read_new_output(self) -> List[int]:
        """Return output produced since the last call, leaving the log intact."""
        fresh = self.output[self.output_cursor:]
        self.output_cursor = len(self.output)
        return fresh

    # Execution

    def fetch(self) -> Instruction:
        """Decode the instruction at pc, moving to ERROR on a bad word."""
        try:
            instruction, _ = decode(self.memory, self.pc, self.relative_base)
        except DecodeError as e:
            self.state = CPUState.ERROR
            self.halt_reason = str(e)
            logger.error("Decode failed: %s", e)
            raise
        return instruction

    def dispatch(self, instruction: Instruction) -> int:
        """Apply one instruction and return the next program counter."""
        if self.trace:
            logger.debug("%d: %s (rb=%d)", instruction.address, instruction, self.relative_base)

        # Executed reads grow memory past the end; decoding only peeked
        for address in instruction.reads:
            self.memory.read(address)

        handler = self.instruction_handlers[instruction.opcode]
        jump_target = handler(instruction)

        if jump_target is not None:
            return jump_target
        return instruction.address + instruction.length

    def step(self) -> Instruction:
        """Execute exactly one instruction and return it.

        Raises:
            MachineHaltedError: If the machine has already halted
            InputRequiredError: If the instruction is Input and no input is queued
        """
        self._check_runnable()
        if self.halted:
            raise MachineHaltedError("Machine already halted; no further instructions can run")

        instruction = self.fetch()
        if instruction.opcode is Opcode.INPUT and not self.input_queue:
            self.state = CPUState.AWAITING_INPUT
            raise InputRequiredError(f"Input required at pc={self.pc}")

        self.state = CPUState.RUNNING
        self.pc = self.dispatch(instruction)
        self.instruction_count += 1
        return instruction

    def _check_runnable(self) -> None:
        if self.state is CPUState.ERROR:
            raise CPUException(f"CPU stopped after error: {self.halt_reason}")

    def _run(self, stop_on_output: bool, input_required: bool,
             max_steps: Optional[int]) -> RunResult:
        """Shared decode -> check stop -> dispatch loop."""
        self._check_runnable()
        if self.halted:
            return RunResult(RunStatus.ALREADY_HALTED)

        self.state = CPUState.RUNNING
        steps = 0
        while True:
            if max_steps is not None and steps >= max_steps:
                return RunResult(RunStatus.STEP_LIMIT, steps=steps)

            instruction = self.fetch()
            if instruction.opcode is Opcode.INPUT and not self.input_queue:
                self.state = CPUState.AWAITING_INPUT
                if input_required:
                    raise InputRequiredError(
                        f"Input required at pc={self.pc} but no input was provided")
                return RunResult(RunStatus.AWAITING_INPUT, steps=steps)

            self.pc = self.dispatch(instruction)
            self.instruction_count += 1
            steps += 1

            if self.halted:
                return RunResult(RunStatus.HALTED, steps=steps)
            if stop_on_output and instruction.opcode is Opcode.OUTPUT:
                return RunResult(RunStatus.OUTPUT, value=instruction.operands[0], steps=steps)

    def run_to_halt(self, max_steps: Optional[int] = None) -> RunResult:
        """Run until the program halts.

        All input must be queued beforehand; reaching an Input instruction
        with an empty queue raises InputRequiredError. The pc is left on that
        instruction, so queuing input and calling again resumes cleanly.
        """
        return self._run(stop_on_output=False, input_required=True, max_steps=max_steps)

    def run_to_next_input_needed(self, max_steps: Optional[int] = None) -> RunResult:
        """Run until halted or until the next instruction needs unqueued input."""
        return self._run(stop_on_output=False, input_required=False, max_steps=max_steps)

    def run_to_next_output(self, max_steps: Optional[int] = None) -> RunResult:
        """Run until one value is output, the program halts, or input runs dry."""
        return self._run(stop_on_output=True, input_required=False, max_steps=max_steps)

    def run_to_next_output_n(self, n: int, max_steps: Optional[int] = None) -> List[int]:
        """Collect up to n output values.

        The list is shorter than n if the machine halts or needs input first.
        """
        values = []
        for _ in range(n):
            result = self.run_to_next_output(max_steps)
            if result.status is not RunStatus.OUTPUT:
                break
            values.append(result.value)
        return values

    # Instruction implementations

    def _exec_add(self, instr: Instruction) -> None:
        """ADD a, b, [c] - store a + b at c"""
        a, b, target = instr.operands
        self.memory.write(target, a + b)

    def _exec_multiply(self, instr: Instruction) -> None:
        """MUL a, b, [c] - store a * b at c"""
        a, b, target = instr.operands
        self.memory.write(target, a * b)

    def _exec_input(self, instr: Instruction) -> None:
        """IN [a] - pop the front of the input queue into a"""
        if not self.input_queue:
            raise InputRequiredError(f"Input required at pc={instr.address}")
        self.memory.write(instr.target, self.input_queue.popleft())

    def _exec_output(self, instr: Instruction) -> None:
        """OUT a - append a to the output log"""
        self.output.append(instr.operands[0])

    def _exec_jump_if_true(self, instr: Instruction) -> Optional[int]:
        """JNZ a, b - jump to b if a != 0"""
        condition, target = instr.operands
        return target if condition != 0 else None

    def _exec_jump_if_false(self, instr: Instruction) -> Optional[int]:
        """JZ a, b - jump to b if a == 0"""
        condition, target = instr.operands
        return target if condition == 0 else None

    def _exec_less_than(self, instr: Instruction) -> None:
        """LT a, b, [c] - store 1 at c if a < b, else 0"""
        a, b, target = instr.operands
        self.memory.write(target, 1 if a < b else 0)

    def _exec_equals(self, instr: Instruction) -> None:
        """EQ a, b, [c] - store 1 at c if a == b, else 0"""
        a, b, target = instr.operands
        self.memory.write(target, 1 if a == b else 0)

    def _exec_adjust_relative_base(self, instr: Instruction) -> None:
        """ARB a - add a to the relative base"""
        self.relative_base += instr.operands[0]

    def _exec_halt(self, instr: Instruction) -> None:
        """HALT - Stop program execution"""
        self.state = CPUState.HALTED
        self.halt_reason = "HALT instruction executed"

    # Cloning

    def clone(self) -> 'CPU':
        """Return an independent copy of this machine's full state."""
        other = CPU((), trace=self.trace)
        other.memory = self.memory.copy()
        other.pc = self.pc
        other.relative_base = self.relative_base
        other.state = self.state
        other.halt_reason = self.halt_reason
        other.input_queue = deque(self.input_queue)
        other.output = list(self.output)
        other.output_cursor = self.output_cursor
        other.instruction_count = self.instruction_count
        return other

    def __copy__(self) -> 'CPU':
        return self.clone()

    def __deepcopy__(self, memo: Dict[int, Any]) -> 'CPU':
        return self.clone()

    # Diagnostics

    def memory_dump(self, start: int = 0, count: Optional[int] = None) -> Dict[int, int]:
        """Address-indexed memory listing; never mutates state."""
        return self.memory.dump(start, count)

    def format_memory_dump(self, words_per_line: int = 10) -> str:
        return self.memory.format_dump(words_per_line)

    def get_state(self) -> Dict[str, Any]:
        """Get CPU state for debugging."""
        return {
            'pc': self.pc,
            'relative_base': self.relative_base,
            'state': self.state.value,
            'halt_reason': self.halt_reason,
            'instruction_count': self.instruction_count,
            'pending_input': list(self.input_queue),
            'output': list(self.output),
        }
