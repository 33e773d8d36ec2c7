"""Intcode Virtual Machine

Main virtual machine that coordinates program loading, the CPU, breakpoints
and the command-line runner.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple, Union

from .cpu import CPU, InputRequiredError, RunResult, RunStatus
from .decoder import DecodeError, Instruction, decode
from .program_loader import ProgramLoaderError, load_program_file, parse_program

logger = logging.getLogger(__name__)


class VMException(Exception):
    """Base exception for virtual machine errors."""
    pass


class VirtualMachine:
    """Intcode Virtual Machine - owns a CPU and the program it was built from."""

    def __init__(self, program: Optional[Sequence[int]] = None,
                 max_steps: Optional[int] = None, trace: bool = False):
        """Initialize virtual machine.

        Args:
            program: Initial program cells (may be loaded later)
            max_steps: Default step bound for run calls (None for unlimited)
            trace: Log every dispatched instruction
        """
        self.program: List[int] = list(program or [])
        self.max_steps = max_steps
        self.trace = trace
        self.cpu = CPU(self.program, trace=trace)

        # Debugging
        self.breakpoints: Set[int] = set()

    def load_program(self, filename: Union[str, Path]) -> None:
        """Load a program from file and reset the CPU."""
        try:
            self.program = load_program_file(filename)
        except (OSError, ProgramLoaderError) as e:
            raise VMException(f"Failed to load program '{filename}': {e}") from e
        self.reset()

    def load_program_string(self, text: str) -> None:
        """Load a program from text and reset the CPU."""
        try:
            self.program = parse_program(text)
        except ProgramLoaderError as e:
            raise VMException(f"Failed to load program: {e}") from e
        self.reset()

    def reset(self) -> None:
        """Reset the CPU to the freshly loaded program."""
        self.cpu = CPU(self.program, trace=self.trace)

    def set_input(self, values: Sequence[int]) -> None:
        self.cpu.set_input(values)

    def add_input(self, *values: int) -> None:
        self.cpu.add_input(*values)

    @property
    def output(self) -> List[int]:
        return self.cpu.output

    def step(self) -> Instruction:
        """Execute one instruction."""
        return self.cpu.step()

    def run(self, max_steps: Optional[int] = None) -> RunResult:
        """Run until halted, input is needed, or a breakpoint is reached.

        A breakpoint stops execution before the instruction at its address is
        dispatched. The instruction at the current pc always runs, so calling
        ``run`` again steps past the breakpoint that stopped it.
        """
        limit = max_steps if max_steps is not None else self.max_steps
        if not self.breakpoints:
            return self.cpu.run_to_next_input_needed(limit)

        steps = 0
        while True:
            if limit is not None and steps >= limit:
                return RunResult(RunStatus.STEP_LIMIT, steps=steps)
            if steps and self.cpu.pc in self.breakpoints:
                logger.info("Breakpoint hit at %d", self.cpu.pc)
                return RunResult(RunStatus.BREAKPOINT, steps=steps)
            result = self.cpu.run_to_next_input_needed(max_steps=1)
            steps += result.steps
            if result.status is not RunStatus.STEP_LIMIT:
                return RunResult(result.status, result.value, steps)

    def peek_instruction(self, pc: Optional[int] = None) -> Optional[Instruction]:
        """Decode an instruction without executing it, or None if it is invalid."""
        address = self.cpu.pc if pc is None else pc
        try:
            instruction, _ = decode(self.cpu.memory, address, self.cpu.relative_base)
        except DecodeError:
            return None
        return instruction

    def set_breakpoint(self, address: int) -> None:
        """Set a breakpoint at the given address."""
        self.breakpoints.add(address)

    def clear_breakpoint(self, address: int) -> None:
        """Clear a breakpoint at the given address."""
        self.breakpoints.discard(address)

    def clear_all_breakpoints(self) -> None:
        """Clear all breakpoints."""
        self.breakpoints.clear()

    def read_memory(self, address: int) -> int:
        """Read memory value without growing memory."""
        return self.cpu.memory.peek(address)

    def write_memory(self, address: int, value: int) -> None:
        """Write memory value."""
        self.cpu.memory.write(address, value)

    def get_memory_dump(self, start: int = 0, count: int = 16) -> Dict[int, int]:
        """Get memory dump for debugging."""
        return self.cpu.memory_dump(start, count)

    def get_state(self) -> Dict[str, Any]:
        """Get complete VM state for debugging."""
        return {
            'vm': {
                'program_size': len(self.program),
                'max_steps': self.max_steps,
                'breakpoints': sorted(self.breakpoints),
            },
            'cpu': self.cpu.get_state(),
            'memory': self.cpu.memory.get_memory_map(),
        }


def create_vm(program: Optional[Sequence[int]] = None,
              config: Optional[Dict[str, Any]] = None) -> VirtualMachine:
    """Create a virtual machine with optional configuration.

    Args:
        program: Initial program cells
        config: Optional configuration dictionary ('max_steps', 'trace')

    Returns:
        Configured VirtualMachine instance
    """
    if config is None:
        config = {}

    return VirtualMachine(
        program,
        max_steps=config.get('max_steps'),
        trace=config.get('trace', False),
    )


def execute_program(program: Sequence[int], inputs: Sequence[int] = ()) -> Tuple[List[int], List[int]]:
    """Run a fresh CPU to halt with preloaded input.

    Returns:
        Tuple of (final memory, output)
    """
    cpu = CPU(program, inputs)
    cpu.run_to_halt()
    return cpu.memory.to_list(), list(cpu.output)


def _prompt_for_input() -> int:
    while True:
        text = input("Input: ").strip()
        try:
            return int(text)
        except ValueError:
            print(f"Not an integer: {text!r}", file=sys.stderr)


def run_interactive(vm: VirtualMachine) -> RunResult:
    """Run to halt, prompting on stdin whenever the program needs input."""
    while True:
        result = vm.cpu.run_to_next_input_needed(vm.max_steps)
        for value in vm.cpu.read_new_output():
            print(value)
        if result.status is not RunStatus.AWAITING_INPUT:
            return result
        vm.add_input(_prompt_for_input())


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for VM when run as script."""
    parser = argparse.ArgumentParser(description='Intcode Virtual Machine')
    parser.add_argument('program', type=Path, help='Program file (comma-separated integers)')
    parser.add_argument('--input', '-i', type=int, nargs='*', default=[],
                        help='Input values to preload')
    parser.add_argument('--mode', choices=['halt', 'interactive'], default='halt',
                        help='Run to halt with preloaded input, or prompt for input')
    parser.add_argument('--max-steps', type=int, default=None,
                        help='Stop after this many instructions')
    parser.add_argument('--dump', action='store_true', help='Print a memory dump when done')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging and tracing')

    args = parser.parse_args(argv)

    # Enable verbose logging if requested
    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s %(name)s: %(message)s')

    try:
        vm = create_vm(config={'max_steps': args.max_steps, 'trace': args.debug})
        vm.load_program(args.program)
        vm.set_input(args.input)

        if args.mode == 'interactive':
            result = run_interactive(vm)
        else:
            result = vm.cpu.run_to_halt(vm.max_steps)
            for value in vm.cpu.read_new_output():
                print(value)

        if result.status is RunStatus.STEP_LIMIT:
            print(f"Stopped after {result.steps} steps (pc={vm.cpu.pc})", file=sys.stderr)

        if args.dump:
            print(vm.cpu.format_memory_dump())

    except InputRequiredError as e:
        print(f"Error: {e} (supply values with --input or use --mode interactive)",
              file=sys.stderr)
        return 1
    except (VMException, DecodeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
