"""Intcode Interactive Debugger

Provides a command-line interface for stepping through Intcode programs.
"""

import argparse
import cmd
import sys
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .cpu import CPUException, RunStatus
from .decoder import DecodeError
from .memory import MemoryException
from .virtual_machine import VMException, VirtualMachine, create_vm


class IntcodeDebugger(cmd.Cmd):
    """Interactive debugger for Intcode programs."""

    intro = """Intcode Interactive Debugger
Type 'help' or '?' for commands.
"""
    prompt = "(intcode) "

    def __init__(self, console: Optional[Console] = None, **kwargs):
        super().__init__(**kwargs)
        self.vm: Optional[VirtualMachine] = None
        self.console = console or Console()
        self.last_dump_address = 0
        self.last_dump_count = 20

    def _require_vm(self) -> bool:
        if not self.vm:
            self.console.print("[red]No program loaded[/red]")
            return False
        return True

    # File operations

    def do_load(self, arg: str) -> None:
        """Load a program file: load <filename>"""
        if not arg:
            self.console.print("[red]Error: Please specify a filename[/red]")
            return

        try:
            vm = create_vm()
            vm.load_program(arg.strip())
        except VMException as e:
            self.console.print(f"[red]Error loading program: {e}[/red]")
            return

        self.vm = vm
        self.console.print(f"[green]Program loaded: {arg.strip()} ({len(vm.program)} words)[/green]")
        self._show_status()

    def do_reset(self, arg: str) -> None:
        """Reset the machine to the loaded program: reset"""
        if not self._require_vm():
            return

        self.vm.reset()
        self.console.print("[green]Virtual machine reset[/green]")
        self._show_status()

    # Execution control

    def do_run(self, arg: str) -> None:
        """Run until halt, input needed, or breakpoint: run [max_steps]"""
        if not self._require_vm():
            return

        max_steps = None
        if arg:
            try:
                max_steps = int(arg)
            except ValueError:
                self.console.print("[red]Invalid step count[/red]")
                return

        try:
            result = self.vm.run(max_steps)
        except (CPUException, DecodeError) as e:
            self.console.print(f"[red]Execution error: {e}[/red]")
            return

        messages = {
            RunStatus.HALTED: "[green]Program halted[/green]",
            RunStatus.ALREADY_HALTED: "[yellow]Program already halted[/yellow]",
            RunStatus.AWAITING_INPUT: "[yellow]Waiting for input (use 'input <values>')[/yellow]",
            RunStatus.STEP_LIMIT: f"[yellow]Stopped after {result.steps} steps[/yellow]",
            RunStatus.BREAKPOINT: f"[yellow]Breakpoint at {self.vm.cpu.pc}[/yellow]",
        }
        self.console.print(messages.get(result.status, result.status.value))
        self._show_new_output()
        self._show_status()

    def do_step(self, arg: str) -> None:
        """Execute instruction(s): step [count]"""
        if not self._require_vm():
            return

        count = 1
        if arg:
            try:
                count = int(arg)
            except ValueError:
                self.console.print("[red]Invalid step count[/red]")
                return

        for _ in range(count):
            try:
                instruction = self.vm.step()
            except (CPUException, DecodeError) as e:
                self.console.print(f"[red]{e}[/red]")
                break
            self.console.print(f"{instruction.address:>6}: {instruction}")

        self._show_new_output()
        self._show_status()

    def do_input(self, arg: str) -> None:
        """Queue input values: input <v1> [v2 ...]"""
        if not self._require_vm():
            return

        try:
            values = [int(part) for part in arg.replace(',', ' ').split()]
        except ValueError:
            self.console.print("[red]Input values must be integers[/red]")
            return

        self.vm.add_input(*values)
        self.console.print(f"[green]Queued {len(values)} value(s)[/green]")

    # Breakpoints

    def do_break(self, arg: str) -> None:
        """Set breakpoint or list them: break [address]"""
        if not self._require_vm():
            return

        if not arg:
            self._list_breakpoints()
            return

        try:
            address = int(arg)
        except ValueError:
            self.console.print("[red]Invalid address[/red]")
            return

        self.vm.set_breakpoint(address)
        self.console.print(f"[green]Breakpoint set at {address}[/green]")

    def do_delete(self, arg: str) -> None:
        """Delete breakpoint: delete <address>"""
        if not self._require_vm():
            return

        try:
            address = int(arg)
        except ValueError:
            self.console.print("[red]Please specify breakpoint address[/red]")
            return

        self.vm.clear_breakpoint(address)
        self.console.print(f"[yellow]Breakpoint cleared at {address}[/yellow]")

    def do_clear(self, arg: str) -> None:
        """Clear all breakpoints: clear"""
        if not self._require_vm():
            return

        self.vm.clear_all_breakpoints()
        self.console.print("[yellow]All breakpoints cleared[/yellow]")

    # Information display

    def do_status(self, arg: str) -> None:
        """Show VM status: status"""
        if self._require_vm():
            self._show_status()

    def do_output(self, arg: str) -> None:
        """Show the full output log: output"""
        if not self._require_vm():
            return

        output = self.vm.output
        self.console.print(", ".join(str(value) for value in output) or "[dim](no output)[/dim]")

    def do_memory(self, arg: str) -> None:
        """Show memory: memory [address] [count]"""
        if not self._require_vm():
            return

        address = self.last_dump_address
        count = self.last_dump_count

        parts = arg.split()
        try:
            if len(parts) >= 1:
                address = int(parts[0])
            if len(parts) >= 2:
                count = int(parts[1])
        except ValueError:
            self.console.print("[red]Invalid address or count[/red]")
            return

        self.last_dump_address = address
        self.last_dump_count = count
        self._show_memory(address, count)

    def do_set(self, arg: str) -> None:
        """Set a memory cell: set <address> <value>"""
        if not self._require_vm():
            return

        parts = arg.split()
        if len(parts) != 2:
            self.console.print("[red]Usage: set <address> <value>[/red]")
            return

        try:
            address, value = int(parts[0]), int(parts[1])
            self.vm.write_memory(address, value)
        except (ValueError, MemoryException) as e:
            self.console.print(f"[red]Error: {e}[/red]")
            return

        self.console.print(f"[green]Memory[{address}] = {value}[/green]")

    # Utility commands

    def do_quit(self, arg: str) -> bool:
        """Quit the debugger: quit"""
        self.console.print("[blue]Goodbye![/blue]")
        return True

    def do_exit(self, arg: str) -> bool:
        """Exit the debugger: exit"""
        return self.do_quit(arg)

    def do_EOF(self, arg: str) -> bool:
        return self.do_quit(arg)

    # Helper methods

    def _show_status(self) -> None:
        """Display VM status."""
        state = self.vm.get_state()
        cpu_state = state['cpu']
        next_instruction = self.vm.peek_instruction()

        status_text = f"""[bold]CPU State:[/bold] {cpu_state['state']}
[bold]PC:[/bold] {cpu_state['pc']}
[bold]Relative Base:[/bold] {cpu_state['relative_base']}
[bold]Instructions:[/bold] {cpu_state['instruction_count']}
[bold]Pending Input:[/bold] {cpu_state['pending_input']}
[bold]Next:[/bold] {next_instruction if next_instruction else '(invalid)'}"""

        if cpu_state.get('halt_reason'):
            status_text += f"\n[bold]Halt Reason:[/bold] {cpu_state['halt_reason']}"

        self.console.print(Panel(status_text, title="VM Status", border_style="green"))

    def _show_new_output(self) -> None:
        fresh = self.vm.cpu.read_new_output()
        if fresh:
            self.console.print(f"[bold]Output:[/bold] {', '.join(str(value) for value in fresh)}")

    def _show_memory(self, address: int, count: int) -> None:
        """Display memory contents."""
        table = Table(title=f"Memory ({address})")
        table.add_column("Address", style="cyan")
        table.add_column("Value", style="yellow")
        table.add_column("Decoded", style="green")
        table.add_column("PC", style="red")

        for addr, value in self.vm.get_memory_dump(address, count).items():
            instruction = self.vm.peek_instruction(addr)
            pc_marker = ">>>" if addr == self.vm.cpu.pc else ""
            breakpoint_marker = "*" if addr in self.vm.breakpoints else ""
            table.add_row(
                str(addr),
                str(value),
                str(instruction) if instruction else "",
                f"{pc_marker} {breakpoint_marker}".strip(),
            )

        self.console.print(table)

    def _list_breakpoints(self) -> None:
        """List all breakpoints."""
        if not self.vm.breakpoints:
            self.console.print("[yellow]No breakpoints set[/yellow]")
            return

        for address in sorted(self.vm.breakpoints):
            self.console.print(f"  {address}")


def start_interactive_debugger(program_file: Optional[str] = None) -> None:
    """Start the interactive debugger, optionally loading a program."""
    debugger = IntcodeDebugger()
    if program_file:
        debugger.do_load(program_file)
    debugger.cmdloop()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the debugger."""
    parser = argparse.ArgumentParser(description="Intcode Debugger - step through Intcode programs")
    parser.add_argument("program", nargs="?", help="Program file to load")
    args = parser.parse_args(argv)

    try:
        start_interactive_debugger(args.program)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
