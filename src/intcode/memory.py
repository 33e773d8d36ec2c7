"""Intcode Virtual Machine Memory Management

Growable array of signed integer cells. Memory never shrinks: any access past
the current end first extends it with zero-valued cells.
"""

from typing import Dict, Iterable, List, Optional


class MemoryException(Exception):
    """Base exception for memory-related errors."""
    pass


class InvalidAddressException(MemoryException):
    """Exception for invalid (negative) memory addresses."""
    pass


class Memory:
    """Intcode Virtual Machine Memory Management Unit."""

    def __init__(self, cells: Optional[Iterable[int]] = None):
        """Initialize memory from an initial sequence of cells.

        Args:
            cells: Initial memory contents (copied, never aliased)
        """
        self.cells: List[int] = list(cells) if cells is not None else []

        # Memory access statistics
        self.read_count = 0
        self.write_count = 0

    def __len__(self) -> int:
        return len(self.cells)

    def read(self, address: int) -> int:
        """Read a cell, growing memory if the address is past the end.

        Args:
            address: Non-negative memory address

        Returns:
            Integer value stored at the address
        """
        self._check_address(address)
        self._grow(address)
        self.read_count += 1
        return self.cells[address]

    def write(self, address: int, value: int) -> None:
        """Write a cell, growing memory if the address is past the end.

        Args:
            address: Non-negative memory address
            value: Integer value to store
        """
        self._check_address(address)
        self._grow(address)
        self.write_count += 1
        self.cells[address] = value

    def peek(self, address: int) -> int:
        """Read a cell without growing memory or touching statistics.

        Addresses past the end read as zero, which is what a growing read
        would have returned.
        """
        self._check_address(address)
        if address < len(self.cells):
            return self.cells[address]
        return 0

    def _check_address(self, address: int) -> None:
        if address < 0:
            raise InvalidAddressException(f"Invalid memory address: {address}")

    def _grow(self, address: int) -> None:
        """Extend memory with zeros up to and including address."""
        missing = address + 1 - len(self.cells)
        if missing > 0:
            self.cells.extend([0] * missing)

    def copy(self) -> 'Memory':
        """Return an independent copy of this memory."""
        clone = Memory(self.cells)
        clone.read_count = self.read_count
        clone.write_count = self.write_count
        return clone

    def to_list(self) -> List[int]:
        """Return a snapshot of all cells."""
        return list(self.cells)

    def dump(self, start: int = 0, count: Optional[int] = None) -> Dict[int, int]:
        """Dump memory contents for debugging.

        Args:
            start: Starting address
            count: Number of cells to dump (default: through the end)

        Returns:
            Dictionary mapping addresses to values
        """
        end = len(self.cells) if count is None else min(start + count, len(self.cells))
        return {addr: self.cells[addr] for addr in range(max(start, 0), end)}

    def format_dump(self, words_per_line: int = 10) -> str:
        """Render an address-indexed listing of all cells."""
        lines = []
        for base in range(0, len(self.cells), words_per_line):
            row = self.cells[base:base + words_per_line]
            lines.append(f"{base}: " + " ".join(str(value) for value in row))
        return "\n".join(lines)

    def get_memory_map(self) -> Dict[str, int]:
        """Get memory size and access statistics for debugging."""
        return {
            'size': len(self.cells),
            'reads': self.read_count,
            'writes': self.write_count,
        }
