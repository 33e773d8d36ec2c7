"""Intcode Program Loader

Parses comma-separated program text into memory cells and serializes cells
back to canonical text.
"""

import re
from pathlib import Path
from typing import Iterable, List, Union

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_INTEGER_TOKEN = re.compile(r'^[+-]?[0-9]+$')


class ProgramLoaderError(Exception):
    """Exception raised for program loading errors."""
    pass


class ProgramParseError(ProgramLoaderError):
    """Exception for a token that is not a signed 64-bit decimal integer."""

    def __init__(self, token: str, index: int, reason: str = "not an integer"):
        super().__init__(f"Invalid program token {token!r} at position {index}: {reason}")
        self.token = token
        self.index = index


class ProgramLoader:
    """Loads Intcode program text into memory cells."""

    def __init__(self, separator: str = ','):
        self.separator = separator

    def load_from_file(self, filename: Union[str, Path]) -> List[int]:
        """Load a program from file.

        Args:
            filename: Path to program file

        Returns:
            List of memory cells
        """
        with open(filename, 'r', encoding='utf-8') as f:
            content = f.read()

        return self.load_from_string(content)

    def load_from_string(self, text: str) -> List[int]:
        """Load a program from a string.

        Args:
            text: A single line of comma-separated integers

        Returns:
            List of memory cells
        """
        return [
            self._parse_token(token, index)
            for index, token in enumerate(text.strip().split(self.separator))
        ]

    def _parse_token(self, token: str, index: int) -> int:
        stripped = token.strip()
        if not _INTEGER_TOKEN.match(stripped):
            raise ProgramParseError(stripped, index)

        value = int(stripped)
        if not INT64_MIN <= value <= INT64_MAX:
            raise ProgramParseError(stripped, index, "outside signed 64-bit range")
        return value


def parse_program(text: str) -> List[int]:
    """Convenience function to parse program text."""
    loader = ProgramLoader()
    return loader.load_from_string(text)


def load_program_file(filename: Union[str, Path]) -> List[int]:
    """Convenience function to load a program from file."""
    loader = ProgramLoader()
    return loader.load_from_file(filename)


def format_program(cells: Iterable[int]) -> str:
    """Serialize memory cells to canonical program text."""
    return ','.join(str(value) for value in cells)
