#!/usr/bin/env python3
"""Intcode Virtual Machine Runner Script

This script sets up the Python path and runs the Intcode virtual machine.

Usage:
    python intcode_vm.py <program.txt> [--input N ...] [--mode halt|interactive]
                         [--max-steps N] [--dump] [--debug]

Flags:
    --input       Values to preload into the input queue
    --mode        'halt' runs with preloaded input; 'interactive' prompts for input
    --max-steps   Stop after this many instructions
    --dump        Print a memory dump when execution stops
    --debug       Enable debug logging and instruction tracing
"""

import sys
from pathlib import Path

# Add src to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / 'src'))

# Now import and run the VM
from intcode.virtual_machine import main

if __name__ == '__main__':
    sys.exit(main())
