#!/usr/bin/env python3
"""Intcode Debugger Runner Script

This script sets up the Python path and runs the Intcode debugger.
"""

import sys
from pathlib import Path

# Add src to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / 'src'))

# Now import and run the debugger
from intcode.debugger import main

if __name__ == '__main__':
    sys.exit(main())
