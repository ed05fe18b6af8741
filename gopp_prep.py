#!/usr/bin/env python3
"""gopp Runner Script

This script properly sets up the Python path and runs the gppc command.
"""

import sys
from pathlib import Path

# Add src to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / 'src'))

# Now import and run the preprocessor
from gopp.main import main

if __name__ == '__main__':
    sys.exit(main())
