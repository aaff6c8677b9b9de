#!/usr/bin/env python
"""
Launcher script for the Recipe Costing command line.

Puts src/ on the Python path so the CLI runs from a checkout without installing.
"""

import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from recipe_costing.main import main  # noqa: E402

if __name__ == "__main__":
    sys.exit(main())
