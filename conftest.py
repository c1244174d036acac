# SPDX-License-Identifier: MIT
# Copyright (c) 2025 super-logging contributors

"""Root conftest.py so super_logging imports from a source checkout."""

import sys
from pathlib import Path

# Add repo root to sys.path so the package is importable without installing it
_repo_root = Path(__file__).parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))
