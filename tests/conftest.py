"""Pytest configuration for terrain2d tests."""
from __future__ import annotations

import sys
from pathlib import Path

# Repository root on the path so the namespace package imports without installation.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))
