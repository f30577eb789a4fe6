"""Test package configuration for occi_codec."""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the src/ directory is available on sys.path so imports work in tests without
# relying on editable installs.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_PATH = _PROJECT_ROOT / "src"
if _SRC_PATH.is_dir():
    src_str = str(_SRC_PATH)
    if src_str not in sys.path:
        # Prepend so local modules take priority over installed packages.
        sys.path.insert(0, src_str)

__all__ = [
    "_PROJECT_ROOT",
    "_SRC_PATH",
]
