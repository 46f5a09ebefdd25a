"""
Path utilities for packaged resource files.

Handles path resolution for both normal Python execution and
PyInstaller frozen executables.
"""

import sys
from functools import lru_cache
from pathlib import Path


@lru_cache(maxsize=1)
def get_configs_dir() -> Path:
    """
    Get the directory holding the packaged YAML configuration files.

    When running as a PyInstaller executable, resources are extracted to
    a temporary directory (sys._MEIPASS).

    Returns:
        Path to the ``configs`` directory.
    """
    if getattr(sys, "frozen", False):
        return Path(sys._MEIPASS) / "approvalflow" / "configs"  # type: ignore[attr-defined]

    # This file lives at approvalflow/core/utils/paths.py
    return Path(__file__).resolve().parent.parent.parent / "configs"
