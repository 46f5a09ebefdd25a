"""
Core utilities module.

Provides shared utility functions used across all layers.
"""

from approvalflow.core.utils.paths import get_configs_dir
from approvalflow.core.utils.time import utc_now

__all__ = ["get_configs_dir", "utc_now"]
