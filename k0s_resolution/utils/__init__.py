"""
Utility helpers.
"""

from .paths import create_timestamped_run_dir, update_config_paths_with_run_dir

__all__ = [
    "create_timestamped_run_dir",
    "update_config_paths_with_run_dir",
]
