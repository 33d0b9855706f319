"""
Path utilities for pipeline.

Handles timestamped directories and path management.
"""

import os
from datetime import datetime


def create_timestamped_run_dir(base_output_dir: str, run_name: str = None) -> str:
    """
    Create a timestamped directory for the current pipeline run.

    Args:
        base_output_dir: Base output directory (e.g., "./output")
        run_name: Optional run name to include in directory

    Returns:
        Path to the timestamped run directory

    Example:
        create_timestamped_run_dir("./output", "k0s_mc")
        -> "./output/k0s_mc_20261018_101500"
    """
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    if run_name:
        dir_name = f"{run_name}_{timestamp}"
    else:
        dir_name = f"run_{timestamp}"

    run_dir = os.path.join(base_output_dir, dir_name)
    os.makedirs(run_dir, exist_ok=True)

    return run_dir


def _set_if_relative(config: dict, key: str, value: str):
    """Only overwrite a path if it's missing or relative."""
    if key not in config or not os.path.isabs(config[key]):
        config[key] = value


def update_config_paths_with_run_dir(config_dict: dict, run_dir: str) -> dict:
    """
    Point the output paths of the config at the run directory.

    Relative paths (the ``./output/...`` defaults) are replaced with the
    corresponding sub-directory under *run_dir*. Absolute paths are left
    untouched.

    Layout under run_dir:
        histograms/  - ROOT file and sparse histogram archives
        logs/        - processing statistics

    Args:
        config_dict: Configuration dictionary
        run_dir: Run directory path

    Returns:
        Updated configuration dictionary
    """
    updated_config = config_dict.copy()

    for d in ("histograms", "logs"):
        os.makedirs(os.path.join(run_dir, d), exist_ok=True)

    output_config = dict(updated_config.get("output") or {})
    _set_if_relative(output_config, "output_dir", os.path.join(run_dir, "histograms"))
    _set_if_relative(output_config, "stats_dir", os.path.join(run_dir, "logs"))
    updated_config["output"] = output_config

    return updated_config
