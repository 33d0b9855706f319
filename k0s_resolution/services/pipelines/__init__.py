"""
Event pipelines.

The K0s resolution pipeline (Data and MC) and its thread-pool runner.
"""

from .k0s_pipeline import K0sResolutionPipeline
from .parallel_runner import ParallelEventRunner

__all__ = [
    "K0sResolutionPipeline",
    "ParallelEventRunner",
]
