"""
Pipeline execution entry point.
"""

from .executor import PipelineExecutor

__all__ = ["PipelineExecutor"]
