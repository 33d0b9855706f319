"""
State handlers for pipeline execution.

Each handler implements logic for a specific pipeline state.
"""

from .base import StateHandler
from .loading_handler import LoadingHandler
from .processing_handler import ProcessingHandler
from .output_handler import OutputHandler

__all__ = [
    "StateHandler",
    "LoadingHandler",
    "ProcessingHandler",
    "OutputHandler",
]
