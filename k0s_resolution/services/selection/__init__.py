"""
Selection services.

Vectorised pre-filters and the per-candidate selection cascade.
"""

from .cascade import V0SelectionCascade, passes_detector_gate, passes_pid_hypothesis
from .prefilter import collision_mask, v0_mask, selected_v0_indices

__all__ = [
    "V0SelectionCascade",
    "passes_detector_gate",
    "passes_pid_hypothesis",
    "collision_mask",
    "v0_mask",
    "selected_v0_indices",
]
