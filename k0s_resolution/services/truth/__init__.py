"""
Monte-Carlo truth services.

Matching of candidates to generated particles and residual computation.
"""

from .matcher import TruthMatcher, TruthMatch, MatchFailure
from .residuals import ResidualCalculator, DaughterResiduals, CandidateResiduals

__all__ = [
    "TruthMatcher",
    "TruthMatch",
    "MatchFailure",
    "ResidualCalculator",
    "DaughterResiduals",
    "CandidateResiduals",
]
