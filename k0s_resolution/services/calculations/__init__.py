"""
Calculation services.

Physics constants and invariant mass computation.
"""

from .mass_calculator import MassCalculator, two_body_invariant_mass

__all__ = [
    "MassCalculator",
    "two_body_invariant_mass",
]
