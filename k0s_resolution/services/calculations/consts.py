"""
Centralized constants for particle physics calculations.

Masses in GeV/c^2, lengths in cm.
"""
MASS_PION_CHARGED = 0.13957039
MASS_K0 = 0.497611

# c*tau of the K0s
CTAU_K0S = 2.684

PDG_PION_POSITIVE = 211
PDG_PION_NEGATIVE = -211
PDG_K0S = 310
