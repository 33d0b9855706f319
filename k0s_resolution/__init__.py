"""
K0s resolution pipeline.

Selection, mass and daughter momentum resolution studies for K0S -> pi+ pi-
candidates in data and Monte Carlo.
"""

__version__ = "0.1.0"
