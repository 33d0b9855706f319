"""
Invariant Mass Calculator.

Provides the candidate mass either as stored upstream or recomputed from
the daughter momenta under the charged-pion hypothesis.
"""
import vector

from k0s_resolution.domain.config import MassMode
from k0s_resolution.domain.events import Track, V0Candidate
from k0s_resolution.services.calculations import consts


def two_body_invariant_mass(p1: tuple[float, float, float],
                            p2: tuple[float, float, float],
                            m1: float, m2: float) -> float:
    """
    Invariant mass of two particles given their three-momenta and masses.

    m = sqrt((E1 + E2)^2 - |p1 + p2|^2), E_i = sqrt(|p_i|^2 + m_i^2)
    """
    v1 = vector.obj(px=p1[0], py=p1[1], pz=p1[2], mass=m1)
    v2 = vector.obj(px=p2[0], py=p2[1], pz=p2[2], mass=m2)
    return float((v1 + v2).mass)


class MassCalculator:
    def __init__(self, mode: MassMode = MassMode.STORED):
        self.mode = mode

    def mass(self, v0: V0Candidate, pos_track: Track, neg_track: Track) -> float:
        if self.mode is MassMode.STORED:
            return v0.mass
        return two_body_invariant_mass(
            (pos_track.px, pos_track.py, pos_track.pz),
            (neg_track.px, neg_track.py, neg_track.pz),
            consts.MASS_PION_CHARGED,
            consts.MASS_PION_CHARGED,
        )
