"""
Reconstructed-minus-generated residuals for the K0s daughters.

Relative and inverse residuals are None when their denominator is zero;
callers skip the corresponding histogram entry.
"""

from dataclasses import dataclass
from typing import Optional

from k0s_resolution.domain.events import McParticle, V0Candidate


def _relative(reco: float, truth: float) -> Optional[float]:
    if truth == 0:
        return None
    return (reco - truth) / truth


def _inverse(reco: float, truth: float) -> Optional[float]:
    if reco == 0 or truth == 0:
        return None
    return 1.0 / reco - 1.0 / truth


@dataclass(frozen=True)
class DaughterResiduals:
    """Residuals of one daughter with respect to its generated particle."""

    truth: McParticle
    pt: float
    pt_rel: Optional[float]
    px: float
    px_rel: Optional[float]
    py: float
    py_rel: Optional[float]
    pz: float
    pz_rel: Optional[float]
    inv_pt: Optional[float]

    @property
    def undefined_count(self) -> int:
        """Number of residuals left undefined by a zero denominator."""
        return sum(
            value is None
            for value in (self.pt_rel, self.px_rel, self.py_rel, self.pz_rel, self.inv_pt)
        )


@dataclass(frozen=True)
class CandidateResiduals:
    positive: DaughterResiduals
    negative: DaughterResiduals

    @property
    def undefined_count(self) -> int:
        return self.positive.undefined_count + self.negative.undefined_count


class ResidualCalculator:
    """Computes daughter residuals from the momenta stored on the candidate."""

    @staticmethod
    def daughter(pt: float, px: float, py: float, pz: float,
                 truth: McParticle) -> DaughterResiduals:
        return DaughterResiduals(
            truth=truth,
            pt=pt - truth.pt,
            pt_rel=_relative(pt, truth.pt),
            px=px - truth.px,
            px_rel=_relative(px, truth.px),
            py=py - truth.py,
            py_rel=_relative(py, truth.py),
            pz=pz - truth.pz,
            pz_rel=_relative(pz, truth.pz),
            inv_pt=_inverse(pt, truth.pt),
        )

    def compute(self, v0: V0Candidate, pos_truth: McParticle,
                neg_truth: McParticle) -> CandidateResiduals:
        """
        Residuals for both daughters of a truth-matched candidate.

        Args:
            v0: Candidate, provides the reconstructed daughter momenta
            pos_truth: Generated particle of the positive daughter
            neg_truth: Generated particle of the negative daughter
        """
        positive = self.daughter(v0.positive_pt, v0.px_pos, v0.py_pos, v0.pz_pos, pos_truth)
        negative = self.daughter(v0.negative_pt, v0.px_neg, v0.py_neg, v0.pz_neg, neg_truth)
        return CandidateResiduals(positive=positive, negative=negative)
