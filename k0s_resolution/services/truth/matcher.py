"""
TruthMatcher service - Resolves candidates and daughters to generated particles.

Missing truth and wrong daughter species are not errors: the candidate
is simply not matched.
"""

from dataclasses import dataclass
from typing import Optional, Union

from k0s_resolution.domain.events import McParticle, Track, V0Candidate
from k0s_resolution.services.calculations import consts


@dataclass(frozen=True)
class TruthMatch:
    """Daughter truth of a matched candidate plus the signal tag."""

    pos_truth: McParticle
    neg_truth: McParticle
    is_true_k0s: bool


class MatchFailure:
    """Reasons a candidate is not matched."""

    MISSING_TRUTH = "missing_truth"
    SPECIES_MISMATCH = "species_mismatch"


class TruthMatcher:
    """
    Matches K0s candidates to simulated pi+ pi- pairs.

    Stateless; a single instance can be shared between threads.
    """

    def __init__(self,
                 pos_daughter_pdg: int = consts.PDG_PION_POSITIVE,
                 neg_daughter_pdg: int = consts.PDG_PION_NEGATIVE,
                 mother_pdg: int = consts.PDG_K0S):
        self.pos_daughter_pdg = pos_daughter_pdg
        self.neg_daughter_pdg = neg_daughter_pdg
        self.mother_pdg = mother_pdg

    @staticmethod
    def truth_of(obj: Union[Track, V0Candidate]) -> Optional[McParticle]:
        return obj.mc_particle

    def classify(self, v0: V0Candidate, pos_track: Track,
                 neg_track: Track) -> tuple[Optional[TruthMatch], Optional[str]]:
        """
        Match a candidate and report why it failed if it did.

        Returns:
            (TruthMatch, None) on success, (None, MatchFailure reason) otherwise
        """
        pos_truth = self.truth_of(pos_track)
        neg_truth = self.truth_of(neg_track)
        if pos_truth is None or neg_truth is None:
            return None, MatchFailure.MISSING_TRUTH

        if (pos_truth.pdg_code != self.pos_daughter_pdg
                or neg_truth.pdg_code != self.neg_daughter_pdg):
            return None, MatchFailure.SPECIES_MISMATCH

        return TruthMatch(
            pos_truth=pos_truth,
            neg_truth=neg_truth,
            is_true_k0s=self._is_true_mother(v0),
        ), None

    def match(self, v0: V0Candidate, pos_track: Track,
              neg_track: Track) -> Optional[TruthMatch]:
        match, _ = self.classify(v0, pos_track, neg_track)
        return match

    def is_genuine_signal(self, v0: V0Candidate, pos_track: Track, neg_track: Track) -> bool:
        """
        True if the candidate's own truth is a K0s.

        The daughters are not consulted: a wrong daughter species stops
        the match but not this tag.
        """
        return self._is_true_mother(v0)

    def _is_true_mother(self, v0: V0Candidate) -> bool:
        truth = self.truth_of(v0)
        return truth is not None and truth.pdg_code == self.mother_pdg
