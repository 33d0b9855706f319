"""
V0 selection cascade.

Ordered, short-circuiting quality cuts on one K0s candidate, its two
daughters and the collision it belongs to. Cheap candidate-level cuts run
first, per-daughter detector and PID cuts last.
"""

import logging
from typing import Callable, Optional

from k0s_resolution.domain.config import (
    ConfigurationError,
    DetectorMode,
    TrackingPidHypothesis,
    V0SelectionConfig,
)
from k0s_resolution.domain.events import Collision, Track, V0Candidate
from k0s_resolution.services.calculations import consts


def passes_detector_gate(mode: DetectorMode, present: bool) -> bool:
    """
    Tri-state gate on the presence of a detector signal.

    EXCLUDE rejects when the signal is present, REQUIRE rejects when it is
    absent, NO_CONSTRAINT always passes.

    Raises:
        ConfigurationError: If mode is not a DetectorMode
    """
    if not isinstance(mode, DetectorMode):
        raise ConfigurationError(f"Invalid detector selection mode: {mode!r}")
    if mode is DetectorMode.EXCLUDE:
        return not present
    if mode is DetectorMode.REQUIRE:
        return present
    return True


def passes_pid_hypothesis(hypothesis: TrackingPidHypothesis, pid_for_tracking: int) -> bool:
    """Exact match on the tracking PID tag unless the cut is disabled."""
    if not isinstance(hypothesis, TrackingPidHypothesis):
        raise ConfigurationError(f"Invalid tracking PID hypothesis: {hypothesis!r}")
    if hypothesis is TrackingPidHypothesis.NO_CONSTRAINT:
        return True
    return pid_for_tracking == hypothesis.value


Cut = Callable[[V0Candidate, Track, Track, Collision], bool]


class V0SelectionCascade:
    """
    Evaluates the V0 quality cuts in a fixed order.

    The configuration is validated on construction of V0SelectionConfig,
    so evaluating a candidate never fails.
    """

    def __init__(self, config: V0SelectionConfig):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        self._cuts: list[tuple[str, Cut]] = self._build_cuts()

    @property
    def cut_names(self) -> list[str]:
        return [name for name, _ in self._cuts]

    def accept(self, v0: V0Candidate, pos_track: Track, neg_track: Track,
               collision: Collision) -> bool:
        """Return True only if every cut passes."""
        return self.first_failure(v0, pos_track, neg_track, collision) is None

    def first_failure(self, v0: V0Candidate, pos_track: Track, neg_track: Track,
                      collision: Collision) -> Optional[str]:
        """
        Name of the first cut the candidate fails, or None if it passes all.

        Args:
            v0: Candidate under test
            pos_track: Positive daughter
            neg_track: Negative daughter
            collision: Collision the candidate belongs to

        Returns:
            Cut name or None
        """
        for name, cut in self._cuts:
            if not cut(v0, pos_track, neg_track, collision):
                self.logger.debug(f"V0 {v0.index} rejected by {name}")
                return name
        return None

    def _build_cuts(self) -> list[tuple[str, Cut]]:
        cfg = self.config
        max_ctau = consts.CTAU_K0S * cfg.lifetime

        return [
            ("rapidity", lambda v0, p, n, c: abs(v0.rapidity) <= cfg.rapidity),
            ("radius", lambda v0, p, n, c: v0.v0_radius >= cfg.radius),
            ("lifetime",
             lambda v0, p, n, c: v0.distance_over_momentum(c) * consts.MASS_K0 <= max_ctau),
            ("its_ib_pos",
             lambda v0, p, n, c: passes_detector_gate(cfg.its_ib_selection_pos,
                                                      p.its_n_cls_inner_barrel > 0)),
            ("its_ib_neg",
             lambda v0, p, n, c: passes_detector_gate(cfg.its_ib_selection_neg,
                                                      n.its_n_cls_inner_barrel > 0)),
            ("tpc_presence", lambda v0, p, n, c: p.has_tpc and n.has_tpc),
            ("tpc_n_sigma",
             lambda v0, p, n, c: (abs(p.tpc_n_sigma_pi) <= cfg.max_tpc_n_sigma
                                  and abs(n.tpc_n_sigma_pi) <= cfg.max_tpc_n_sigma)),
            ("tpc_clusters",
             lambda v0, p, n, c: (p.tpc_n_cls_crossed_rows >= cfg.extra_cut_tpc_clusters
                                  and n.tpc_n_cls_crossed_rows >= cfg.extra_cut_tpc_clusters)),
            ("tof_pos", lambda v0, p, n, c: passes_detector_gate(cfg.tof_selection_pos, p.has_tof)),
            ("tof_neg", lambda v0, p, n, c: passes_detector_gate(cfg.tof_selection_neg, n.has_tof)),
            ("trd_pos", lambda v0, p, n, c: passes_detector_gate(cfg.trd_selection_pos, p.has_trd)),
            ("trd_neg", lambda v0, p, n, c: passes_detector_gate(cfg.trd_selection_neg, n.has_trd)),
            ("pid_hypo_pos",
             lambda v0, p, n, c: passes_pid_hypothesis(cfg.pid_hypo_pos, p.pid_for_tracking)),
            ("pid_hypo_neg",
             lambda v0, p, n, c: passes_pid_hypothesis(cfg.pid_hypo_neg, n.pid_for_tracking)),
        ]
