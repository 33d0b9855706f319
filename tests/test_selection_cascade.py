"""
Tests for the V0 selection cascade.
"""

import pytest

from k0s_resolution.domain.config import (
    ConfigurationError,
    DetectorMode,
    TrackingPidHypothesis,
    V0SelectionConfig,
)
from k0s_resolution.services.selection import (
    V0SelectionCascade,
    passes_detector_gate,
    passes_pid_hypothesis,
)
from conftest import make_collision, make_track, make_v0


def evaluate(config, v0, collision=None):
    cascade = V0SelectionCascade(config)
    collision = collision if collision is not None else make_collision()
    return cascade.first_failure(v0, v0.pos_track, v0.neg_track, collision)


class TestDetectorGate:
    """Tests for the tri-state detector gate."""

    @pytest.mark.parametrize("mode,present,expected", [
        (DetectorMode.EXCLUDE, True, False),
        (DetectorMode.EXCLUDE, False, True),
        (DetectorMode.NO_CONSTRAINT, True, True),
        (DetectorMode.NO_CONSTRAINT, False, True),
        (DetectorMode.REQUIRE, True, True),
        (DetectorMode.REQUIRE, False, False),
    ])
    def test_gate(self, mode, present, expected):
        assert passes_detector_gate(mode, present) is expected

    def test_raw_integer_is_fatal(self):
        """Test that an unvalidated mode never silently defaults."""
        with pytest.raises(ConfigurationError, match="Invalid detector selection mode"):
            passes_detector_gate(2, True)

    def test_pid_hypothesis(self):
        assert passes_pid_hypothesis(TrackingPidHypothesis.NO_CONSTRAINT, 4)
        assert passes_pid_hypothesis(TrackingPidHypothesis.PION, 2)
        assert not passes_pid_hypothesis(TrackingPidHypothesis.KAON, 2)

    def test_pid_hypothesis_raw_value_is_fatal(self):
        with pytest.raises(ConfigurationError, match="Invalid tracking PID hypothesis"):
            passes_pid_hypothesis(7, 2)


class TestV0SelectionCascade:
    """Tests for the ordered cascade."""

    def test_baseline_candidate_is_accepted(self, collision):
        v0 = make_v0()
        cascade = V0SelectionCascade(V0SelectionConfig())
        assert cascade.accept(v0, v0.pos_track, v0.neg_track, collision)

    def test_cut_order(self):
        cascade = V0SelectionCascade(V0SelectionConfig())
        assert cascade.cut_names == [
            "rapidity", "radius", "lifetime",
            "its_ib_pos", "its_ib_neg",
            "tpc_presence", "tpc_n_sigma", "tpc_clusters",
            "tof_pos", "tof_neg", "trd_pos", "trd_neg",
            "pid_hypo_pos", "pid_hypo_neg",
        ]

    def test_rapidity_above_threshold_rejected(self):
        """Rapidity 0.6 with threshold 0.5 is rejected."""
        v0 = make_v0(rapidity=0.6)
        assert evaluate(V0SelectionConfig(rapidity=0.5), v0) == "rapidity"

    def test_negative_rapidity_uses_magnitude(self):
        assert evaluate(V0SelectionConfig(rapidity=0.5), make_v0(rapidity=-0.6)) == "rapidity"
        assert evaluate(V0SelectionConfig(rapidity=0.5), make_v0(rapidity=-0.4)) is None

    def test_rapidity_at_threshold_accepted(self):
        assert evaluate(V0SelectionConfig(rapidity=0.5), make_v0(rapidity=0.5)) is None

    def test_radius_below_threshold_rejected(self):
        assert evaluate(V0SelectionConfig(radius=0.9), make_v0(v0_radius=0.5)) == "radius"

    def test_lifetime_rejected(self):
        """Decay length 30 cm at p = 1 GeV/c gives c*t ~ 14.9 cm > 3 * 2.684 cm."""
        v0 = make_v0(x=30.0, y=0.0, z=0.0, px=1.0, py=0.0, pz=0.0)
        assert evaluate(V0SelectionConfig(lifetime=3.0), v0) == "lifetime"
        assert evaluate(V0SelectionConfig(lifetime=6.0), v0) is None

    def test_lifetime_uses_primary_vertex(self):
        v0 = make_v0(x=30.0, y=0.0, z=0.0, px=1.0, py=0.0, pz=0.0)
        collision = make_collision(pos_x=29.0)
        assert evaluate(V0SelectionConfig(lifetime=3.0), v0, collision) is None

    def test_its_require_with_zero_hits_rejected(self):
        """REQUIRE with no inner-barrel hits fails, one hit passes."""
        cfg = V0SelectionConfig(its_ib_selection_pos=DetectorMode.REQUIRE)
        no_hits = make_v0(pos_track=make_track(index=1, its_n_cls_inner_barrel=0))
        one_hit = make_v0(pos_track=make_track(index=1, its_n_cls_inner_barrel=1))

        assert evaluate(cfg, no_hits) == "its_ib_pos"
        assert evaluate(cfg, one_hit) is None

    def test_its_exclude_with_hits_rejected(self):
        cfg = V0SelectionConfig(its_ib_selection_neg=DetectorMode.EXCLUDE)
        assert evaluate(cfg, make_v0()) == "its_ib_neg"

    def test_missing_tpc_rejected(self):
        v0 = make_v0(neg_track=make_track(index=2, has_tpc=False))
        assert evaluate(V0SelectionConfig(), v0) == "tpc_presence"

    def test_tpc_n_sigma_rejected(self):
        v0 = make_v0(pos_track=make_track(index=1, tpc_n_sigma_pi=-4.0))
        assert evaluate(V0SelectionConfig(max_tpc_n_sigma=3.0), v0) == "tpc_n_sigma"
        assert evaluate(V0SelectionConfig(max_tpc_n_sigma=5.0), v0) is None

    def test_tpc_clusters_rejected(self):
        v0 = make_v0(neg_track=make_track(index=2, tpc_n_cls_crossed_rows=60.0))
        assert evaluate(V0SelectionConfig(extra_cut_tpc_clusters=70.0), v0) == "tpc_clusters"

    def test_tof_require_without_tof_rejected(self):
        cfg = V0SelectionConfig(tof_selection_pos=DetectorMode.REQUIRE)
        assert evaluate(cfg, make_v0()) == "tof_pos"
        with_tof = make_v0(pos_track=make_track(index=1, has_tof=True))
        assert evaluate(cfg, with_tof) is None

    def test_trd_exclude_with_trd_rejected(self):
        cfg = V0SelectionConfig(trd_selection_neg=DetectorMode.EXCLUDE)
        v0 = make_v0(neg_track=make_track(index=2, has_trd=True))
        assert evaluate(cfg, v0) == "trd_neg"

    def test_kaon_hypothesis_with_pion_tag_rejected(self):
        """Kaon hypothesis against a pion tracking tag is rejected."""
        cfg = V0SelectionConfig(pid_hypo_pos=TrackingPidHypothesis.KAON)
        v0 = make_v0(pos_track=make_track(index=1, pid_for_tracking=TrackingPidHypothesis.PION))
        assert evaluate(cfg, v0) == "pid_hypo_pos"

    def test_matching_hypothesis_accepted(self):
        cfg = V0SelectionConfig(pid_hypo_pos=2, pid_hypo_neg=2)
        assert evaluate(cfg, make_v0()) is None

    def test_first_failing_cut_is_reported(self):
        """Short-circuit: only the first failing cut is named."""
        v0 = make_v0(rapidity=0.9, v0_radius=0.1)
        assert evaluate(V0SelectionConfig(), v0) == "rapidity"

    @pytest.mark.parametrize("overrides", [
        {"rapidity": 0.9},
        {"v0_radius": 0.2},
        {"x": 50.0, "px": 0.5, "py": 0.0, "pz": 0.0},
        {"neg_track": make_track(index=2, tpc_n_sigma_pi=12.0)},
    ])
    def test_single_failing_cut_rejects(self, overrides, collision):
        """Any single failing cut rejects regardless of the others."""
        v0 = make_v0(**overrides)
        cascade = V0SelectionCascade(V0SelectionConfig())
        assert not cascade.accept(v0, v0.pos_track, v0.neg_track, collision)

    def test_tightening_threshold_shrinks_acceptance(self, collision):
        """Accepted set under a tighter radius cut is a subset of the looser one."""
        candidates = [make_v0(index=i, v0_radius=r) for i, r in enumerate([0.5, 1.0, 2.0, 5.0])]
        loose = V0SelectionCascade(V0SelectionConfig(radius=0.9))
        tight = V0SelectionCascade(V0SelectionConfig(radius=3.0))

        accepted_loose = {v.index for v in candidates
                          if loose.accept(v, v.pos_track, v.neg_track, collision)}
        accepted_tight = {v.index for v in candidates
                          if tight.accept(v, v.pos_track, v.neg_track, collision)}

        assert accepted_tight < accepted_loose
        assert accepted_loose == {1, 2, 3}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
