"""
Unit tests for domain models.

Tests that configuration validates correctly and that records and
statistics are immutable.
"""

import pytest

from k0s_resolution.domain import (
    AxisConfig,
    ConfigurationError,
    DetectorMode,
    HistogramConfig,
    MassMode,
    OutputConfig,
    PipelineConfig,
    ProcessingStatistics,
    TaskConfig,
    TrackingPidHypothesis,
    V0SelectionConfig,
)
from conftest import make_collision, make_event, make_v0


class TestTaskConfig:
    """Tests for TaskConfig."""

    def test_data_is_default(self):
        """Test that data processing is the default variant."""
        tasks = TaskConfig()
        assert tasks.process_data
        assert not tasks.is_mc

    def test_mc_only(self):
        tasks = TaskConfig(process_data=False, process_mc=True)
        assert tasks.is_mc

    def test_both_variants_fail(self):
        """Test that enabling both variants raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="Exactly one"):
            TaskConfig(process_data=True, process_mc=True)

    def test_no_variant_fails(self):
        with pytest.raises(ConfigurationError, match="Exactly one"):
            TaskConfig(process_data=False, process_mc=False)


class TestV0SelectionConfig:
    """Tests for V0SelectionConfig validation and enum coercion."""

    def test_defaults(self):
        cfg = V0SelectionConfig()
        assert cfg.radius == 0.9
        assert cfg.rapidity == 0.5
        assert cfg.lifetime == 3.0
        assert cfg.its_ib_selection_pos is DetectorMode.NO_CONSTRAINT
        assert cfg.pid_hypo_neg is TrackingPidHypothesis.NO_CONSTRAINT

    def test_integer_modes_are_coerced(self):
        """Test that raw integers become enum members."""
        cfg = V0SelectionConfig(its_ib_selection_pos=1, tof_selection_neg=-1, pid_hypo_pos=3)
        assert cfg.its_ib_selection_pos is DetectorMode.REQUIRE
        assert cfg.tof_selection_neg is DetectorMode.EXCLUDE
        assert cfg.pid_hypo_pos is TrackingPidHypothesis.KAON

    def test_names_are_accepted(self):
        cfg = V0SelectionConfig(trd_selection_pos="require", pid_hypo_neg="PION")
        assert cfg.trd_selection_pos is DetectorMode.REQUIRE
        assert cfg.pid_hypo_neg is TrackingPidHypothesis.PION

    @pytest.mark.parametrize("option", [
        "its_ib_selection_pos", "its_ib_selection_neg",
        "tof_selection_pos", "tof_selection_neg",
        "trd_selection_pos", "trd_selection_neg",
    ])
    def test_invalid_detector_mode_fails(self, option):
        """Test that a mode outside {-1, 0, 1} is fatal at construction."""
        with pytest.raises(ConfigurationError, match=f"Invalid value for {option}"):
            V0SelectionConfig(**{option: 2})

    @pytest.mark.parametrize("value", [5, -2, "deuteron"])
    def test_invalid_pid_hypothesis_fails(self, value):
        with pytest.raises(ConfigurationError, match="pid_hypo_pos"):
            V0SelectionConfig(pid_hypo_pos=value)

    def test_bool_mode_fails(self):
        """Test that a boolean is not silently read as 0 or 1."""
        with pytest.raises(ConfigurationError, match="must be an integer"):
            V0SelectionConfig(tof_selection_pos=True)

    def test_negative_radius_fails(self):
        with pytest.raises(ConfigurationError, match="radius must be non-negative"):
            V0SelectionConfig(radius=-1.0)

    def test_config_is_immutable(self):
        cfg = V0SelectionConfig()
        with pytest.raises(Exception):  # FrozenInstanceError
            cfg.radius = 5.0


class TestHistogramConfig:
    """Tests for HistogramConfig axes."""

    def test_default_axes(self):
        cfg = HistogramConfig()
        assert cfg.axis("m_bins") == AxisConfig(200, 0.4, 0.6)
        assert cfg.axis("phi_bins") == AxisConfig(100, 0.0, 6.28)

    def test_partial_override_keeps_defaults(self):
        cfg = HistogramConfig(axes={"pt_bins": [50, 0, 5]})
        assert cfg.axis("pt_bins") == AxisConfig(50, 0.0, 5.0)
        assert cfg.axis("eta_bins") == AxisConfig(2, -1.0, 1.0)

    def test_unknown_axis_fails(self):
        with pytest.raises(ConfigurationError, match="Unknown histogram axes"):
            HistogramConfig(axes={"mass_binning": [10, 0, 1]})

    def test_malformed_axis_fails(self):
        with pytest.raises(ConfigurationError, match="must be \\[bins, low, high\\]"):
            HistogramConfig(axes={"pt_bins": [10, 0]})

    def test_inverted_edges_fail(self):
        with pytest.raises(ConfigurationError, match="must be above lower edge"):
            AxisConfig(10, 1.0, 0.0)


class TestOutputConfig:

    def test_zero_threads_fails(self):
        with pytest.raises(ConfigurationError, match="threads must be positive"):
            OutputConfig(threads=0)

    def test_non_root_filename_fails(self):
        with pytest.raises(ConfigurationError, match="must end with .root"):
            OutputConfig(output_filename="histograms.npz")


class TestPipelineConfig:
    """Tests for PipelineConfig.from_dict."""

    def test_from_dict(self):
        """Test building a full config from a YAML-like dict."""
        cfg = PipelineConfig.from_dict({
            "tasks": {"process_data": False, "process_mc": True},
            "input": {"path": "k0s_mc.root", "v0s_tree": "O2v0data"},
            "prefilter": {"cos_pa": 0.99, "event_selection": False},
            "v0_selection": {"its_ib_selection_pos": 1, "pid_hypo_neg": 2},
            "histograms": {"use_multidim_histo": True,
                           "compute_inv_mass_from_daughters": True},
            "output": {"threads": 4},
            "run_metadata": {"run_name": "mc_test"},
        })

        assert cfg.tasks.is_mc
        assert cfg.input_config.path == "k0s_mc.root"
        assert cfg.input_config.v0s_tree == "O2v0data"
        assert cfg.prefilter.cos_pa == 0.99
        assert not cfg.prefilter.event_selection
        assert cfg.v0_selection.its_ib_selection_pos is DetectorMode.REQUIRE
        assert cfg.histograms.use_multidim_histo
        assert cfg.histograms.mass_mode is MassMode.RECOMPUTED
        assert cfg.output.threads == 4
        assert cfg.run_name == "mc_test"

    def test_missing_input_path_fails(self):
        with pytest.raises(ConfigurationError, match="input.path is required"):
            PipelineConfig.from_dict({"tasks": {"process_data": True}})

    def test_unknown_option_fails(self):
        """Test that typos in a section are reported, not ignored."""
        with pytest.raises(ConfigurationError, match="Unknown options in v0_selection"):
            PipelineConfig.from_dict({
                "input": {"path": "data.root"},
                "v0_selection": {"raduis": 1.0},
            })

    def test_unknown_histogram_option_fails(self):
        with pytest.raises(ConfigurationError, match="Unknown options in histograms"):
            PipelineConfig.from_dict({
                "input": {"path": "data.root"},
                "histograms": {"use_multidim_hist": True},
            })

    @pytest.mark.parametrize("section,option", [
        ("tasks", "process_mc"),
        ("histograms", "enable_tpc_plot"),
        ("histograms", "compute_inv_mass_from_daughters"),
        ("prefilter", "event_selection"),
        ("output", "show_progress_bar"),
    ])
    def test_quoted_boolean_fails(self, section, option):
        """A quoted "false" is not silently read as true."""
        with pytest.raises(ConfigurationError, match=f"{option} must be true or false"):
            PipelineConfig.from_dict({
                "input": {"path": "data.root"},
                section: {option: "false"},
            })

    def test_invalid_mode_in_yaml_fails(self):
        with pytest.raises(ConfigurationError, match="tof_selection_neg"):
            PipelineConfig.from_dict({
                "input": {"path": "data.root"},
                "v0_selection": {"tof_selection_neg": 7},
            })


class TestRecords:
    """Tests for event records."""

    def test_distance_over_momentum(self):
        v0 = make_v0(x=3.0, y=4.0, z=0.0, px=0.0, py=0.0, pz=2.0)
        assert v0.p == pytest.approx(2.0)
        assert v0.distance_over_momentum(make_collision()) == pytest.approx(2.5)

    def test_daughter_pt(self):
        v0 = make_v0(px_pos=3.0, py_pos=4.0, px_neg=-0.6, py_neg=0.8)
        assert v0.positive_pt == pytest.approx(5.0)
        assert v0.negative_pt == pytest.approx(1.0)

    def test_data_records_have_no_truth(self):
        v0 = make_v0()
        assert not v0.has_mc_particle
        assert not v0.pos_track.has_mc_particle

    def test_event_candidate_count(self):
        assert make_event().candidate_count == 0
        assert make_event(make_v0(), make_v0(index=1)).candidate_count == 2

    def test_record_is_immutable(self):
        v0 = make_v0()
        with pytest.raises(Exception):  # FrozenInstanceError
            v0.mass = 1.0


class TestProcessingStatistics:
    """Tests for ProcessingStatistics."""

    def test_add(self):
        """Test that statistics and rejection counts are summed."""
        a = ProcessingStatistics(
            events_processed=1, candidates_seen=3, candidates_accepted=1,
            rejections=(("radius", 1), ("rapidity", 1)),
        )
        b = ProcessingStatistics(
            events_processed=2, candidates_seen=2, candidates_accepted=2,
            candidates_truth_matched=1, rejections=(("radius", 2),),
        )
        total = a + b

        assert total.events_processed == 3
        assert total.candidates_seen == 5
        assert total.candidates_accepted == 3
        assert total.candidates_truth_matched == 1
        assert total.rejections_for("radius") == 3
        assert total.rejections_for("rapidity") == 1
        assert total.rejections_for("tof_pos") == 0

    def test_acceptance(self):
        stats = ProcessingStatistics(candidates_seen=4, candidates_accepted=1)
        assert stats.acceptance == pytest.approx(25.0)
        assert ProcessingStatistics().acceptance == 0.0

    def test_accepted_exceeding_seen_fails(self):
        with pytest.raises(ValueError, match="cannot exceed"):
            ProcessingStatistics(candidates_seen=1, candidates_accepted=2)

    def test_negative_count_fails(self):
        with pytest.raises(ValueError, match="events_processed must be non-negative"):
            ProcessingStatistics(events_processed=-1)

    def test_to_dict(self):
        stats = ProcessingStatistics(
            events_processed=1, candidates_seen=2, candidates_accepted=1,
            rejections=(("lifetime", 1),),
        )
        d = stats.to_dict()
        assert d["acceptance"] == "50.0%"
        assert d["rejections"] == {"lifetime": 1}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
