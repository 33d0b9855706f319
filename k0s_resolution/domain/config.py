"""
Configuration domain models.

Validated configuration objects for the K0s resolution pipeline.
Enumerated options are converted to enums here, once, so that the
selection cascade only ever sees values that are already valid.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional


class ConfigurationError(ValueError):
    """Raised when a configuration value is invalid. Always fatal."""


class DetectorMode(IntEnum):
    """Tri-state selection on the presence of a detector signal."""

    EXCLUDE = -1
    NO_CONSTRAINT = 0
    REQUIRE = 1

    @classmethod
    def parse(cls, value, option: str) -> "DetectorMode":
        """
        Convert a raw configuration value into a DetectorMode.

        Args:
            value: Raw value (int, enum member or member name)
            option: Name of the option, used in the error message

        Returns:
            Matching DetectorMode

        Raises:
            ConfigurationError: If the value is not one of -1, 0, 1
        """
        return _parse_int_enum(cls, value, option)


class TrackingPidHypothesis(IntEnum):
    """PID hypothesis used in tracking. NO_CONSTRAINT disables the cut."""

    NO_CONSTRAINT = -1
    ELECTRON = 0
    MUON = 1
    PION = 2
    KAON = 3
    PROTON = 4

    @classmethod
    def parse(cls, value, option: str) -> "TrackingPidHypothesis":
        """Convert a raw configuration value into a TrackingPidHypothesis."""
        return _parse_int_enum(cls, value, option)


class MassMode(Enum):
    """How the candidate invariant mass is obtained."""

    STORED = "stored"
    RECOMPUTED = "recomputed"


def _parse_int_enum(enum_cls, value, option: str):
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, bool):
        raise ConfigurationError(f"{option} must be an integer, got {value!r}")
    if isinstance(value, str):
        name = value.strip().upper()
        if name in enum_cls.__members__:
            return enum_cls[name]
        try:
            value = int(value)
        except ValueError:
            raise ConfigurationError(f"Invalid value for {option}: {value!r}") from None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(f"{m.value} ({m.name})" for m in enum_cls)
        raise ConfigurationError(
            f"Invalid value for {option}: {value!r}. Allowed: {allowed}"
        ) from None


def _parse_bool(value, option: str) -> bool:
    # strings such as "false" are rejected
    if isinstance(value, bool):
        return value
    raise ConfigurationError(f"{option} must be true or false, got {value!r}")


@dataclass(frozen=True)
class TaskConfig:
    """Configuration for which pipeline variant to run."""

    process_data: bool = True
    process_mc: bool = False

    def __post_init__(self):
        """Validate that exactly one variant is selected."""
        if self.process_data == self.process_mc:
            raise ConfigurationError(
                "Exactly one of process_data / process_mc must be enabled, "
                f"got process_data={self.process_data}, process_mc={self.process_mc}"
            )

    @property
    def is_mc(self) -> bool:
        return self.process_mc


@dataclass(frozen=True)
class PreFilterConfig:
    """Coarse event and V0 cuts applied before the selection cascade."""

    cos_pa: float = 0.995
    dca_v0_daughters: float = 1.0
    dca_pos_to_pv: float = 0.1
    dca_neg_to_pv: float = 0.1
    cut_z_vertex: float = 10.0
    event_selection: bool = True

    def __post_init__(self):
        """Validate pre-filter thresholds."""
        _parse_bool(self.event_selection, "prefilter.event_selection")
        if not -1.0 <= self.cos_pa <= 1.0:
            raise ConfigurationError(f"cos_pa must be within [-1, 1], got {self.cos_pa}")
        if self.dca_v0_daughters <= 0:
            raise ConfigurationError(
                f"dca_v0_daughters must be positive, got {self.dca_v0_daughters}"
            )
        if self.dca_pos_to_pv < 0 or self.dca_neg_to_pv < 0:
            raise ConfigurationError("DCA-to-PV thresholds must be non-negative")
        if self.cut_z_vertex <= 0:
            raise ConfigurationError(f"cut_z_vertex must be positive, got {self.cut_z_vertex}")


@dataclass(frozen=True)
class V0SelectionConfig:
    """
    Thresholds and modes of the V0 selection cascade.

    Raw integers for the detector and PID options are accepted and
    converted in __post_init__; anything outside the enumerations is a
    ConfigurationError raised at construction time.
    """

    radius: float = 0.9
    rapidity: float = 0.5
    lifetime: float = 3.0
    max_tpc_n_sigma: float = 10.0
    its_ib_selection_pos: DetectorMode = DetectorMode.NO_CONSTRAINT
    its_ib_selection_neg: DetectorMode = DetectorMode.NO_CONSTRAINT
    tof_selection_pos: DetectorMode = DetectorMode.NO_CONSTRAINT
    tof_selection_neg: DetectorMode = DetectorMode.NO_CONSTRAINT
    trd_selection_pos: DetectorMode = DetectorMode.NO_CONSTRAINT
    trd_selection_neg: DetectorMode = DetectorMode.NO_CONSTRAINT
    pid_hypo_pos: TrackingPidHypothesis = TrackingPidHypothesis.NO_CONSTRAINT
    pid_hypo_neg: TrackingPidHypothesis = TrackingPidHypothesis.NO_CONSTRAINT
    extra_cut_tpc_clusters: float = -1.0

    def __post_init__(self):
        """Validate thresholds and coerce enumerated options."""
        for name in (
            "its_ib_selection_pos", "its_ib_selection_neg",
            "tof_selection_pos", "tof_selection_neg",
            "trd_selection_pos", "trd_selection_neg",
        ):
            object.__setattr__(self, name, DetectorMode.parse(getattr(self, name), name))
        for name in ("pid_hypo_pos", "pid_hypo_neg"):
            object.__setattr__(
                self, name, TrackingPidHypothesis.parse(getattr(self, name), name)
            )

        if self.radius < 0:
            raise ConfigurationError(f"radius must be non-negative, got {self.radius}")
        if self.rapidity <= 0:
            raise ConfigurationError(f"rapidity must be positive, got {self.rapidity}")
        if self.lifetime <= 0:
            raise ConfigurationError(f"lifetime must be positive, got {self.lifetime}")
        if self.max_tpc_n_sigma <= 0:
            raise ConfigurationError(
                f"max_tpc_n_sigma must be positive, got {self.max_tpc_n_sigma}"
            )


@dataclass(frozen=True)
class AxisConfig:
    """Regular binning: (bins, low, high)."""

    bins: int
    low: float
    high: float

    def __post_init__(self):
        if self.bins <= 0:
            raise ConfigurationError(f"axis bins must be positive, got {self.bins}")
        if self.high <= self.low:
            raise ConfigurationError(
                f"axis upper edge ({self.high}) must be above lower edge ({self.low})"
            )

    @classmethod
    def from_value(cls, value, option: str) -> "AxisConfig":
        if isinstance(value, AxisConfig):
            return value
        if isinstance(value, dict):
            value = (value.get("bins"), value.get("low"), value.get("high"))
        if not isinstance(value, (list, tuple)) or len(value) != 3:
            raise ConfigurationError(
                f"{option} must be [bins, low, high], got {value!r}"
            )
        try:
            return cls(bins=int(value[0]), low=float(value[1]), high=float(value[2]))
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid binning for {option}: {e}") from None


DEFAULT_AXES = {
    "m_bins": AxisConfig(200, 0.4, 0.6),
    "pt_bins": AxisConfig(200, 0.0, 10.0),
    "pt_res_bins": AxisConfig(200, -1.2, 1.2),
    "pt_res_rel_bins": AxisConfig(200, -0.2, 0.2),
    "inv_pt_res_bins": AxisConfig(200, -1.2, 1.2),
    "eta_bins": AxisConfig(2, -1.0, 1.0),
    "eta_bins_daughters": AxisConfig(100, -1.0, 1.0),
    "phi_bins": AxisConfig(100, 0.0, 6.28),
}

HISTOGRAM_OPTIONS = {
    "use_multidim_histo", "enable_tpc_plot", "compute_inv_mass_from_daughters", "axes",
}


@dataclass(frozen=True)
class HistogramConfig:
    """Which optional histograms are booked and how axes are binned."""

    use_multidim_histo: bool = False
    enable_tpc_plot: bool = False
    mass_mode: MassMode = MassMode.STORED
    axes: dict[str, AxisConfig] = field(default_factory=lambda: dict(DEFAULT_AXES))

    def __post_init__(self):
        """Validate axes and fill in defaults for missing ones."""
        if not isinstance(self.mass_mode, MassMode):
            raise ConfigurationError(f"mass_mode must be a MassMode, got {self.mass_mode!r}")
        unknown = set(self.axes) - set(DEFAULT_AXES)
        if unknown:
            raise ConfigurationError(f"Unknown histogram axes: {sorted(unknown)}")
        merged = dict(DEFAULT_AXES)
        for name, value in self.axes.items():
            merged[name] = AxisConfig.from_value(value, name)
        object.__setattr__(self, "axes", merged)

    def axis(self, name: str) -> AxisConfig:
        return self.axes[name]


@dataclass(frozen=True)
class InputConfig:
    """Location and tree names of the input tables."""

    path: str
    collisions_tree: str = "collisions"
    tracks_tree: str = "tracks"
    v0s_tree: str = "v0s"
    mc_particles_tree: str = "mc_particles"

    def __post_init__(self):
        if not self.path:
            raise ConfigurationError("input path cannot be empty")


@dataclass(frozen=True)
class OutputConfig:
    """Where and how results are written."""

    output_dir: str = "./output/histograms"
    output_filename: str = "k0s_resolution.root"
    stats_dir: str = "./output/logs"
    threads: int = 1
    show_progress_bar: bool = True

    def __post_init__(self):
        _parse_bool(self.show_progress_bar, "output.show_progress_bar")
        if self.threads <= 0:
            raise ConfigurationError(f"threads must be positive, got {self.threads}")
        if not self.output_filename.endswith(".root"):
            raise ConfigurationError(
                f"output_filename must end with .root, got {self.output_filename}"
            )


@dataclass(frozen=True)
class PipelineConfig:
    """
    Complete pipeline configuration.

    Immutable configuration object validated at creation.
    """

    tasks: TaskConfig
    input_config: InputConfig
    prefilter: PreFilterConfig = field(default_factory=PreFilterConfig)
    v0_selection: V0SelectionConfig = field(default_factory=V0SelectionConfig)
    histograms: HistogramConfig = field(default_factory=HistogramConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    run_name: str = "k0s_resolution"
    base_output_dir: str = "./output"

    @classmethod
    def from_dict(cls, config_dict: dict) -> 'PipelineConfig':
        """
        Create PipelineConfig from a dictionary (e.g., loaded from YAML).

        Args:
            config_dict: Dictionary with configuration values

        Returns:
            Validated PipelineConfig instance

        Raises:
            ConfigurationError: If any section is missing or invalid
        """
        tasks_dict = config_dict.get("tasks", {})
        tasks = TaskConfig(
            process_data=_parse_bool(tasks_dict.get("process_data", True), "tasks.process_data"),
            process_mc=_parse_bool(tasks_dict.get("process_mc", False), "tasks.process_mc"),
        )

        input_dict = config_dict.get("input", {})
        if "path" not in input_dict:
            raise ConfigurationError("input.path is required")
        input_config = InputConfig(
            path=input_dict["path"],
            collisions_tree=input_dict.get("collisions_tree", "collisions"),
            tracks_tree=input_dict.get("tracks_tree", "tracks"),
            v0s_tree=input_dict.get("v0s_tree", "v0s"),
            mc_particles_tree=input_dict.get("mc_particles_tree", "mc_particles"),
        )

        prefilter = _build_section(PreFilterConfig, config_dict.get("prefilter", {}), "prefilter")
        v0_selection = _build_section(
            V0SelectionConfig, config_dict.get("v0_selection", {}), "v0_selection"
        )

        hist_dict = dict(config_dict.get("histograms", {}))
        unknown = set(hist_dict) - HISTOGRAM_OPTIONS
        if unknown:
            raise ConfigurationError(f"Unknown options in histograms: {sorted(unknown)}")
        compute_from_daughters = _parse_bool(
            hist_dict.get("compute_inv_mass_from_daughters", False),
            "histograms.compute_inv_mass_from_daughters",
        )
        histograms = HistogramConfig(
            use_multidim_histo=_parse_bool(
                hist_dict.get("use_multidim_histo", False), "histograms.use_multidim_histo"
            ),
            enable_tpc_plot=_parse_bool(
                hist_dict.get("enable_tpc_plot", False), "histograms.enable_tpc_plot"
            ),
            mass_mode=MassMode.RECOMPUTED if compute_from_daughters else MassMode.STORED,
            axes=dict(hist_dict.get("axes") or {}),
        )

        output = _build_section(OutputConfig, config_dict.get("output", {}), "output")

        run_metadata = config_dict.get("run_metadata", {})

        return cls(
            tasks=tasks,
            input_config=input_config,
            prefilter=prefilter,
            v0_selection=v0_selection,
            histograms=histograms,
            output=output,
            run_name=run_metadata.get("run_name", "k0s_resolution"),
            base_output_dir=run_metadata.get("base_output_dir", "./output"),
        )


def _build_section(section_cls, values: dict, section: str):
    known = set(section_cls.__dataclass_fields__)
    unknown = set(values) - known
    if unknown:
        raise ConfigurationError(f"Unknown options in {section}: {sorted(unknown)}")
    return section_cls(**values)
