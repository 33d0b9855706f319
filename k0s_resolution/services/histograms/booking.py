"""
Histogram booking for the K0s resolution analysis.

Names follow the output layout of the analysis: ``h1_events`` counter,
mass vs kinematics, optional multidimensional and TPC diagnostic
histograms, and the daughter resolution histograms in MC mode.
"""
from hist import axis as hax

from k0s_resolution.domain.config import AxisConfig, HistogramConfig
from k0s_resolution.services.histograms.registry import HistogramRegistry

# Bin centres of the h1_events counter
EVENTS_BIN_PROCESSED = 0.5
EVENTS_BIN_CANDIDATES = 1.5
EVENTS_BIN_ACCEPTED = 2.5
EVENTS_BIN_TRUTH_MATCHED = 3.5

DAUGHTER_RESOLUTION_HISTOGRAMS = tuple(
    f"h2_gen{component}{sign}{component}Res"
    for sign in ("Pos", "Neg")
    for component in ("Pt", "Px", "Py", "Pz")
)


def _regular(cfg: AxisConfig, name: str, label: str) -> hax.Regular:
    return hax.Regular(cfg.bins, cfg.low, cfg.high, name=name, label=label)


def book_histograms(config: HistogramConfig, is_mc: bool,
                    registry: HistogramRegistry = None) -> HistogramRegistry:
    """
    Book every histogram the pipeline will fill.

    Args:
        config: Histogram options and binning
        is_mc: Book the MC resolution histograms and MC axes of thn_mass
        registry: Registry to book into, a new one by default

    Returns:
        The registry
    """
    registry = registry if registry is not None else HistogramRegistry()

    event_axis = hax.Regular(10, 0, 10, name="events", label="Events")
    m_axis = _regular(config.axis("m_bins"), "mass", "m (GeV/c^2)")
    pt_axis = _regular(config.axis("pt_bins"), "pt", "p_T (GeV/c)")
    pt_res_axis = _regular(config.axis("pt_res_bins"), "pt_res", "Delta p_T (GeV/c)")
    pt_res_rel_axis = _regular(
        config.axis("pt_res_rel_bins"), "pt_res_rel", "(p_T^rec - p_T^MC)/p_T^MC"
    )
    eta_axis = _regular(config.axis("eta_bins"), "eta", "eta")
    phi_axis = _regular(config.axis("phi_bins"), "phi", "phi")

    registry.add("h1_events", event_axis)

    if is_mc:
        registry.add("h2_massPosPtRes", m_axis, pt_res_axis)
        registry.add("h2_massNegPtRes", m_axis, pt_res_axis)
        for name in DAUGHTER_RESOLUTION_HISTOGRAMS:
            registry.add(name, pt_res_rel_axis, pt_axis)

    registry.add("h2_masspT", m_axis, pt_axis)
    registry.add("h2_masseta", m_axis, eta_axis)
    registry.add("h2_massphi", m_axis, phi_axis)

    if config.use_multidim_histo:
        eta_daughters = config.axis("eta_bins_daughters")
        axes = [
            m_axis, pt_axis, eta_axis, phi_axis,
            _regular(eta_daughters, "eta_pos", "eta pos."),
            _regular(eta_daughters, "eta_neg", "eta neg."),
        ]
        if is_mc:
            inv_pt_res = config.axis("inv_pt_res_bins")
            axes += [
                _regular(inv_pt_res, "inv_pt_res_pos", "1/p_T - 1/p_T^MC pos. (GeV/c)^-1"),
                _regular(inv_pt_res, "inv_pt_res_neg", "1/p_T - 1/p_T^MC neg. (GeV/c)^-1"),
                hax.Regular(2, -0.5, 1.5, name="true_k0", label="True K0"),
            ]
        registry.add("thn_mass", *axes, sparse=True)

    if config.enable_tpc_plot:
        registry.add(
            "h3_tpc_vs_pid_hypothesis",
            hax.Regular(200, -10.0, 10.0, name="p_over_z", label="p/Z (GeV/c)"),
            hax.Regular(1000, 0.0, 1000.0, name="dedx", label="dE/dx (a.u.)"),
            hax.Regular(10, -0.5, 9.5, name="pid_hypothesis", label="PID hypothesis"),
        )

    return registry
