"""
K0s resolution event pipeline.

Per event: count the event, gate each candidate through the selection
cascade, optionally match it to MC truth, and accumulate mass, kinematics
and resolution histograms. Data and MC share this one class; the MC
behaviour is switched on by passing a truth matcher.
"""

import logging
from collections import Counter
from typing import Iterable, Optional

from k0s_resolution.domain.config import HistogramConfig, PipelineConfig
from k0s_resolution.domain.events import EventRecord, V0Candidate
from k0s_resolution.domain.statistics import ProcessingStatistics
from k0s_resolution.services.calculations import MassCalculator
from k0s_resolution.services.histograms import (
    EVENTS_BIN_ACCEPTED,
    EVENTS_BIN_CANDIDATES,
    EVENTS_BIN_PROCESSED,
    EVENTS_BIN_TRUTH_MATCHED,
    HistogramSink,
)
from k0s_resolution.services.selection import V0SelectionCascade
from k0s_resolution.services.truth import (
    CandidateResiduals,
    MatchFailure,
    ResidualCalculator,
    TruthMatch,
    TruthMatcher,
)


class K0sResolutionPipeline:
    """
    Turns event records into histogram fills.

    Holds no per-event state, so process_event may be called from several
    threads as long as the sink serialises its fills.
    """

    def __init__(
        self,
        sink: HistogramSink,
        cascade: V0SelectionCascade,
        mass_calculator: MassCalculator,
        histogram_config: HistogramConfig,
        truth_matcher: Optional[TruthMatcher] = None,
        residual_calculator: Optional[ResidualCalculator] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            sink: Histogram accumulator, histograms must already be booked
            cascade: Selection cascade
            mass_calculator: Stored or recomputed candidate mass
            histogram_config: Optional histogram switches
            truth_matcher: Enables the MC stage when given
            residual_calculator: Residuals for matched candidates, defaults
                to ResidualCalculator() in MC mode
        """
        self.sink = sink
        self.cascade = cascade
        self.mass_calculator = mass_calculator
        self.histogram_config = histogram_config
        self.truth_matcher = truth_matcher
        if truth_matcher is not None and residual_calculator is None:
            residual_calculator = ResidualCalculator()
        self.residual_calculator = residual_calculator
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(cls, config: PipelineConfig, sink: HistogramSink) -> "K0sResolutionPipeline":
        """Build the Data or MC variant selected in the task configuration."""
        return cls(
            sink=sink,
            cascade=V0SelectionCascade(config.v0_selection),
            mass_calculator=MassCalculator(config.histograms.mass_mode),
            histogram_config=config.histograms,
            truth_matcher=TruthMatcher() if config.tasks.is_mc else None,
        )

    @property
    def is_mc(self) -> bool:
        return self.truth_matcher is not None

    def process_events(self, events: Iterable[EventRecord]) -> ProcessingStatistics:
        """Process events sequentially and return the summed statistics."""
        total = ProcessingStatistics()
        for event in events:
            total = total + self.process_event(event)
        return total

    def process_event(self, event: EventRecord) -> ProcessingStatistics:
        """
        Process one collision and its candidates.

        The event counter is filled even when the event has no candidates.

        Args:
            event: Collision with its pre-filtered candidates

        Returns:
            Statistics for this event
        """
        self.sink.fill("h1_events", EVENTS_BIN_PROCESSED)

        counts: Counter = Counter()
        rejections: Counter = Counter()
        for v0 in event.v0s:
            self.sink.fill("h1_events", EVENTS_BIN_CANDIDATES)
            counts["candidates_seen"] += 1

            failed_cut = self.cascade.first_failure(v0, v0.pos_track, v0.neg_track, event.collision)
            if failed_cut is not None:
                rejections[failed_cut] += 1
                continue

            self.sink.fill("h1_events", EVENTS_BIN_ACCEPTED)
            counts["candidates_accepted"] += 1

            match = None
            residuals = None
            if self.is_mc:
                match, reason = self.truth_matcher.classify(v0, v0.pos_track, v0.neg_track)
                if match is None:
                    self.logger.debug(f"V0 {v0.index} dropped: {reason}")
                    counts[reason] += 1
                    continue
                self.sink.fill("h1_events", EVENTS_BIN_TRUTH_MATCHED)
                counts["candidates_truth_matched"] += 1
                residuals = self.residual_calculator.compute(v0, match.pos_truth, match.neg_truth)
                counts["undefined_residuals"] += residuals.undefined_count

            self._accumulate(v0, match, residuals)

        return ProcessingStatistics(
            events_processed=1,
            candidates_seen=counts["candidates_seen"],
            candidates_accepted=counts["candidates_accepted"],
            candidates_truth_matched=counts["candidates_truth_matched"],
            missing_truth=counts[MatchFailure.MISSING_TRUTH],
            species_mismatch=counts[MatchFailure.SPECIES_MISMATCH],
            undefined_residuals=counts["undefined_residuals"],
            rejections=tuple(sorted(rejections.items())),
        )

    def _accumulate(self, v0: V0Candidate, match: Optional[TruthMatch],
                    residuals: Optional[CandidateResiduals]) -> None:
        pos_track, neg_track = v0.pos_track, v0.neg_track
        mass = self.mass_calculator.mass(v0, pos_track, neg_track)

        if residuals is not None:
            self._fill_resolution(mass, residuals)

        self.sink.fill("h2_masspT", mass, v0.pt)
        self.sink.fill("h2_masseta", mass, v0.eta)
        self.sink.fill("h2_massphi", mass, v0.phi)

        if self.histogram_config.use_multidim_histo:
            values = [mass, v0.pt, v0.eta, v0.phi, pos_track.eta, neg_track.eta]
            if match is None:
                self.sink.fill("thn_mass", *values)
            elif residuals.positive.inv_pt is not None and residuals.negative.inv_pt is not None:
                self.sink.fill(
                    "thn_mass",
                    *values,
                    residuals.positive.inv_pt,
                    residuals.negative.inv_pt,
                    float(match.is_true_k0s),
                )

        if self.histogram_config.enable_tpc_plot:
            self.sink.fill("h3_tpc_vs_pid_hypothesis",
                           pos_track.tpc_inner_param, pos_track.tpc_signal,
                           pos_track.pid_for_tracking)
            self.sink.fill("h3_tpc_vs_pid_hypothesis",
                           -neg_track.tpc_inner_param, neg_track.tpc_signal,
                           neg_track.pid_for_tracking)

    def _fill_resolution(self, mass: float, residuals: CandidateResiduals) -> None:
        for sign, daughter in (("Pos", residuals.positive), ("Neg", residuals.negative)):
            truth = daughter.truth
            for component, relative, truth_value in (
                ("Pt", daughter.pt_rel, truth.pt),
                ("Px", daughter.px_rel, truth.px),
                ("Py", daughter.py_rel, truth.py),
                ("Pz", daughter.pz_rel, truth.pz),
            ):
                # undefined residuals are counted, not filled
                if relative is not None:
                    self.sink.fill(f"h2_gen{component}{sign}{component}Res", relative, truth_value)
            self.sink.fill(f"h2_mass{sign}PtRes", mass, daughter.pt)
