"""
ProcessingHandler - Handles the PROCESSING state.

Books the histograms and runs the event pipeline over all loaded events.
"""

from datetime import datetime

from k0s_resolution.orchestration.context import PipelineContext
from k0s_resolution.orchestration.states import PipelineState
from k0s_resolution.services.histograms import HistogramRegistry, book_histograms
from k0s_resolution.services.pipelines import K0sResolutionPipeline, ParallelEventRunner
from .base import StateHandler


class ProcessingHandler(StateHandler):
    """
    Handler for PROCESSING state.

    The Data or MC variant of the pipeline is chosen from the task
    configuration.
    """

    def handle(self, context: PipelineContext) -> tuple[PipelineContext, PipelineState]:
        self._log_state_entry(context)
        config = context.config
        start = datetime.now()

        registry = book_histograms(config.histograms, config.tasks.is_mc, HistogramRegistry())
        pipeline = K0sResolutionPipeline.from_config(config, registry)
        runner = ParallelEventRunner(
            pipeline,
            max_threads=config.output.threads,
            show_progress=config.output.show_progress_bar,
        )

        mode = "MC" if pipeline.is_mc else "data"
        self.logger.info(f"Processing {len(context.events)} events in {mode} mode")
        stats = runner.run(context.events)

        elapsed = (datetime.now() - start).total_seconds()
        self.logger.info(
            f"Processed {stats.events_processed} events: "
            f"{stats.candidates_accepted}/{stats.candidates_seen} candidates accepted "
            f"({stats.acceptance:.1f}%) in {elapsed:.1f}s"
        )
        if pipeline.is_mc:
            self.logger.info(
                f"Truth-matched {stats.candidates_truth_matched} candidates "
                f"(missing truth: {stats.missing_truth}, "
                f"species mismatch: {stats.species_mismatch}, "
                f"undefined residuals: {stats.undefined_residuals})"
            )

        next_state = self._determine_next_state(context)
        self._log_state_exit(context, next_state)
        return context.with_registry(registry).with_processing_stats(stats), next_state
