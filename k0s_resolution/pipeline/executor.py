"""
PipelineExecutor - High-level pipeline orchestrator.

Wires together the services and executes the state machine.
"""

import logging

from k0s_resolution.domain.config import PipelineConfig
from k0s_resolution.orchestration import PipelineState, PipelineContext, StateMachine
from k0s_resolution.orchestration.handlers import (
    LoadingHandler,
    ProcessingHandler,
    OutputHandler,
)
from k0s_resolution.services.ingestion import TableReader


class PipelineExecutor:
    """
    High-level pipeline executor.

    Responsible for:
    1. Creating the services with dependency injection
    2. Building the state machine with handlers
    3. Running the pipeline
    """

    def __init__(self, config: PipelineConfig):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)
        self.state_machine = self._build_state_machine()

    def run(self) -> PipelineContext:
        """Execute the pipeline and return final context."""
        self.logger.info("Initializing pipeline execution")
        initial_context = self._create_initial_context()
        final_context = self.state_machine.run(initial_context)
        self._log_results(final_context)
        return final_context

    def _create_initial_context(self) -> PipelineContext:
        initial_state = PipelineState.LOADING
        self.logger.info(f"Starting state: {initial_state}")
        return PipelineContext(config=self.config, current_state=initial_state)

    def _build_state_machine(self) -> StateMachine:
        self.logger.info("Building state machine with services")
        table_reader = TableReader(
            input_config=self.config.input_config,
            prefilter=self.config.prefilter,
            is_mc=self.config.tasks.is_mc,
        )
        handlers = {
            PipelineState.LOADING: LoadingHandler(table_reader),
            PipelineState.PROCESSING: ProcessingHandler(),
            PipelineState.WRITING: OutputHandler(),
        }
        return StateMachine(handlers)

    def _log_results(self, context: PipelineContext):
        self.logger.info("=" * 60)
        self.logger.info("Pipeline Execution Summary")
        self.logger.info("=" * 60)

        summary = context.get_summary()
        for key, value in summary.items():
            self.logger.info(f"{key:30s}: {value}")

        if context.processing_stats:
            self.logger.info("Processing Statistics:")
            for key, value in context.processing_stats.to_dict().items():
                self.logger.info(f"{key:30s}: {value}")

        for path in context.output_files:
            self.logger.info(f"Output: {path}")

        self.logger.info("=" * 60)
