"""
LoadingHandler - Handles the LOADING state.

Reads the input tables and builds the pre-filtered event records.
"""

from datetime import datetime

from k0s_resolution.orchestration.context import PipelineContext
from k0s_resolution.orchestration.states import PipelineState
from k0s_resolution.services.ingestion import TableReader
from .base import StateHandler


class LoadingHandler(StateHandler):
    """Handler for LOADING state."""

    def __init__(self, table_reader: TableReader):
        super().__init__()
        self.table_reader = table_reader

    def handle(self, context: PipelineContext) -> tuple[PipelineContext, PipelineState]:
        self._log_state_entry(context)
        start = datetime.now()

        events = self.table_reader.load()
        candidates = sum(event.candidate_count for event in events)

        elapsed = (datetime.now() - start).total_seconds()
        self.logger.info(
            f"Loaded {len(events)} events with {candidates} candidates in {elapsed:.1f}s"
        )

        next_state = self._determine_next_state(context)
        self._log_state_exit(context, next_state)
        return context.with_events(events), next_state
