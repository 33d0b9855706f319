"""
OutputHandler - Handles the WRITING state.

Writes the filled histograms and a JSON statistics summary.
"""

import json
import os

from k0s_resolution.orchestration.context import PipelineContext
from k0s_resolution.orchestration.states import PipelineState
from k0s_resolution.services.histograms import write_registry
from .base import StateHandler


class OutputHandler(StateHandler):
    """Handler for WRITING state."""

    STATS_FILENAME = "processing_stats.json"

    def handle(self, context: PipelineContext) -> tuple[PipelineContext, PipelineState]:
        self._log_state_entry(context)

        if context.registry is None:
            raise RuntimeError("No histograms to write, PROCESSING did not run")

        output = context.config.output
        root_path = os.path.join(output.output_dir, output.output_filename)
        written = write_registry(context.registry, root_path)

        stats_path = self._save_stats(context, output.stats_dir)
        written.append(stats_path)

        next_state = self._determine_next_state(context)
        self._log_state_exit(context, next_state)
        return context.with_output_files(written), next_state

    def _save_stats(self, context: PipelineContext, stats_dir: str) -> str:
        stats = {
            "run_name": context.config.run_name,
            "mode": "mc" if context.config.tasks.is_mc else "data",
            "summary": context.get_summary(),
            "histograms": context.registry.names,
        }
        if context.processing_stats:
            stats["processing"] = context.processing_stats.to_dict()

        os.makedirs(stats_dir, exist_ok=True)
        stats_path = os.path.join(stats_dir, self.STATS_FILENAME)
        with open(stats_path, "w") as f:
            json.dump(stats, f, indent=2, default=str)

        self.logger.info(f"Saved processing stats to: {stats_path}")
        return stats_path
