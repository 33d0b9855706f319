"""
Pipeline context.

Immutable context object passed between state handlers.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Optional

from k0s_resolution.domain.config import PipelineConfig
from k0s_resolution.domain.events import EventRecord
from k0s_resolution.domain.statistics import ProcessingStatistics
from k0s_resolution.services.histograms import HistogramRegistry
from .states import PipelineState


@dataclass(frozen=True)
class PipelineContext:
    """
    Immutable context for pipeline execution.

    Each state handler returns a new context with updated fields.
    """

    # Configuration
    config: PipelineConfig

    # Current state
    current_state: PipelineState

    # Execution metadata
    start_time: datetime = field(default_factory=datetime.now)

    # Data accumulated during pipeline
    events: tuple[EventRecord, ...] = field(default_factory=tuple)
    registry: Optional[HistogramRegistry] = None
    output_files: list[str] = field(default_factory=list)

    # Statistics
    processing_stats: Optional[ProcessingStatistics] = None

    # Error tracking
    error_message: Optional[str] = None
    error_details: Optional[dict] = None

    # Custom data (for extension)
    custom_data: dict[str, Any] = field(default_factory=dict)

    def with_state(self, new_state: PipelineState) -> 'PipelineContext':
        return replace(self, current_state=new_state)

    def with_events(self, events) -> 'PipelineContext':
        """
        Return new context with the loaded events.

        Args:
            events: Pre-filtered event records

        Returns:
            New PipelineContext with events
        """
        return replace(self, events=tuple(events))

    def with_registry(self, registry: HistogramRegistry) -> 'PipelineContext':
        return replace(self, registry=registry)

    def with_processing_stats(self, stats: ProcessingStatistics) -> 'PipelineContext':
        return replace(self, processing_stats=stats)

    def with_output_files(self, files: list[str]) -> 'PipelineContext':
        return replace(self, output_files=list(files))

    def with_error(self, message: str, details: Optional[dict] = None) -> 'PipelineContext':
        """
        Return new context with error information.

        Args:
            message: Error message
            details: Optional error details dict

        Returns:
            New PipelineContext in the FAILED state
        """
        return replace(
            self,
            current_state=PipelineState.FAILED,
            error_message=message,
            error_details=details or {}
        )

    def with_custom_data(self, key: str, value: Any) -> 'PipelineContext':
        new_custom = self.custom_data.copy()
        new_custom[key] = value
        return replace(self, custom_data=new_custom)

    @property
    def elapsed_time(self) -> float:
        """Get elapsed time in seconds."""
        return (datetime.now() - self.start_time).total_seconds()

    @property
    def is_terminal(self) -> bool:
        return self.current_state.is_terminal()

    @property
    def is_successful(self) -> bool:
        return self.current_state == PipelineState.COMPLETED

    @property
    def has_error(self) -> bool:
        return self.current_state == PipelineState.FAILED

    def get_summary(self) -> dict:
        """
        Get summary of pipeline execution.

        Returns:
            Dict with execution summary
        """
        return {
            "state": str(self.current_state),
            "elapsed_time_sec": self.elapsed_time,
            "start_time": self.start_time.isoformat(),
            "events_loaded": len(self.events),
            "output_files_count": len(self.output_files),
            "has_error": self.has_error,
            "error_message": self.error_message,
            "is_successful": self.is_successful,
        }
