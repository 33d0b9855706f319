"""
Pipeline states.

Explicit state enumeration for the pipeline state machine.
"""

from enum import Enum, auto


class PipelineState(Enum):
    """
    All possible states in the pipeline execution.

    The run is linear: read the input, process the events, write the
    histograms. Any state may fail.
    """

    # Initial state
    IDLE = auto()

    # Ingestion and pre-filter
    LOADING = auto()

    # Event pipeline
    PROCESSING = auto()

    # Histogram and statistics output
    WRITING = auto()

    # Terminal states
    COMPLETED = auto()
    FAILED = auto()

    def is_terminal(self) -> bool:
        """Check if this is a terminal state."""
        return self in (PipelineState.COMPLETED, PipelineState.FAILED)

    def __str__(self) -> str:
        return self.name


# Valid state transitions
VALID_TRANSITIONS = {
    PipelineState.IDLE: {PipelineState.LOADING, PipelineState.FAILED},
    PipelineState.LOADING: {PipelineState.PROCESSING, PipelineState.FAILED},
    PipelineState.PROCESSING: {PipelineState.WRITING, PipelineState.FAILED},
    PipelineState.WRITING: {PipelineState.COMPLETED, PipelineState.FAILED},
    PipelineState.COMPLETED: set(),  # Terminal
    PipelineState.FAILED: set(),     # Terminal
}

# Default successor of each non-terminal state
NEXT_STATE = {
    PipelineState.IDLE: PipelineState.LOADING,
    PipelineState.LOADING: PipelineState.PROCESSING,
    PipelineState.PROCESSING: PipelineState.WRITING,
    PipelineState.WRITING: PipelineState.COMPLETED,
}


def is_valid_transition(from_state: PipelineState, to_state: PipelineState) -> bool:
    """
    Check if a state transition is valid.

    Args:
        from_state: Current state
        to_state: Target state

    Returns:
        True if transition is valid
    """
    return to_state in VALID_TRANSITIONS.get(from_state, set())
