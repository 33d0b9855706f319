"""
Base state handler.

Abstract base class for all state handlers.
"""

from abc import ABC, abstractmethod
import logging

from k0s_resolution.orchestration.context import PipelineContext
from k0s_resolution.orchestration.states import NEXT_STATE, PipelineState


class StateHandler(ABC):
    """
    Base class for state handlers.

    Each state handler implements the logic for transitioning
    from one state to the next.
    """

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def handle(self, context: PipelineContext) -> tuple[PipelineContext, PipelineState]:
        """
        Handle the current state and determine next state.

        Args:
            context: Current pipeline context

        Returns:
            Tuple of (updated_context, next_state)

        Raises:
            Exception: If state handling fails
        """

    @staticmethod
    def next_state_after(state: PipelineState) -> PipelineState:
        return NEXT_STATE.get(state, PipelineState.COMPLETED)

    def _determine_next_state(self, context: PipelineContext) -> PipelineState:
        return self.next_state_after(context.current_state)

    def _log_state_entry(self, context: PipelineContext):
        self.logger.info(f"Entering state: {context.current_state}")

    def _log_state_exit(self, context: PipelineContext, next_state: PipelineState):
        self.logger.info(f"Exiting state: {context.current_state} -> {next_state}")
