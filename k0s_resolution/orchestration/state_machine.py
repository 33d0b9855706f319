"""
State machine for pipeline execution.

Runs the handler of each state in turn and records how long every
state took.
"""

import logging
import time
from typing import Dict

from .context import PipelineContext
from .states import PipelineState, is_valid_transition
from .handlers.base import StateHandler

STATE_DURATIONS_KEY = "state_durations"
MAX_ITERATIONS = 100


class StateMachine:
    """
    Drives a PipelineContext from its initial state to COMPLETED or FAILED.

    Handler exceptions are caught here and turned into a FAILED context
    carrying the message and the state that raised.
    """

    def __init__(self, handlers: Dict[PipelineState, StateHandler]):
        """
        Initialize state machine.

        Args:
            handlers: Dict mapping states to their handlers
        """
        self.handlers = handlers
        self.logger = logging.getLogger(self.__class__.__name__)

        missing = {
            PipelineState.LOADING,
            PipelineState.PROCESSING,
            PipelineState.WRITING,
        } - set(handlers)
        if missing:
            self.logger.warning(
                f"Missing handlers for states: {sorted(str(s) for s in missing)}"
            )

    def run(self, initial_context: PipelineContext) -> PipelineContext:
        """
        Run until a terminal state is reached.

        Args:
            initial_context: Initial pipeline context

        Returns:
            Final pipeline context
        """
        context = initial_context
        durations: dict[str, float] = dict(context.custom_data.get(STATE_DURATIONS_KEY, {}))

        self.logger.info("=" * 60)
        self.logger.info("Starting pipeline execution")
        self.logger.info("=" * 60)

        for iteration in range(1, MAX_ITERATIONS + 1):
            if context.is_terminal:
                break

            state = context.current_state
            started = time.perf_counter()
            try:
                context = self._step(context)
            except Exception as e:
                self.logger.error(f"Error in state {state}: {e}", exc_info=True)
                context = context.with_error(
                    message=f"Error in {state}: {e}",
                    details={"iteration": iteration, "state": str(state)},
                )
            finally:
                durations[str(state)] = durations.get(str(state), 0.0) + (
                    time.perf_counter() - started
                )
        else:
            if not context.is_terminal:
                self.logger.error("State machine exceeded maximum iterations")
                context = context.with_error(
                    message="Pipeline exceeded maximum iterations",
                    details={"iterations": MAX_ITERATIONS},
                )

        context = context.with_custom_data(STATE_DURATIONS_KEY, durations)
        self._log_final_state(context)
        return context

    def _step(self, context: PipelineContext) -> PipelineContext:
        current_state = context.current_state
        handler = self.handlers.get(current_state)

        if handler is None:
            next_state = StateHandler.next_state_after(current_state)
            self.logger.warning(f"No handler for state {current_state}, moving on to {next_state}")
            return context.with_state(next_state)

        updated_context, next_state = handler.handle(context)
        if not is_valid_transition(current_state, next_state):
            self.logger.error(f"Invalid transition: {current_state} -> {next_state}")
            return context.with_error(
                message=f"Invalid state transition: {current_state} -> {next_state}"
            )

        self.logger.info(f"Transition: {current_state} -> {next_state}")
        return updated_context.with_state(next_state)

    def _log_final_state(self, context: PipelineContext):
        if context.is_successful:
            self.logger.info("Pipeline completed successfully")
        else:
            self.logger.error(f"Pipeline failed: {context.error_message}")

        for state, seconds in context.custom_data[STATE_DURATIONS_KEY].items():
            self.logger.info(f"  {state:12s} {seconds:8.2f}s")
        self.logger.info(f"Elapsed time: {context.elapsed_time:.1f}s")
        self.logger.info("=" * 60)
