"""
ParallelEventRunner - Spreads event processing over a thread pool.

Events are independent; the histogram registry serialises the fills.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from contextlib import nullcontext
from typing import Sequence

from tqdm import tqdm

from k0s_resolution.domain.events import EventRecord
from k0s_resolution.domain.statistics import ProcessingStatistics
from .k0s_pipeline import K0sResolutionPipeline


class ParallelEventRunner:
    """
    Runs a K0sResolutionPipeline over many events concurrently.

    Events are submitted in chunks so that a large input does not create
    one future per event.
    """

    def __init__(
        self,
        pipeline: K0sResolutionPipeline,
        max_threads: int = 1,
        chunk_size: int = 1000,
        show_progress: bool = True,
    ):
        if max_threads <= 0:
            raise ValueError(f"max_threads must be positive, got {max_threads}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        self.pipeline = pipeline
        self.max_threads = max_threads
        self.chunk_size = chunk_size
        self.show_progress = show_progress
        self.logger = logging.getLogger(self.__class__.__name__)

    def run(self, events: Sequence[EventRecord]) -> ProcessingStatistics:
        """
        Process all events and return the summed statistics.

        Exceptions raised while processing a chunk propagate to the caller.
        """
        chunks = [
            events[start:start + self.chunk_size]
            for start in range(0, len(events), self.chunk_size)
        ]
        self.logger.info(
            f"Processing {len(events)} events in {len(chunks)} chunks "
            f"with {self.max_threads} threads"
        )

        total = ProcessingStatistics()
        if self.max_threads == 1:
            with self._create_progress_bar(len(events)) as pbar:
                for chunk in chunks:
                    total = total + self.pipeline.process_events(chunk)
                    if self.show_progress:
                        pbar.update(len(chunk))
            return total

        with ThreadPoolExecutor(max_workers=self.max_threads) as executor:
            futures = {
                executor.submit(self.pipeline.process_events, chunk): len(chunk)
                for chunk in chunks
            }
            with self._create_progress_bar(len(events)) as pbar:
                for future in as_completed(futures):
                    total = total + future.result()
                    if self.show_progress:
                        pbar.update(futures[future])

        return total

    def _create_progress_bar(self, total: int):
        if self.show_progress:
            return tqdm(
                total=total,
                desc="Processing events",
                unit="event",
                dynamic_ncols=True,
                mininterval=1,
            )
        return nullcontext()
