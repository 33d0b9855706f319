"""
Statistics-related domain models.

Immutable counters describing what the event pipeline did with the
candidates it saw. Per-event statistics are summed into run totals.
"""

from collections import Counter
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProcessingStatistics:
    """
    Candidate bookkeeping for one event or a whole run.

    Immutable; combine instances with ``+``.
    """

    events_processed: int = 0
    candidates_seen: int = 0
    candidates_accepted: int = 0
    candidates_truth_matched: int = 0
    missing_truth: int = 0
    species_mismatch: int = 0
    undefined_residuals: int = 0

    # (cut name, count) pairs
    rejections: tuple[tuple[str, int], ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate statistics."""
        for name in (
            "events_processed", "candidates_seen", "candidates_accepted",
            "candidates_truth_matched", "missing_truth", "species_mismatch",
            "undefined_residuals",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.candidates_accepted > self.candidates_seen:
            raise ValueError(
                f"candidates_accepted ({self.candidates_accepted}) cannot exceed "
                f"candidates_seen ({self.candidates_seen})"
            )
        if self.candidates_truth_matched > self.candidates_accepted:
            raise ValueError(
                f"candidates_truth_matched ({self.candidates_truth_matched}) cannot exceed "
                f"candidates_accepted ({self.candidates_accepted})"
            )

    def __add__(self, other: "ProcessingStatistics") -> "ProcessingStatistics":
        if not isinstance(other, ProcessingStatistics):
            return NotImplemented
        rejections = Counter(dict(self.rejections))
        rejections.update(dict(other.rejections))
        return ProcessingStatistics(
            events_processed=self.events_processed + other.events_processed,
            candidates_seen=self.candidates_seen + other.candidates_seen,
            candidates_accepted=self.candidates_accepted + other.candidates_accepted,
            candidates_truth_matched=self.candidates_truth_matched + other.candidates_truth_matched,
            missing_truth=self.missing_truth + other.missing_truth,
            species_mismatch=self.species_mismatch + other.species_mismatch,
            undefined_residuals=self.undefined_residuals + other.undefined_residuals,
            rejections=tuple(sorted(rejections.items())),
        )

    @property
    def acceptance(self) -> float:
        """Fraction of seen candidates accepted by the cascade, in percent."""
        if self.candidates_seen == 0:
            return 0.0
        return (self.candidates_accepted / self.candidates_seen) * 100

    def rejections_for(self, cut: str) -> int:
        return dict(self.rejections).get(cut, 0)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "events_processed": self.events_processed,
            "candidates_seen": self.candidates_seen,
            "candidates_accepted": self.candidates_accepted,
            "acceptance": f"{self.acceptance:.1f}%",
            "candidates_truth_matched": self.candidates_truth_matched,
            "missing_truth": self.missing_truth,
            "species_mismatch": self.species_mismatch,
            "undefined_residuals": self.undefined_residuals,
            "rejections": {cut: count for cut, count in self.rejections},
        }
