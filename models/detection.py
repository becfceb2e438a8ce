from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Tuple

from models.signal import Signal


class ConfidenceBand(IntEnum):
    """Ordinal confidence derived from the evidence score."""
    LOW = 0
    MEDIUM = 1
    HIGH = 2
    CERTAIN = 3

    def __str__(self) -> str:
        return self.name.capitalize()


@dataclass(frozen=True)
class Evidence:
    """One occurrence of a signal found while evaluating a snapshot."""
    signal: Signal
    description: str
    value: str
    weight: int


@dataclass(frozen=True)
class DetectionOutcome:
    """Aggregate result of evaluating one artifact snapshot."""
    score: int
    confidence: ConfidenceBand
    verdict: Optional[bool] # None when the score falls in the borderline band
    evidence: Tuple[Evidence, ...] = field(default_factory=tuple)
