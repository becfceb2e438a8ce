import logging
from typing import Iterable, List, Optional, Set

from core.analyzer_registry import AnalyzerRegistry
from core.config import DetectionOptions
from core.context import ScanArtifacts
from models.detection import ConfidenceBand, DetectionOutcome, Evidence

# Import analyzers to trigger @AnalyzerRegistry.register decorators.
# Import order is evaluation order.
import analyzers.headers
import analyzers.cookies
import analyzers.html
import analyzers.final_url


def classify_verdict(score: int, options: DetectionOptions) -> Optional[bool]:
    """True at or above threshold_true, False below threshold_borderline, else None."""
    if score >= options.threshold_true:
        return True
    if score < options.threshold_borderline:
        return False
    return None


def classify_confidence(score: int, options: DetectionOptions) -> ConfidenceBand:
    if score >= options.threshold_true + 2:
        return ConfidenceBand.CERTAIN
    if score >= options.threshold_true:
        return ConfidenceBand.HIGH
    if score >= options.threshold_borderline:
        return ConfidenceBand.MEDIUM
    return ConfidenceBand.LOW


class DetectionEngine:
    def __init__(self, options: Optional[DetectionOptions] = None, exclude_analyzers: Set[str] = None):
        """Initialize the engine with the registered analyzers.

        Args:
            options: Thresholds and signal weights (defaults when omitted)
            exclude_analyzers: Set of analyzer names to exclude (e.g., {'html'})
        """
        self.logger = logging.getLogger(__name__)
        self.options = options or DetectionOptions()
        self.analyzers = AnalyzerRegistry.instantiate_all(self.options, exclude=exclude_analyzers)
        self.logger.debug(f"Initialized {len(self.analyzers)} analyzers: {', '.join(self.analyzers)}")

    def evaluate(
        self,
        artifacts: ScanArtifacts,
        external_evidence: Optional[Iterable[Evidence]] = None,
    ) -> DetectionOutcome:
        """Score a snapshot. Pure: no I/O and no shared state is touched.

        External evidence is appended as supplied and keeps its own weight.
        Repeated evidence is not deduplicated.
        """
        evidence: List[Evidence] = []

        for name, analyzer in self.analyzers.items():
            try:
                found = analyzer.analyze(artifacts) or []
            except Exception as e:
                self.logger.error(f"Error in {name} analyzer: {e}", exc_info=True)
                continue
            self.logger.debug(f"{name} analyzer found {len(found)} signals")
            evidence.extend(found)

        if external_evidence:
            evidence.extend(external_evidence)

        score = sum(e.weight for e in evidence)
        return DetectionOutcome(
            score=score,
            confidence=classify_confidence(score, self.options),
            verdict=classify_verdict(score, self.options),
            evidence=tuple(evidence),
        )
