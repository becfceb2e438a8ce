from typing import List, Optional
import time
import logging
import regex

from core.analyzer_registry import AnalyzerRegistry
from core.config import DetectionOptions
from core.context import ScanArtifacts
from models.detection import Evidence
from models.signal import Signal

VIEWSTATE_MARKER = "__viewstate"
VIEW_TEMPLATE_EXTENSIONS = (".cshtml", ".vbhtml")
RAZOR_DIRECTIVE_PATTERN = regex.compile(r"@model\s+[\w\.]+|@\{", regex.IGNORECASE)

# Warn on slow regex evaluation to surface problematic pages
PATTERN_SLOW_THRESHOLD_SECONDS = 0.5
# Hard timeout to prevent catastrophic regex backtracking
REGEX_TIMEOUT_SECONDS = 0.8
MAX_MATCH_VALUE_LENGTH = 100


@AnalyzerRegistry.register("html")
class HtmlAnalyzer:
    def __init__(self, options: DetectionOptions):
        self.options = options

    def analyze(self, artifacts: ScanArtifacts) -> List[Evidence]:
        logger = logging.getLogger(__name__)
        evidence: List[Evidence] = []
        html_content = artifacts.html
        if not html_content:
            return evidence

        lowered = html_content.lower()

        if VIEWSTATE_MARKER in lowered:
            evidence.append(
                Evidence(
                    signal=Signal.HTML_VIEWSTATE,
                    description="HTML contains __VIEWSTATE",
                    value="__VIEWSTATE",
                    weight=self.options.weight_for(Signal.HTML_VIEWSTATE),
                )
            )

        extension = next((ext for ext in VIEW_TEMPLATE_EXTENSIONS if ext in lowered), None)
        if extension:
            evidence.append(
                Evidence(
                    signal=Signal.HTML_CSHTML_REFERENCE,
                    description="HTML contains Razor view reference",
                    value=extension,
                    weight=self.options.weight_for(Signal.HTML_CSHTML_REFERENCE),
                )
            )

        # The body is already bounded by max_body_bytes; search all of it
        directive = self._search_directive(html_content, logger)
        if directive:
            evidence.append(
                Evidence(
                    signal=Signal.HTML_RAZOR_DIRECTIVE,
                    description="HTML contains Razor directive",
                    value=directive[:MAX_MATCH_VALUE_LENGTH],
                    weight=self.options.weight_for(Signal.HTML_RAZOR_DIRECTIVE),
                )
            )

        logger.debug(f"HtmlAnalyzer: {len(evidence)} matches")
        return evidence

    def _search_directive(self, text: str, logger: logging.Logger) -> Optional[str]:
        """Search for a Razor directive, giving up after REGEX_TIMEOUT_SECONDS."""
        start = time.perf_counter()
        try:
            match = RAZOR_DIRECTIVE_PATTERN.search(text, timeout=REGEX_TIMEOUT_SECONDS)
        except TimeoutError:
            duration = time.perf_counter() - start
            logger.warning(f"HtmlAnalyzer directive pattern timed out ({duration:.2f}s)")
            return None

        duration = time.perf_counter() - start
        if duration > PATTERN_SLOW_THRESHOLD_SECONDS:
            logger.warning(f"HtmlAnalyzer slow directive pattern took {duration:.2f}s")
        return match.group(0) if match else None
