from typing import List
from urllib.parse import urlparse
from core.analyzer_registry import AnalyzerRegistry
from core.config import DetectionOptions
from core.context import ScanArtifacts
from models.detection import Evidence
from models.signal import Signal

LEGACY_PAGE_EXTENSION = ".aspx"


@AnalyzerRegistry.register("final_url")
class FinalUrlAnalyzer:
    """Checks where redirects finally landed."""

    def __init__(self, options: DetectionOptions):
        self.options = options

    def analyze(self, artifacts: ScanArtifacts) -> List[Evidence]:
        if not artifacts.final_url:
            return []

        path = urlparse(artifacts.final_url).path or ""
        if not path.lower().endswith(LEGACY_PAGE_EXTENSION):
            return []

        return [
            Evidence(
                signal=Signal.FINAL_URL_ASPX,
                description="Final URL ends with .aspx",
                value=artifacts.final_url,
                weight=self.options.weight_for(Signal.FINAL_URL_ASPX),
            )
        ]
