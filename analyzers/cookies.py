from typing import List
from core.analyzer_registry import AnalyzerRegistry
from core.config import DetectionOptions
from core.context import ScanArtifacts
from models.detection import Evidence
from models.signal import Signal

# Lower-cased substrings; core markers are checked before legacy ones
CORE_COOKIE_MARKERS = (".aspnetcore",)
LEGACY_COOKIE_MARKERS = (".aspnet", ".aspxauth", "asp.net_sessionid")


@AnalyzerRegistry.register("cookies")
class CookiesAnalyzer:
    def __init__(self, options: DetectionOptions):
        self.options = options

    def analyze(self, artifacts: ScanArtifacts) -> List[Evidence]:
        evidence: List[Evidence] = []

        for cookie in artifacts.cookies:
            lowered = cookie.lower()
            # A cookie counts for at most one category
            if any(marker in lowered for marker in CORE_COOKIE_MARKERS):
                evidence.append(
                    Evidence(
                        signal=Signal.COOKIE_ASPNET_CORE,
                        description="Cookie indicates ASP.NET Core",
                        value=cookie,
                        weight=self.options.weight_for(Signal.COOKIE_ASPNET_CORE),
                    )
                )
            elif any(marker in lowered for marker in LEGACY_COOKIE_MARKERS):
                evidence.append(
                    Evidence(
                        signal=Signal.COOKIE_ASPNET,
                        description="Cookie indicates ASP.NET",
                        value=cookie,
                        weight=self.options.weight_for(Signal.COOKIE_ASPNET),
                    )
                )

        return evidence
