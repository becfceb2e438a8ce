from typing import List
import logging
from core.analyzer_registry import AnalyzerRegistry
from core.config import DetectionOptions
from core.context import ScanArtifacts
from models.detection import Evidence
from models.signal import Signal

VERSION_HEADER = "x-aspnet-version"
POWERED_BY_HEADER = "x-powered-by"
SERVER_HEADER = "server"

FRAMEWORK_NAME = "asp.net"
HOST_SERVER_NAME = "microsoft-iis"


@AnalyzerRegistry.register("headers")
class HeadersAnalyzer:
    def __init__(self, options: DetectionOptions):
        self.options = options

    def analyze(self, artifacts: ScanArtifacts) -> List[Evidence]:
        logger = logging.getLogger(__name__)
        evidence: List[Evidence] = []

        version = artifacts.header(VERSION_HEADER)
        if version is not None:
            evidence.append(
                Evidence(
                    signal=Signal.HEADER_ASPNET_VERSION,
                    description="Header X-AspNet-Version detected",
                    value=version,
                    weight=self.options.weight_for(Signal.HEADER_ASPNET_VERSION),
                )
            )

        powered_by = artifacts.header(POWERED_BY_HEADER)
        if powered_by and FRAMEWORK_NAME in powered_by.lower():
            evidence.append(
                Evidence(
                    signal=Signal.HEADER_POWERED_BY_ASPNET,
                    description="Header X-Powered-By contains ASP.NET",
                    value=powered_by,
                    weight=self.options.weight_for(Signal.HEADER_POWERED_BY_ASPNET),
                )
            )

        server = artifacts.header(SERVER_HEADER)
        if server and HOST_SERVER_NAME in server.lower():
            evidence.append(
                Evidence(
                    signal=Signal.HEADER_IIS_SERVER,
                    description="Server header indicates Microsoft IIS",
                    value=server,
                    weight=self.options.weight_for(Signal.HEADER_IIS_SERVER),
                )
            )

        logger.debug(f"HeadersAnalyzer: {len(evidence)} matches")
        return evidence
