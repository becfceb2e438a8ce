from enum import Enum
from typing import Dict


class Signal(str, Enum):
    """Named detection signals checked against fetched artifacts."""
    HEADER_ASPNET_VERSION = "header_aspnet_version"
    HEADER_POWERED_BY_ASPNET = "header_powered_by_aspnet"
    HEADER_IIS_SERVER = "header_iis_server"
    COOKIE_ASPNET_CORE = "cookie_aspnet_core"
    COOKIE_ASPNET = "cookie_aspnet"
    HTML_VIEWSTATE = "html_viewstate"
    HTML_CSHTML_REFERENCE = "html_cshtml_reference"
    HTML_RAZOR_DIRECTIVE = "html_razor_directive"
    FINAL_URL_ASPX = "final_url_aspx"
    ENRICHMENT_MICROSOFT_INFRA = "enrichment_microsoft_infra"
    ENRICHMENT_GITHUB_MATCH = "enrichment_github_match"

    def __str__(self) -> str:
        return self.value


# Signals absent from this table weigh 0
DEFAULT_WEIGHTS: Dict[Signal, int] = {
    Signal.HEADER_ASPNET_VERSION: 4,
    Signal.HEADER_POWERED_BY_ASPNET: 3,
    Signal.HEADER_IIS_SERVER: 2,
    Signal.COOKIE_ASPNET_CORE: 3,
    Signal.COOKIE_ASPNET: 3,
    Signal.HTML_VIEWSTATE: 4,
    Signal.HTML_CSHTML_REFERENCE: 2,
    Signal.HTML_RAZOR_DIRECTIVE: 3,
    Signal.FINAL_URL_ASPX: 2,
    Signal.ENRICHMENT_MICROSOFT_INFRA: 1,
    Signal.ENRICHMENT_GITHUB_MATCH: 1,
}
