import asyncio
import dns.exception
import dns.resolver
import logging
from typing import List, Dict, Optional

from core.config import DetectionOptions
from core.context import ScanArtifacts
from models.detection import Evidence
from models.signal import Signal

# Default DNS timeout (in seconds)
DEFAULT_DNS_TIMEOUT = 5.0

MICROSOFT_CNAME_SUFFIXES = (
    "azurewebsites.net",
    "cloudapp.net",
    "cloudapp.azure.com",
    "azureedge.net",
    "trafficmanager.net",
    "azurefd.net",
)
MICROSOFT_MX_SUFFIX = "mail.protection.outlook.com"
MICROSOFT_TXT_PREFIX = "ms=ms"


def get_dns_records(
    hostname: str,
    record_types: List[str],
    timeout: Optional[float] = None
) -> Dict[str, List[str]]:
    """
    Gets specified DNS records for a given hostname with timeout.

    Args:
        hostname: The hostname to query
        record_types: List of DNS record types to query (CNAME, MX, TXT, etc.)
        timeout: DNS query timeout in seconds (default: 5s)

    Returns:
        Dictionary mapping record types to lists of record values
    """
    logger = logging.getLogger(__name__)
    logger.debug(f"DNS query for {hostname}: {record_types}")

    resolver = dns.resolver.Resolver()
    resolver.lifetime = timeout or DEFAULT_DNS_TIMEOUT

    records: Dict[str, List[str]] = {}
    for record_type in record_types:
        try:
            answers = resolver.resolve(hostname, record_type)
            records[record_type] = [r.to_text() for r in answers]
            logger.debug(f"DNS {record_type} {hostname}: {len(records[record_type])} records")
        except (dns.resolver.NoAnswer, dns.resolver.NXDOMAIN, dns.resolver.NoNameservers, dns.exception.Timeout) as e:
            records[record_type] = []
            logger.debug(f"DNS {record_type} {hostname}: no records ({type(e).__name__})")
    return records


def _normalize(value: str) -> str:
    return value.strip().strip('"').rstrip(".").lower()


def microsoft_infra_evidence(records: Dict[str, List[str]], weight: int) -> List[Evidence]:
    """Evidence for DNS records pointing at Microsoft hosting or mail."""
    evidence: List[Evidence] = []

    for cname in records.get("CNAME", []):
        target = _normalize(cname)
        if target.endswith(MICROSOFT_CNAME_SUFFIXES):
            evidence.append(Evidence(
                signal=Signal.ENRICHMENT_MICROSOFT_INFRA,
                description="CNAME points at Microsoft Azure hosting",
                value=target,
                weight=weight,
            ))

    for mx in records.get("MX", []):
        # MX answers look like "0 example-com.mail.protection.outlook.com."
        exchange = _normalize(mx.split()[-1]) if mx.split() else ""
        if exchange.endswith(MICROSOFT_MX_SUFFIX):
            evidence.append(Evidence(
                signal=Signal.ENRICHMENT_MICROSOFT_INFRA,
                description="MX handled by Microsoft 365",
                value=exchange,
                weight=weight,
            ))

    for txt in records.get("TXT", []):
        if _normalize(txt).startswith(MICROSOFT_TXT_PREFIX):
            evidence.append(Evidence(
                signal=Signal.ENRICHMENT_MICROSOFT_INFRA,
                description="TXT record verifies a Microsoft tenant",
                value=txt.strip('"'),
                weight=weight,
            ))

    return evidence


class MicrosoftDnsProvider:
    """Enrichment provider that looks for Microsoft infrastructure in DNS."""

    def __init__(self, options: Optional[DetectionOptions] = None, timeout: Optional[float] = None):
        self.options = options or DetectionOptions()
        self.timeout = timeout

    async def __call__(self, domain: str, artifacts: ScanArtifacts) -> List[Evidence]:
        loop = asyncio.get_running_loop()
        records = await loop.run_in_executor(
            None, get_dns_records, domain, ["CNAME", "MX", "TXT"], self.timeout
        )
        return microsoft_infra_evidence(records, self.options.weight_for(Signal.ENRICHMENT_MICROSOFT_INFRA))
