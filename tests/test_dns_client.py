import pytest
from unittest.mock import patch

from core.context import ScanArtifacts
from fetch.dns_client import MicrosoftDnsProvider, microsoft_infra_evidence
from models.signal import Signal


def test_microsoft_infra_evidence_from_records():
    records = {
        "CNAME": ["contoso-prod.azurewebsites.net."],
        "MX": ["0 contoso-com.mail.protection.outlook.com."],
        "TXT": ['"MS=ms12345678"', '"v=spf1 -all"'],
    }

    evidence = microsoft_infra_evidence(records, weight=1)

    assert len(evidence) == 3
    assert {e.signal for e in evidence} == {Signal.ENRICHMENT_MICROSOFT_INFRA}
    assert evidence[0].value == "contoso-prod.azurewebsites.net"
    assert evidence[1].value == "contoso-com.mail.protection.outlook.com"
    assert evidence[2].value == "MS=ms12345678"


def test_unrelated_records_yield_nothing():
    records = {"CNAME": ["example.netlify.app."], "MX": ["10 mx.google.com."], "TXT": [], "A": ["1.2.3.4"]}

    assert microsoft_infra_evidence(records, weight=1) == []


@pytest.mark.asyncio
async def test_provider_uses_resolved_records():
    records = {"CNAME": ["shop.trafficmanager.net."], "MX": [], "TXT": []}

    with patch("fetch.dns_client.get_dns_records", return_value=records) as mock_records:
        evidence = await MicrosoftDnsProvider()("shop.example.com", ScanArtifacts(domain="shop.example.com"))

    mock_records.assert_called_once_with("shop.example.com", ["CNAME", "MX", "TXT"], None)
    assert len(evidence) == 1
    assert evidence[0].weight == 1
