import asyncio
import pytest

from core.batch import BatchReport, scan_many
from core.context import DomainScanResult, ScanArtifacts
from core.exceptions import InvalidDomainError, TerminalFetchError
from core.targets import dedupe_domains, load_domains, normalize_domain
from models.detection import ConfidenceBand


def _result(domain: str, score: int, verdict):
    return DomainScanResult(
        domain=domain,
        verdict=verdict,
        score=score,
        confidence=ConfidenceBand.LOW,
        server=None,
        artifacts=ScanArtifacts(domain=domain),
    )


class FakeScanner:
    def __init__(self, outcomes, delay: float = 0.0):
        self.outcomes = outcomes
        self.delay = delay
        self.in_flight = 0
        self.max_in_flight = 0

    async def scan(self, domain):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            outcome = self.outcomes[domain]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1


@pytest.mark.asyncio
async def test_scan_many_collects_failures_separately():
    scanner = FakeScanner({
        "b.com": _result("b.com", 9, True),
        "a.com": _result("a.com", 5, None),
        "bad": InvalidDomainError("bad", "Domain must contain a TLD"),
        "down.com": TerminalFetchError("down.com", "Request to https://down.com/ timed out after 3 attempts"),
    })

    report = await scan_many(scanner, ["b.com", "bad", "a.com", "down.com"])

    assert [r.domain for r in report.results] == ["a.com", "b.com"]
    assert sorted(d for d, _ in report.errors) == ["bad", "down.com"]
    assert report.summary() == {
        "scanned": 4,
        "completed": 2,
        "likely": 1,
        "borderline": 1,
        "average_score": 7.0,
        "errors": 2,
    }


@pytest.mark.asyncio
async def test_scan_many_bounds_concurrency():
    domains = [f"site{i}.com" for i in range(8)]
    scanner = FakeScanner({d: _result(d, 0, False) for d in domains}, delay=0.01)

    report = await scan_many(scanner, domains, concurrency=3)

    assert len(report.results) == 8
    assert scanner.max_in_flight <= 3


def test_empty_report_summary():
    assert BatchReport().summary()["average_score"] == 0.0


@pytest.mark.parametrize("raw, expected", [
    ("example.com", "example.com"),
    ("  .Example.COM  ", "example.com"),
    ("https://www.example.com/path?q=1", "www.example.com"),
    ("HTTP://Example.com", "example.com"),
    ("example.com/landing", "example.com"),
    ("# comment", None),
    ("   ", None),
])
def test_normalize_domain(raw, expected):
    assert normalize_domain(raw) == expected


def test_dedupe_domains_is_case_insensitive_and_ordered():
    lines = ["b.com", "A.com", "b.COM", "", "# skip", ".a.com", "c.com"]

    assert dedupe_domains(lines) == ["b.com", "a.com", "c.com"]


def test_load_domains_reads_file(tmp_path):
    targets = tmp_path / "targets.txt"
    targets.write_text("example.com\n.Example.com\n# comment\nhttps://contoso.com/\n", encoding="utf-8")

    assert load_domains(str(targets)) == ["example.com", "contoso.com"]
