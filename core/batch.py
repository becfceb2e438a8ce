"""Bounded-concurrency scanning of many domains."""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from core.context import DomainScanResult
from core.scanner import DomainScanner

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 10
MAX_CONCURRENCY = 64


@dataclass
class BatchReport:
    results: List[DomainScanResult] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list) # (domain, message)

    def summary(self) -> Dict[str, Any]:
        scores = [r.score for r in self.results]
        return {
            "scanned": len(self.results) + len(self.errors),
            "completed": len(self.results),
            "likely": sum(1 for r in self.results if r.verdict is True),
            "borderline": sum(1 for r in self.results if r.verdict is None),
            "average_score": round(sum(scores) / len(scores), 1) if scores else 0.0,
            "errors": len(self.errors),
        }


async def scan_many(
    scanner: DomainScanner,
    domains: Iterable[str],
    concurrency: int = DEFAULT_CONCURRENCY,
) -> BatchReport:
    """
    Scan domains with at most ``concurrency`` scans in flight.

    A failing domain is recorded in ``errors`` and never stops the batch.
    Results are sorted by domain.
    """
    concurrency = max(1, min(concurrency, MAX_CONCURRENCY))
    semaphore = asyncio.Semaphore(concurrency)
    report = BatchReport()

    async def run_scan(domain: str) -> None:
        async with semaphore:
            try:
                result = await scanner.scan(domain)
            except Exception as e:
                logger.warning(f"Scan of {domain} failed: {e}")
                report.errors.append((domain, str(e)))
                return
            report.results.append(result)

    domain_list = list(domains)
    logger.info(f"Scanning {len(domain_list)} domains with concurrency {concurrency}")
    await asyncio.gather(*(run_scan(d) for d in domain_list))

    report.results.sort(key=lambda r: r.domain)
    return report
