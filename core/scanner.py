import time
import asyncio
import logging
from typing import Callable, List, Optional, Sequence

import httpx

from core.context import DomainScanResult
from core.engine import DetectionEngine
from core.enrichment import DEFAULT_PROVIDER_TIMEOUT, EnrichmentProvider, run_providers
from core.exceptions import InvalidDomainError, TerminalFetchError
from fetch.extractor import extract_artifacts
from fetch.http_client import FetchErrorKind, FetchResult, ResilientFetcher

logger = logging.getLogger(__name__)


def validate_domain(domain: Optional[str]) -> str:
    """Trim and check a domain; raises InvalidDomainError before any network call."""
    if domain is None or not domain.strip():
        raise InvalidDomainError(domain or "", "Domain must be provided")
    domain = domain.strip()
    if "." not in domain:
        raise InvalidDomainError(domain, "Domain must contain a TLD")
    return domain


class DomainScanner:
    """
    Scans one domain: HTTPS first, optional HTTP fallback, then extraction,
    enrichment and scoring.

    Holds no per-scan state, so one instance can serve many concurrent scans.
    """

    def __init__(
        self,
        fetcher: ResilientFetcher,
        engine: DetectionEngine,
        enrichment_providers: Sequence[EnrichmentProvider] = (),
        enrichment_timeout: float = DEFAULT_PROVIDER_TIMEOUT,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.fetcher = fetcher
        self.engine = engine
        self.enrichment_providers = tuple(enrichment_providers)
        self.enrichment_timeout = enrichment_timeout
        self._clock = clock

    async def scan(self, domain: str) -> DomainScanResult:
        domain = validate_domain(domain)
        started_at = self._clock()
        notes: List[str] = []
        logger.info(f"Scanning {domain}")

        result = await self._fetch_with_fallback(domain, notes)
        response = result.response

        try:
            artifacts = await asyncio.wait_for(
                extract_artifacts(
                    domain,
                    response,
                    self.engine.options.max_body_bytes,
                    started_at,
                    clock=self._clock,
                ),
                self.fetcher.policy.per_attempt_timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise self._body_error(domain, result, FetchErrorKind.TIMEOUT, "Body read timed out", notes) from e
        except httpx.HTTPError as e:
            raise self._body_error(domain, result, FetchErrorKind.TRANSPORT, f"Body read failed: {e}", notes) from e
        finally:
            await response.aclose()

        if artifacts.status_code is not None and artifacts.status_code >= 400:
            notes.append(f"HTTP {artifacts.status_code} returned by {artifacts.final_url}")

        enrichment = await run_providers(
            domain, artifacts, self.enrichment_providers, timeout=self.enrichment_timeout
        )
        outcome = self.engine.evaluate(artifacts, enrichment)

        logger.info(
            f"Scanned {domain}: score={outcome.score}, confidence={outcome.confidence!s}, "
            f"verdict={outcome.verdict} ({artifacts.elapsed:.2f}s)"
        )
        return DomainScanResult(
            domain=domain,
            verdict=outcome.verdict,
            score=outcome.score,
            confidence=outcome.confidence,
            server=artifacts.header("server"),
            artifacts=artifacts,
            notes=tuple(notes),
            evidence=outcome.evidence,
        )

    scan_one = scan

    async def _fetch_with_fallback(self, domain: str, notes: List[str]) -> FetchResult:
        result = await self.fetcher.fetch(domain, use_https=True)
        if result.ok:
            return result

        notes.append(f"HTTPS request failed: {result.describe()}")
        if self.fetcher.policy.allow_http_fallback:
            logger.warning(f"HTTPS failed for {domain}, falling back to HTTP: {result.describe()}")
            result = await self.fetcher.fetch(domain, use_https=False)
            if result.ok:
                return result
            notes.append(f"HTTP request failed: {result.describe()}")

        raise TerminalFetchError(
            domain,
            result.describe(),
            url=result.url,
            kind=result.error_kind.value if result.error_kind else None,
            attempts=result.attempts,
            status_code=result.status_code,
            notes=notes,
        ) from result.error

    @staticmethod
    def _body_error(
        domain: str, result: FetchResult, kind: FetchErrorKind, message: str, notes: List[str]
    ) -> TerminalFetchError:
        url = result.url
        notes.append(f"{message} for {url}")
        logger.warning(f"{message} for {url}")
        return TerminalFetchError(
            domain,
            f"{message} for {url}",
            url=url,
            kind=kind.value,
            attempts=result.attempts,
            status_code=result.response.status_code,
            notes=notes,
        )
