"""Runs optional enrichment providers that contribute extra evidence.

A provider is an async callable ``provider(domain, artifacts)`` returning an
iterable of Evidence. A provider that fails or times out contributes nothing.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Sequence

from core.context import ScanArtifacts
from models.detection import Evidence

logger = logging.getLogger(__name__)

EnrichmentProvider = Callable[[str, ScanArtifacts], Awaitable[Iterable[Evidence]]]

DEFAULT_PROVIDER_TIMEOUT = 10.0


def provider_name(provider: EnrichmentProvider) -> str:
    return getattr(provider, "__name__", None) or type(provider).__name__


async def run_providers(
    domain: str,
    artifacts: ScanArtifacts,
    providers: Sequence[EnrichmentProvider],
    timeout: float = DEFAULT_PROVIDER_TIMEOUT,
) -> List[Evidence]:
    if not providers:
        return []

    async def run_provider(provider: EnrichmentProvider) -> List[Evidence]:
        name = provider_name(provider)
        try:
            result = await asyncio.wait_for(provider(domain, artifacts), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Enrichment provider {name} timed out after {timeout}s for {domain}")
            return []
        except Exception as e:
            logger.warning(f"Enrichment provider {name} failed for {domain}: {e}")
            return []
        found = list(result or [])
        logger.debug(f"Enrichment provider {name} returned {len(found)} evidence for {domain}")
        return found

    results = await asyncio.gather(*(run_provider(p) for p in providers))

    evidence: List[Evidence] = []
    for found in results:
        evidence.extend(found)
    return evidence
