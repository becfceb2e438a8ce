import asyncio
import httpx
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional

from core.config import FetchPolicy

logger = logging.getLogger(__name__)


class FetchErrorKind(str, Enum):
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    HTTP_STATUS = "http_status"


@dataclass(frozen=True)
class FetchResult:
    """Outcome of fetching one scheme: a usable response or the last failure."""
    url: str
    attempts: int
    response: Optional[httpx.Response] = None
    error_kind: Optional[FetchErrorKind] = None
    error: Optional[BaseException] = None
    status_code: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.response is not None

    def describe(self) -> str:
        """Human-readable failure message."""
        if self.ok:
            return f"HTTP {self.response.status_code} from {self.url}"
        if self.error_kind == FetchErrorKind.HTTP_STATUS:
            return f"HTTP {self.status_code} from {self.url} after {self.attempts} attempts"
        if self.error_kind == FetchErrorKind.TIMEOUT:
            return f"Request to {self.url} timed out after {self.attempts} attempts"
        detail = str(self.error) or type(self.error).__name__
        return f"Request to {self.url} failed after {self.attempts} attempts: {detail}"


def build_client(policy: FetchPolicy) -> httpx.AsyncClient:
    """Shared connection pool for concurrent scans."""
    timeout_config = httpx.Timeout(
        timeout=policy.per_attempt_timeout,
        connect=policy.connect_timeout
    )
    return httpx.AsyncClient(timeout=timeout_config, follow_redirects=True)


class ResilientFetcher:
    """
    GETs ``scheme://domain/`` with retries and exponential backoff.

    Transport errors, timeouts and 5xx responses are retried up to
    ``policy.retry_count`` times, waiting ``retry_backoff_base * 2^(k-1)``
    before retry k. Any 2xx-4xx response ends the fetch successfully and is
    returned still streaming; the caller must close it. Each attempt gets
    its own ``per_attempt_timeout``. Cancellation is never retried.
    """

    def __init__(
        self,
        policy: Optional[FetchPolicy] = None,
        client: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.policy = policy or FetchPolicy()
        self._client = client
        self._owns_client = client is None
        self._sleep = sleep

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = build_client(self.policy)
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ResilientFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def fetch(self, domain: str, use_https: bool = True) -> FetchResult:
        scheme = "https" if use_https else "http"
        url = f"{scheme}://{domain}/"
        max_attempts = self.policy.retry_count + 1
        headers = {"User-Agent": self.policy.user_agent, "Accept": self.policy.accept}

        last_kind: Optional[FetchErrorKind] = None
        last_error: Optional[BaseException] = None
        last_status: Optional[int] = None

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                delay = self.policy.backoff_delay(attempt - 1)
                cause = f"HTTP status {last_status}" if last_kind == FetchErrorKind.HTTP_STATUS else type(last_error).__name__
                logger.warning(f"Retry {attempt - 1} for {url} after {cause}, waiting {delay:.2f}s")
                await self._sleep(delay)

            logger.debug(f"HTTP GET {url} (attempt {attempt}/{max_attempts}, timeout: {self.policy.per_attempt_timeout}s)")
            request = self.client.build_request("GET", url, headers=headers)
            try:
                response = await asyncio.wait_for(
                    self.client.send(request, stream=True),
                    timeout=self.policy.per_attempt_timeout
                )
            except (asyncio.TimeoutError, httpx.TimeoutException) as e:
                last_kind, last_error, last_status = FetchErrorKind.TIMEOUT, e, None
                logger.debug(f"HTTP timeout for {url}: {type(e).__name__}")
                continue
            except httpx.RequestError as e:
                last_kind, last_error, last_status = FetchErrorKind.TRANSPORT, e, None
                logger.debug(f"HTTP request error for {url}: {e}")
                continue

            if response.status_code >= 500:
                last_kind, last_error, last_status = FetchErrorKind.HTTP_STATUS, None, response.status_code
                logger.debug(f"HTTP {response.status_code} {url}")
                await response.aclose()
                continue

            # Don't raise for 4xx - the detection engine interprets status
            logger.debug(f"HTTP {response.status_code} {url} -> {response.url}")
            return FetchResult(url=url, attempts=attempt, response=response)

        result = FetchResult(
            url=url,
            attempts=max_attempts,
            error_kind=last_kind,
            error=last_error,
            status_code=last_status,
        )
        logger.warning(f"Giving up on {url}: {result.describe()}")
        return result
