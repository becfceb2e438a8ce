"""Turns a streamed httpx response into a bounded ScanArtifacts snapshot."""
import re
import time
import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import httpx

from core.context import ScanArtifacts

logger = logging.getLogger(__name__)

# Split on commas outside double-quoted segments
COOKIE_SPLITTER = re.compile(r',(?=(?:[^"]*"[^"]*")*[^"]*$)')


def flatten_headers(*header_sets: Iterable[Tuple[str, str]]) -> Dict[str, str]:
    """
    Merge header collections into one map with lower-cased keys.

    Repeated values inside one collection are joined with "; ". When a later
    collection defines a key already seen, the later value wins.

    Args:
        header_sets: Sequences of (name, value) pairs, e.g. ``headers.multi_items()``

    Returns:
        Dictionary of lower-cased header name to value
    """
    merged: Dict[str, str] = {}
    for header_set in header_sets:
        grouped: Dict[str, List[str]] = {}
        for key, value in header_set:
            grouped.setdefault(key.lower(), []).append(value)
        for key, values in grouped.items():
            merged[key] = "; ".join(values)
    return merged


def split_set_cookie(header_value: str) -> List[str]:
    """Split one Set-Cookie value into cookies, respecting quoted commas."""
    return [part.strip() for part in COOKIE_SPLITTER.split(header_value) if part.strip()]


def extract_cookies(headers: httpx.Headers) -> Tuple[str, ...]:
    cookies: List[str] = []
    for header_value in headers.get_list("set-cookie"):
        cookies.extend(split_set_cookie(header_value))
    return tuple(cookies)


async def read_body_capped(response: httpx.Response, max_bytes: int) -> bytes:
    """Read at most ``max_bytes`` of the (decompressed) body from the stream.

    The cap applies to decoded bytes. httpx decodes each network chunk whole,
    so one highly compressed chunk may briefly expand past ``max_bytes`` in
    memory before it is sliced.
    """
    if max_bytes <= 0:
        return b""

    buffer = bytearray()
    async for chunk in response.aiter_bytes():
        remaining = max_bytes - len(buffer)
        buffer.extend(chunk[:remaining])
        if len(buffer) >= max_bytes:
            logger.debug(f"Body capped at {max_bytes} bytes")
            break
    return bytes(buffer)


def decode_body(raw: bytes) -> Optional[str]:
    if not raw:
        return None
    return raw.decode("utf-8", errors="replace")


async def extract_artifacts(
    domain: str,
    response: httpx.Response,
    max_body_bytes: int,
    started_at: float,
    clock: Callable[[], float] = time.perf_counter,
) -> ScanArtifacts:
    """
    Build a snapshot from a response whose body has not been read yet.

    ``elapsed`` covers ``started_at`` up to the point headers and cookies are
    captured; body reading is not included.
    """
    headers = flatten_headers(response.headers.multi_items())
    cookies = extract_cookies(response.headers)
    elapsed = clock() - started_at
    logger.debug(f"Captured {len(headers)} headers and {len(cookies)} cookies for {domain}")

    raw_body = await read_body_capped(response, max_body_bytes)
    html = decode_body(raw_body)
    logger.debug(f"Read {len(raw_body)} body bytes for {domain}")

    return ScanArtifacts(
        domain=domain,
        status_code=response.status_code,
        final_url=str(response.url),
        headers=headers,
        cookies=cookies,
        html=html,
        elapsed=elapsed,
    )
