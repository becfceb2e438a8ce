"""Loading and normalizing target domain lists."""
import logging
from typing import Iterable, List, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def normalize_domain(raw: str) -> Optional[str]:
    """
    Normalize one target line to a bare, lower-cased host.

    Examples:
        - "  .Example.com " -> example.com
        - "https://www.example.com/path" -> www.example.com
        - "# comment" -> None
    """
    value = (raw or "").strip()
    if not value or value.startswith("#"):
        return None

    if value.lower().startswith(("http://", "https://")):
        value = urlparse(value).hostname or ""
    else:
        value = value.split("/", 1)[0]

    value = value.lstrip(".").rstrip(".").lower()
    return value or None


def dedupe_domains(lines: Iterable[str]) -> List[str]:
    """Normalize and deduplicate, keeping first-seen order."""
    seen = set()
    domains: List[str] = []
    for line in lines:
        domain = normalize_domain(line)
        if domain and domain not in seen:
            seen.add(domain)
            domains.append(domain)
    return domains


def load_domains(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        domains = dedupe_domains(f)
    logger.info(f"Loaded {len(domains)} domains from {path}")
    return domains
