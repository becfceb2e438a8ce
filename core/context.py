from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from models.detection import ConfidenceBand, Evidence


@dataclass(frozen=True)
class ScanArtifacts:
    """Normalized, size-capped capture of one HTTP response."""
    domain: str
    status_code: Optional[int] = None
    final_url: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=dict) # lower-cased keys
    cookies: Tuple[str, ...] = field(default_factory=tuple) # raw Set-Cookie entries
    html: Optional[str] = None
    elapsed: float = 0.0 # seconds, scan start to headers captured

    def __post_init__(self):
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "cookies", tuple(self.cookies))

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


@dataclass(frozen=True)
class DomainScanResult:
    domain: str
    verdict: Optional[bool]
    score: int
    confidence: ConfidenceBand
    server: Optional[str]
    artifacts: ScanArtifacts
    notes: Tuple[str, ...] = field(default_factory=tuple)
    evidence: Tuple[Evidence, ...] = field(default_factory=tuple)
