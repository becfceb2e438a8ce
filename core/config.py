from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from models.signal import Signal, DEFAULT_WEIGHTS

# Defaults (in seconds)
DEFAULT_RETRY_COUNT = 2
DEFAULT_ATTEMPT_TIMEOUT = 20.0
DEFAULT_CONNECT_TIMEOUT = 5.0
DEFAULT_RETRY_BACKOFF = 2.0

DEFAULT_USER_AGENT = "StackRadar/0.1 (+https://github.com/)"
DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

DEFAULT_THRESHOLD_TRUE = 7
DEFAULT_THRESHOLD_BORDERLINE = 4
DEFAULT_MAX_BODY_BYTES = 256 * 1024


@dataclass(frozen=True)
class FetchPolicy:
    """Retry, timeout and protocol fallback settings shared by all scans."""
    retry_count: int = DEFAULT_RETRY_COUNT
    per_attempt_timeout: float = DEFAULT_ATTEMPT_TIMEOUT
    retry_backoff_base: float = DEFAULT_RETRY_BACKOFF
    allow_http_fallback: bool = True
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    accept: str = DEFAULT_ACCEPT

    def __post_init__(self):
        if self.retry_count < 0:
            raise ValueError(f"retry_count must be >= 0, got {self.retry_count}")
        if self.per_attempt_timeout <= 0:
            raise ValueError(f"per_attempt_timeout must be positive, got {self.per_attempt_timeout}")
        if self.connect_timeout <= 0:
            raise ValueError(f"connect_timeout must be positive, got {self.connect_timeout}")
        if self.retry_backoff_base < 0:
            raise ValueError(f"retry_backoff_base must be >= 0, got {self.retry_backoff_base}")

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry ``attempt`` (1-indexed): base * 2^(attempt-1), no jitter."""
        return self.retry_backoff_base * (2 ** (attempt - 1))


def _frozen_weights(weights: Optional[Mapping[Signal, int]]) -> Mapping[Signal, int]:
    return MappingProxyType(dict(DEFAULT_WEIGHTS if weights is None else weights))


@dataclass(frozen=True)
class DetectionOptions:
    """Scoring thresholds, body cap and signal weights used by the engine."""
    threshold_true: int = DEFAULT_THRESHOLD_TRUE
    threshold_borderline: int = DEFAULT_THRESHOLD_BORDERLINE
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    weights: Mapping[Signal, int] = field(default_factory=lambda: _frozen_weights(None))

    def __post_init__(self):
        if self.threshold_borderline > self.threshold_true:
            raise ValueError(
                f"threshold_borderline ({self.threshold_borderline}) must not exceed "
                f"threshold_true ({self.threshold_true})"
            )
        if self.max_body_bytes < 0:
            raise ValueError(f"max_body_bytes must be >= 0, got {self.max_body_bytes}")
        if not isinstance(self.weights, MappingProxyType):
            object.__setattr__(self, "weights", _frozen_weights(self.weights))

    def weight_for(self, signal: Signal) -> int:
        return self.weights.get(signal, 0)
