"""
Domain Entity: SearchCredential / PoolStatus

Credentials are owned by the credential pool; everything outside the
pool sees them only through the redacted ``PoolStatus`` snapshot.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum

DEFAULT_COOLDOWN = 24 * 60 * 60.0
REDACTED_PREFIX_LENGTH = 8


def redact(secret: str) -> str:
    """First characters of a secret followed by an ellipsis."""
    return f"{secret[:REDACTED_PREFIX_LENGTH]}..." if secret else ""


class CredentialStatus(str, Enum):
    """Credential availability."""

    AVAILABLE = "available"
    COOLING = "cooling"      # quota/auth failure, back after cooldown
    EXHAUSTED = "exhausted"  # retired until an administrative reset


class FailureKind(str, Enum):
    """Kind of failure reported against a credential."""

    QUOTA = "quota"          # quota, rate limit or authorization
    TRANSIENT = "transient"  # timeout, connection error, 5xx


class PoolHealth(str, Enum):
    """Pool health classification by available/total ratio."""

    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class SearchCredential:
    """An opaque provider key plus its rotation bookkeeping."""

    id: str
    secret: str = field(repr=False)
    status: CredentialStatus = CredentialStatus.AVAILABLE
    usage_count: int = 0
    last_failure_at: float | None = None
    cooldown: float = DEFAULT_COOLDOWN

    @property
    def is_available(self) -> bool:
        return self.status is CredentialStatus.AVAILABLE

    @property
    def prefix(self) -> str:
        return redact(self.secret)

    def cooldown_remaining(self, now: float) -> float:
        if self.status is not CredentialStatus.COOLING or self.last_failure_at is None:
            return 0.0
        return max(0.0, self.last_failure_at + self.cooldown - now)


@dataclass(frozen=True)
class PoolStatus:
    """Aggregate, redacted view of the credential pool."""

    total_credentials: int
    available_credentials: int
    unavailable_credentials: int
    health: PoolHealth
    total_usage: int = 0
    avg_usage_per_credential: float = 0.0
    load_balance: float = 1.0
    last_failure_age: float | None = None
    last_failed_prefix: str | None = None
    next_credential_hint: str | None = None

    @property
    def exhausted(self) -> bool:
        return self.available_credentials == 0

    def to_dict(self) -> dict:
        data = dataclasses.asdict(self)
        data["health"] = self.health.value
        return data
