"""
Credential Pool Manager

Owns a fixed set of provider credentials and hands them out in
round-robin order, skipping any that are cooling down after a quota or
authorization failure.

Features:
- Round-robin rotation with a persistent cursor
- Idempotent failure marking
- Lazy cooldown reconciliation on acquire/status
- Redacted health snapshot for monitoring
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterable

from diagram_search.core.exceptions import ConfigurationError
from diagram_search.domain.entities.credential import (
    DEFAULT_COOLDOWN,
    CredentialStatus,
    FailureKind,
    PoolHealth,
    PoolStatus,
    SearchCredential,
    redact,
)

logger = logging.getLogger(__name__)

HEALTHY_RATIO = 0.7
WARNING_RATIO = 0.3


def classify_health(available: int, total: int) -> PoolHealth:
    """Health band for an available/total ratio."""
    if total <= 0:
        return PoolHealth.CRITICAL
    ratio = available / total
    if ratio >= HEALTHY_RATIO:
        return PoolHealth.HEALTHY
    if ratio >= WARNING_RATIO:
        return PoolHealth.WARNING
    return PoolHealth.CRITICAL


class CredentialPoolManager:
    """
    Rotating pool of search credentials.

    All state changes happen under one lock and never await, so
    concurrent requests on the event loop (or from worker threads)
    observe each transition atomically.

    Example:
        pool = CredentialPoolManager.from_secrets(["key-a", "key-b"])
        credential = pool.acquire()
        if credential is None:
            ...  # fall back
        try:
            await provider.search_images(query, credential.secret, 1, 10)
        except QuotaExceededError:
            pool.report_failure(credential, FailureKind.QUOTA)
        else:
            pool.report_success(credential)
    """

    def __init__(
        self,
        credentials: Iterable[SearchCredential],
        clock: Callable[[], float] = time.time,
    ):
        self._credentials: list[SearchCredential] = list(credentials)
        ids = [c.id for c in self._credentials]
        if len(set(ids)) != len(ids):
            raise ConfigurationError(f"Duplicate credential ids: {ids}")

        self._clock = clock
        self._lock = threading.Lock()
        self._cursor = 0
        self._last_failure_at: float | None = None
        self._last_failed_prefix: str | None = None

    @classmethod
    def from_secrets(
        cls,
        secrets: Iterable[str],
        cooldown: float = DEFAULT_COOLDOWN,
        clock: Callable[[], float] = time.time,
    ) -> CredentialPoolManager:
        """Build a pool from raw keys; blank keys are skipped."""
        credentials = [
            SearchCredential(id=f"key-{i}", secret=secret.strip(), cooldown=cooldown)
            for i, secret in enumerate((s for s in secrets if s and s.strip()), start=1)
        ]
        logger.info(f"Credential pool initialized with {len(credentials)} credential(s)")
        return cls(credentials, clock=clock)

    def __len__(self) -> int:
        return len(self._credentials)

    @property
    def size(self) -> int:
        return len(self._credentials)

    # ------------------------------------------------------------------
    # Rotation
    # ------------------------------------------------------------------

    def acquire(self) -> SearchCredential | None:
        """
        Next Available credential in rotation order.

        Cooldowns are reconciled first. The cursor advances past the
        returned credential. Returns None when nothing is Available.
        """
        with self._lock:
            self._reconcile(self._clock())
            total = len(self._credentials)
            for offset in range(total):
                index = (self._cursor + offset) % total
                credential = self._credentials[index]
                if credential.is_available:
                    self._cursor = (index + 1) % total
                    logger.debug(f"Acquired credential {credential.id} ({credential.prefix})")
                    return credential
            logger.warning(f"No available credential ({total} configured)")
            return None

    def report_failure(self, credential: SearchCredential, kind: FailureKind) -> None:
        """
        Record a failed call.

        QUOTA moves an Available credential to Cooling; repeating it on a
        Cooling or Exhausted credential changes nothing. TRANSIENT leaves
        the status alone.
        """
        with self._lock:
            own = self._lookup(credential.id)
            if kind is FailureKind.TRANSIENT:
                logger.info(f"Transient failure on credential {own.id}, status unchanged")
                return
            if own.status is not CredentialStatus.AVAILABLE:
                return

            now = self._clock()
            own.status = CredentialStatus.COOLING
            own.last_failure_at = now
            self._last_failure_at = now
            self._last_failed_prefix = own.prefix
            logger.warning(
                f"Credential {own.id} ({own.prefix}) cooling for {own.cooldown:.0f}s; "
                f"{self._available_count()}/{len(self._credentials)} available"
            )

    def report_success(self, credential: SearchCredential) -> None:
        with self._lock:
            own = self._lookup(credential.id)
            own.usage_count += 1

    def reconcile(self, now: float | None = None) -> int:
        """
        Return Cooling credentials whose cooldown has elapsed to Available.

        Returns:
            Number of credentials restored
        """
        with self._lock:
            return self._reconcile(self._clock() if now is None else now)

    def retire(self, credential_id: str) -> None:
        """Take a credential out of rotation until reset_all()."""
        with self._lock:
            own = self._lookup(credential_id)
            own.status = CredentialStatus.EXHAUSTED
            logger.warning(f"Credential {own.id} ({own.prefix}) retired")

    def reset_all(self) -> PoolStatus:
        """Force every credential back to Available and clear bookkeeping."""
        with self._lock:
            for credential in self._credentials:
                credential.status = CredentialStatus.AVAILABLE
                credential.usage_count = 0
                credential.last_failure_at = None
            self._cursor = 0
            self._last_failure_at = None
            self._last_failed_prefix = None
            logger.info(f"All {len(self._credentials)} credential(s) reset to available")
            return self._status(self._clock())

    # ------------------------------------------------------------------
    # Monitoring
    # ------------------------------------------------------------------

    def status(self) -> PoolStatus:
        """Aggregate health snapshot (reconciles cooldowns first)."""
        with self._lock:
            now = self._clock()
            self._reconcile(now)
            return self._status(now)

    # ------------------------------------------------------------------
    # Internals (caller holds the lock)
    # ------------------------------------------------------------------

    def _lookup(self, credential_id: str) -> SearchCredential:
        for credential in self._credentials:
            if credential.id == credential_id:
                return credential
        raise KeyError(f"Unknown credential: {credential_id}")

    def _available_count(self) -> int:
        return sum(1 for c in self._credentials if c.is_available)

    def _reconcile(self, now: float) -> int:
        restored = 0
        for credential in self._credentials:
            if (
                credential.status is CredentialStatus.COOLING
                and credential.last_failure_at is not None
                and now - credential.last_failure_at >= credential.cooldown
            ):
                credential.status = CredentialStatus.AVAILABLE
                restored += 1
                logger.info(f"Credential {credential.id} ({credential.prefix}) cooldown elapsed")
        return restored

    def _next_hint(self) -> str | None:
        total = len(self._credentials)
        for offset in range(total):
            credential = self._credentials[(self._cursor + offset) % total]
            if credential.is_available:
                return redact(credential.secret)
        return None

    def _status(self, now: float) -> PoolStatus:
        total = len(self._credentials)
        available = self._available_count()
        usage = [c.usage_count for c in self._credentials]
        total_usage = sum(usage)
        max_usage = max(usage, default=0)
        load_balance = min(usage) / max_usage if max_usage else 1.0

        return PoolStatus(
            total_credentials=total,
            available_credentials=available,
            unavailable_credentials=total - available,
            health=classify_health(available, total),
            total_usage=total_usage,
            avg_usage_per_credential=round(total_usage / total, 2) if total else 0.0,
            load_balance=round(load_balance, 2),
            last_failure_age=None if self._last_failure_at is None else now - self._last_failure_at,
            last_failed_prefix=self._last_failed_prefix,
            next_credential_hint=self._next_hint(),
        )
