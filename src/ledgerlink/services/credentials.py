"""Process-local holder linking a session to its access credential."""

import secrets
import threading
import time
from collections.abc import Callable
from datetime import timedelta

from ..provider.schemas import AccessCredential

DEFAULT_MAX_AGE = timedelta(days=31)


class CredentialStore:
    """Thread-safe in-memory map from link id to AccessCredential.

    Entries live only as long as the process; nothing is written to disk.
    An entry not used for ``max_age`` is dropped, so credentials of sessions
    that expired or lost their cookie do not accumulate.
    """

    def __init__(
        self,
        max_age: timedelta = DEFAULT_MAX_AGE,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_age = max_age
        self._clock = clock
        self._credentials: dict[str, tuple[AccessCredential, float]] = {}
        self._lock = threading.Lock()

    @staticmethod
    def new_link_id() -> str:
        return secrets.token_urlsafe(24)

    def _is_expired(self, last_used: float, now: float) -> bool:
        return now - last_used > self.max_age.total_seconds()

    def _prune(self, now: float) -> None:
        # Caller holds the lock
        expired = [
            link_id
            for link_id, (_, last_used) in self._credentials.items()
            if self._is_expired(last_used, now)
        ]
        for link_id in expired:
            del self._credentials[link_id]

    def save(self, link_id: str, credential: AccessCredential) -> None:
        with self._lock:
            now = self._clock()
            self._prune(now)
            self._credentials[link_id] = (credential, now)

    def load(self, link_id: str | None) -> AccessCredential | None:
        """Return the credential for ``link_id`` and mark it as used."""
        if not link_id:
            return None
        with self._lock:
            entry = self._credentials.get(link_id)
            if entry is None:
                return None
            credential, last_used = entry
            now = self._clock()
            if self._is_expired(last_used, now):
                del self._credentials[link_id]
                return None
            self._credentials[link_id] = (credential, now)
            return credential

    def forget(self, link_id: str | None) -> None:
        if not link_id:
            return
        with self._lock:
            self._credentials.pop(link_id, None)

    def __len__(self) -> int:
        with self._lock:
            self._prune(self._clock())
            return len(self._credentials)
