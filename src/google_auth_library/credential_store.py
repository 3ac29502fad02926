# src/google_auth_library/credential_store.py
"""
In-memory credential storage.

A `CredentialStore` is one slot holding at most one OAuth credential. Which
slot a request sees is decided by a credential scope:

- ProcessCredentialScope: one slot shared by every caller (single-user mode)
- SessionCredentialScope: one slot per browser session, keyed by a random
  session id kept in the signed session cookie

Nothing is written to disk; all state lives for the lifetime of the process.
"""

import logging
import secrets
import time
from dataclasses import dataclass
from typing import Any, Dict, MutableMapping, Optional

lib_logger = logging.getLogger("google_auth_library")

SESSION_ID_KEY = "sid"


def now_ms() -> float:
    return time.time() * 1000


@dataclass
class TokenGrant:
    """Token endpoint answer, before it is turned into a stored credential."""

    access_token: str
    expires_in: int
    refresh_token: Optional[str] = None


@dataclass
class Credential:
    """
    The OAuth credential for one scope.

    `expires_at` is milliseconds since the epoch, computed once from the
    token response's `expires_in` when that response arrives.
    """

    access_token: str
    expires_at: float
    refresh_token: Optional[str] = None
    user_email: Optional[str] = None

    @classmethod
    def from_grant(cls, grant: TokenGrant, issued_at: Optional[float] = None) -> "Credential":
        issued_at = now_ms() if issued_at is None else issued_at
        return cls(
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expires_at=issued_at + grant.expires_in * 1000,
        )

    def apply_refresh(self, grant: TokenGrant, issued_at: Optional[float] = None):
        """Update the credential in place from a refresh response."""
        issued_at = now_ms() if issued_at is None else issued_at
        self.access_token = grant.access_token
        self.expires_at = issued_at + grant.expires_in * 1000
        # Google occasionally rotates the refresh token
        if grant.refresh_token:
            self.refresh_token = grant.refresh_token


class CredentialStore:
    """A single credential slot."""

    def __init__(self):
        self._credential: Optional[Credential] = None
        self.last_access: float = time.time()

    def get(self) -> Optional[Credential]:
        self.last_access = time.time()
        return self._credential

    def set(self, credential: Credential):
        if credential.access_token and credential.expires_at is None:
            raise ValueError("Credential with an access token must carry expires_at")
        self.last_access = time.time()
        self._credential = credential

    def clear(self):
        self._credential = None

    def is_expired(self, at: Optional[float] = None) -> bool:
        credential = self._credential
        if credential is None or not credential.expires_at:
            return False
        at = now_ms() if at is None else at
        return at >= credential.expires_at

    @property
    def is_authenticated(self) -> bool:
        return self._credential is not None and bool(self._credential.access_token)


class CredentialScope:
    """
    Resolves the credential slot that belongs to a request.

    `session` is the request's session mapping (Starlette's `request.session`).
    """

    name: str = None

    def store_for(self, session: MutableMapping[str, Any], create: bool = False) -> CredentialStore:
        raise NotImplementedError

    def destroy(self, session: MutableMapping[str, Any]):
        raise NotImplementedError

    def close(self):
        """Drop every credential held by this scope (process shutdown)."""
        raise NotImplementedError


class ProcessCredentialScope(CredentialScope):
    """One credential for the whole process, whatever session the caller has."""

    name = "process"

    def __init__(self, store: Optional[CredentialStore] = None):
        self.store = store or CredentialStore()

    def store_for(self, session: MutableMapping[str, Any], create: bool = False) -> CredentialStore:
        return self.store

    def destroy(self, session: MutableMapping[str, Any]):
        self.store.clear()
        lib_logger.info("Process credential cleared")

    def close(self):
        self.store.clear()


class SessionCredentialScope(CredentialScope):
    """
    One credential per browser session.

    The credential itself stays server-side; the cookie only carries an
    opaque session id. Slots idle for longer than `max_idle_seconds` are
    purged the next time any slot is resolved.
    """

    name = "session"

    def __init__(self, max_idle_seconds: int = 24 * 60 * 60):
        self.max_idle_seconds = max_idle_seconds
        self._stores: Dict[str, CredentialStore] = {}

    def __len__(self) -> int:
        return len(self._stores)

    def _purge_idle(self):
        cutoff = time.time() - self.max_idle_seconds
        stale = [sid for sid, store in self._stores.items() if store.last_access < cutoff]
        for sid in stale:
            del self._stores[sid]
        if stale:
            lib_logger.debug(f"Purged {len(stale)} idle session credential(s)")

    def store_for(self, session: MutableMapping[str, Any], create: bool = False) -> CredentialStore:
        self._purge_idle()
        sid = session.get(SESSION_ID_KEY)
        if sid and sid in self._stores:
            return self._stores[sid]
        if not create:
            # Detached empty slot: read-only callers never mint session ids
            return CredentialStore()
        if not sid:
            sid = secrets.token_urlsafe(24)
            session[SESSION_ID_KEY] = sid
        store = CredentialStore()
        self._stores[sid] = store
        return store

    def destroy(self, session: MutableMapping[str, Any]):
        sid = session.get(SESSION_ID_KEY)
        if sid:
            self._stores.pop(sid, None)
        session.clear()
        lib_logger.info("Session credential destroyed")

    def close(self):
        self._stores.clear()


def build_credential_scope(name: str, session_max_age: int = 24 * 60 * 60) -> CredentialScope:
    """Create the credential scope named by configuration."""
    normalized = (name or "process").strip().lower()
    if normalized == ProcessCredentialScope.name:
        return ProcessCredentialScope()
    if normalized == SessionCredentialScope.name:
        return SessionCredentialScope(max_idle_seconds=session_max_age)
    raise ValueError(
        f"Unknown credential scope '{name}'. Expected 'process' or 'session'."
    )
