import logging
from typing import Any, MutableMapping

from fastapi import Request

from google_auth_library import (
    Credential,
    CredentialScope,
    GoogleTokenClient,
    RefreshError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)


class AuthenticationGate:
    """
    Guards the Gmail routes.

    A request passes when its scope holds an access token. An expired token
    with a refresh token available is refreshed first; an expired token without
    one is let through and the downstream call decides.

    No lock is held across the refresh: concurrent requests on an expired
    credential each refresh, and the last write wins.
    """

    def __init__(self, scope: CredentialScope, token_client: GoogleTokenClient):
        self.scope = scope
        self.token_client = token_client

    async def authorize(self, session: MutableMapping[str, Any]) -> Credential:
        store = self.scope.store_for(session)
        credential = store.get()
        if credential is None or not credential.access_token:
            raise UnauthorizedError("Not authorized")

        if store.is_expired() and credential.refresh_token:
            try:
                grant = await self.token_client.refresh(credential.refresh_token)
            except RefreshError as e:
                # Credential is kept; the caller has to log in again.
                logger.error(f"Error refreshing token: {e.detail}")
                raise UnauthorizedError("Token expired")
            credential.apply_refresh(grant)
            logger.info("Access token refreshed")

        return credential


async def ensure_authenticated(request: Request) -> Credential:
    """FastAPI dependency returning the caller's live credential."""
    gate: AuthenticationGate = request.app.state.auth_gate
    return await gate.authorize(request.session)
