"""
OAuth flow controller.

Drives the browser through Google's authorization-code flow:

    login    -> remember where to return, redirect to Google's consent page
    callback -> exchange the code, store the credential, redirect back
    status   -> report whether the caller's scope holds a credential
    logout   -> best-effort revoke, then drop the credential

The only state held between login and callback is the return URL, kept in
the signed session cookie.
"""

import asyncio
import logging
from typing import Any, Dict, MutableMapping, Optional, Set

from google_auth_library import (
    BadRequestError,
    Credential,
    CredentialScope,
    GoogleTokenClient,
)

logger = logging.getLogger(__name__)

RETURN_TO_KEY = "return_to"


def append_auth_success(url: str) -> str:
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}auth=success"


class OAuthFlowController:
    def __init__(
        self,
        scope: CredentialScope,
        token_client: GoogleTokenClient,
        revoke_on_logout: bool = True,
    ):
        self.scope = scope
        self.token_client = token_client
        self.revoke_on_logout = revoke_on_logout
        self.pending_lookups: Set[asyncio.Task] = set()

    def login(
        self,
        session: MutableMapping[str, Any],
        return_to: Optional[str] = None,
        referer: Optional[str] = None,
    ) -> str:
        """
        Record the return URL and build Google's consent URL.

        The return URL is the explicit `returnTo`, else the Referer header.
        With neither, the login is rejected rather than sent to a default.
        """
        target = return_to or referer
        if not target:
            raise BadRequestError("returnTo URL is required")
        session[RETURN_TO_KEY] = target
        return self.token_client.build_authorization_url()

    async def callback(
        self,
        session: MutableMapping[str, Any],
        code: Optional[str],
        error: Optional[str] = None,
    ) -> str:
        """
        Complete the flow and return the URL to redirect the browser to.

        Raises:
            BadRequestError: no code, consent denied, or no recorded return URL
            ExchangeError: Google refused the code
        """
        if not code:
            if error:
                raise BadRequestError(f"Authorization denied: {error}")
            raise BadRequestError("no authorization code provided")

        grant = await self.token_client.exchange_code(code)
        credential = Credential.from_grant(grant)
        self.scope.store_for(session, create=True).set(credential)
        logger.info(
            f"Credential stored ({self.scope.name} scope, "
            f"refresh token: {'yes' if credential.refresh_token else 'no'})"
        )
        self._schedule_email_lookup(credential)

        return_url = session.pop(RETURN_TO_KEY, None)
        if not return_url:
            raise BadRequestError("no return URL in session")
        return append_auth_success(return_url)

    def status(self, session: MutableMapping[str, Any]) -> Dict[str, Any]:
        store = self.scope.store_for(session)
        credential = store.get()
        return {
            "authenticated": store.is_authenticated,
            "email": credential.user_email if credential else None,
        }

    async def logout(self, session: MutableMapping[str, Any]) -> Dict[str, Any]:
        credential = self.scope.store_for(session).get()
        if self.revoke_on_logout and credential and credential.access_token:
            await self.token_client.revoke(credential.access_token)
        self.scope.destroy(session)
        return {"success": True}

    def _schedule_email_lookup(self, credential: Credential):
        task = asyncio.create_task(self._lookup_email(credential))
        self.pending_lookups.add(task)
        task.add_done_callback(self.pending_lookups.discard)

    async def _lookup_email(self, credential: Credential):
        email = await self.token_client.fetch_user_email(credential.access_token)
        if email:
            credential.user_email = email
            logger.info(f"Authenticated as {email}")

    async def aclose(self):
        """Cancel email lookups still in flight (process shutdown)."""
        for task in list(self.pending_lookups):
            task.cancel()
        if self.pending_lookups:
            await asyncio.gather(*self.pending_lookups, return_exceptions=True)
        self.pending_lookups.clear()
