# src/google_auth_library/token_client.py

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from .credential_store import TokenGrant
from .error_handler import ExchangeError, RefreshError, extract_error_body

lib_logger = logging.getLogger("google_auth_library")

# Google access tokens live one hour
DEFAULT_EXPIRES_IN = 3600


class GoogleTokenClient:
    """
    Client for Google's OAuth2 endpoints.

    Covers the parts of the authorization-code flow a web backend performs
    itself: building the consent URL, exchanging the returned code, refreshing
    access tokens, resolving the account email and revoking tokens on logout.

    No retry or backoff is attempted. A refused refresh token almost always
    means the user has to log in again.
    """

    AUTH_URI: str = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URI: str = "https://oauth2.googleapis.com/token"
    USER_INFO_URI: str = "https://www.googleapis.com/oauth2/v2/userinfo"
    REVOKE_URI: str = "https://oauth2.googleapis.com/revoke"

    DEFAULT_SCOPES: List[str] = [
        "https://www.googleapis.com/auth/gmail.readonly",
        "https://www.googleapis.com/auth/userinfo.email",
    ]

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http_client: httpx.AsyncClient,
        scopes: Optional[List[str]] = None,
    ):
        if not client_id:
            raise ValueError("client_id is required")
        if not client_secret:
            raise ValueError("client_secret is required")
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = list(scopes or self.DEFAULT_SCOPES)
        self._client = http_client

    def build_authorization_url(self) -> str:
        """
        Build the consent URL the browser is redirected to.

        `access_type=offline` together with `prompt=consent` makes Google issue
        a refresh token on every login, even for an account that already
        granted consent before.
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{self.AUTH_URI}?{urlencode(params)}"

    @staticmethod
    def _parse_grant(token_data: Dict[str, Any]) -> TokenGrant:
        expires_in = token_data.get("expires_in")
        if expires_in is None:
            lib_logger.warning(
                f"Token response carried no expires_in; assuming {DEFAULT_EXPIRES_IN}s"
            )
            expires_in = DEFAULT_EXPIRES_IN
        return TokenGrant(
            access_token=token_data["access_token"],
            expires_in=int(expires_in),
            refresh_token=token_data.get("refresh_token"),
        )

    async def exchange_code(self, code: str) -> TokenGrant:
        """
        Exchange an authorization code for an access/refresh token pair.

        Raises:
            ExchangeError: the token endpoint refused the code or was unreachable
        """
        lib_logger.info(
            f"Exchanging authorization code for tokens (code length {len(code)}, "
            f"redirect_uri {self.redirect_uri})"
        )
        try:
            response = await self._client.post(
                self.TOKEN_URI,
                data={
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                },
            )
        except httpx.RequestError as e:
            lib_logger.error(f"Token exchange request failed: {e}")
            raise ExchangeError(f"Token endpoint unreachable: {e}")

        if response.is_error:
            body = extract_error_body(response)
            lib_logger.error(
                f"Error exchanging code for token (HTTP {response.status_code}): {body}"
            )
            raise ExchangeError(body, provider_status=response.status_code)

        try:
            grant = self._parse_grant(response.json())
        except (KeyError, ValueError) as e:
            raise ExchangeError(f"Malformed token response: {e}")

        if not grant.refresh_token:
            lib_logger.warning(
                "Token response carried no refresh_token; the credential cannot be refreshed"
            )
        return grant

    async def refresh(self, refresh_token: str) -> TokenGrant:
        """
        Obtain a new access token from a refresh token.

        Raises:
            RefreshError: the refresh token was revoked, expired or refused
        """
        lib_logger.debug("Refreshing Google OAuth access token...")
        try:
            response = await self._client.post(
                self.TOKEN_URI,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "refresh_token": refresh_token,
                    "grant_type": "refresh_token",
                },
            )
        except httpx.RequestError as e:
            lib_logger.error(f"Token refresh request failed: {e}")
            raise RefreshError(f"Token endpoint unreachable: {e}")

        if response.is_error:
            body = extract_error_body(response)
            lib_logger.error(
                f"Error refreshing token (HTTP {response.status_code}): {body}"
            )
            raise RefreshError(body, provider_status=response.status_code)

        try:
            grant = self._parse_grant(response.json())
        except (KeyError, ValueError) as e:
            raise RefreshError(f"Malformed refresh response: {e}")

        lib_logger.debug(
            f"Access token refreshed, valid for {grant.expires_in}s"
        )
        return grant

    async def fetch_user_email(self, access_token: str) -> Optional[str]:
        """Resolve the account email. Failures are logged and return None."""
        try:
            response = await self._client.get(
                self.USER_INFO_URI,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            response.raise_for_status()
            return response.json().get("email")
        except (httpx.HTTPError, ValueError) as e:
            lib_logger.warning(f"Error retrieving email: {e}")
            return None

    async def revoke(self, token: str) -> bool:
        """Revoke a token at Google. Returns False instead of raising on failure."""
        try:
            response = await self._client.post(
                self.REVOKE_URI,
                data={"token": token},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            lib_logger.warning(f"Token revoke failed, continuing: {e}")
            return False
        lib_logger.info("Access token revoked at provider")
        return True
