"""
Token Exchange Client Tests

Exercise the Google OAuth endpoints against respx mocks.
"""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest
import respx

from google_auth_library.credential_store import Credential, CredentialStore
from google_auth_library.error_handler import ExchangeError, RefreshError
from google_auth_library.token_client import DEFAULT_EXPIRES_IN, GoogleTokenClient

from fixtures.google_payloads import (
    INVALID_GRANT,
    REFRESH_RESPONSE,
    REVOKE_ENDPOINT,
    TOKEN_ENDPOINT,
    TOKEN_RESPONSE,
    TOKEN_RESPONSE_NO_REFRESH,
    USER_INFO,
    USER_INFO_ENDPOINT,
)

REDIRECT_URI = "http://localhost:3001/auth/callback"


def form(request: httpx.Request) -> dict:
    return {key: values[0] for key, values in parse_qs(request.content.decode()).items()}


def make_client(http_client):
    return GoogleTokenClient(
        client_id="cid",
        client_secret="csecret",
        redirect_uri=REDIRECT_URI,
        http_client=http_client,
    )


def test_requires_client_credentials():
    with pytest.raises(ValueError):
        GoogleTokenClient("", "secret", REDIRECT_URI, http_client=None)
    with pytest.raises(ValueError):
        GoogleTokenClient("cid", "", REDIRECT_URI, http_client=None)


def test_authorization_url_parameters():
    url = make_client(http_client=None).build_authorization_url()
    parsed = urlparse(url)
    params = {key: values[0] for key, values in parse_qs(parsed.query).items()}

    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == GoogleTokenClient.AUTH_URI
    assert params == {
        "client_id": "cid",
        "redirect_uri": REDIRECT_URI,
        "response_type": "code",
        "scope": " ".join(GoogleTokenClient.DEFAULT_SCOPES),
        "access_type": "offline",
        "prompt": "consent",
    }


@pytest.mark.asyncio
async def test_exchange_code_posts_authorization_code_grant():
    async with httpx.AsyncClient() as http_client:
        with respx.mock() as mock:
            route = mock.post(TOKEN_ENDPOINT).respond(200, json=TOKEN_RESPONSE)

            grant = await make_client(http_client).exchange_code("4/auth-code")

    assert grant.access_token == TOKEN_RESPONSE["access_token"]
    assert grant.refresh_token == TOKEN_RESPONSE["refresh_token"]
    assert grant.expires_in == 3599
    assert form(route.calls.last.request) == {
        "code": "4/auth-code",
        "client_id": "cid",
        "client_secret": "csecret",
        "redirect_uri": REDIRECT_URI,
        "grant_type": "authorization_code",
    }


@pytest.mark.asyncio
async def test_exchange_code_without_refresh_token():
    async with httpx.AsyncClient() as http_client:
        with respx.mock() as mock:
            mock.post(TOKEN_ENDPOINT).respond(200, json=TOKEN_RESPONSE_NO_REFRESH)

            grant = await make_client(http_client).exchange_code("4/auth-code")

    assert grant.refresh_token is None


@pytest.mark.asyncio
async def test_missing_expires_in_assumes_one_hour():
    payload = {key: value for key, value in TOKEN_RESPONSE.items() if key != "expires_in"}
    async with httpx.AsyncClient() as http_client:
        with respx.mock() as mock:
            mock.post(TOKEN_ENDPOINT).respond(200, json=payload)

            grant = await make_client(http_client).exchange_code("4/auth-code")

    assert grant.expires_in == DEFAULT_EXPIRES_IN
    store = CredentialStore()
    store.set(Credential.from_grant(grant))
    assert not store.is_expired()


@pytest.mark.asyncio
async def test_exchange_code_surfaces_provider_error_body():
    async with httpx.AsyncClient() as http_client:
        with respx.mock() as mock:
            mock.post(TOKEN_ENDPOINT).respond(400, json=INVALID_GRANT)

            with pytest.raises(ExchangeError) as excinfo:
                await make_client(http_client).exchange_code("4/used-code")

    assert excinfo.value.detail == INVALID_GRANT
    assert excinfo.value.provider_status == 400
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_exchange_code_network_failure():
    async with httpx.AsyncClient() as http_client:
        with respx.mock() as mock:
            mock.post(TOKEN_ENDPOINT).mock(side_effect=httpx.ConnectError("boom"))

            with pytest.raises(ExchangeError):
                await make_client(http_client).exchange_code("4/auth-code")


@pytest.mark.asyncio
async def test_refresh_posts_refresh_token_grant():
    async with httpx.AsyncClient() as http_client:
        with respx.mock() as mock:
            route = mock.post(TOKEN_ENDPOINT).respond(200, json=REFRESH_RESPONSE)

            grant = await make_client(http_client).refresh("1//refresh")

    assert grant.access_token == REFRESH_RESPONSE["access_token"]
    assert grant.refresh_token is None
    assert form(route.calls.last.request) == {
        "client_id": "cid",
        "client_secret": "csecret",
        "refresh_token": "1//refresh",
        "grant_type": "refresh_token",
    }


@pytest.mark.asyncio
async def test_refresh_revoked_token_is_not_retried():
    async with httpx.AsyncClient() as http_client:
        with respx.mock() as mock:
            route = mock.post(TOKEN_ENDPOINT).respond(400, json=INVALID_GRANT)

            with pytest.raises(RefreshError) as excinfo:
                await make_client(http_client).refresh("1//revoked")

    assert route.call_count == 1
    assert excinfo.value.detail == INVALID_GRANT


@pytest.mark.asyncio
async def test_fetch_user_email():
    async with httpx.AsyncClient() as http_client:
        with respx.mock() as mock:
            route = mock.get(USER_INFO_ENDPOINT).respond(200, json=USER_INFO)

            email = await make_client(http_client).fetch_user_email("ya29.token")

    assert email == "someone@example.com"
    assert route.calls.last.request.headers["Authorization"] == "Bearer ya29.token"


@pytest.mark.asyncio
async def test_fetch_user_email_failure_is_swallowed():
    async with httpx.AsyncClient() as http_client:
        with respx.mock() as mock:
            mock.get(USER_INFO_ENDPOINT).respond(401, json={"error": "invalid_token"})

            assert await make_client(http_client).fetch_user_email("ya29.bad") is None


@pytest.mark.asyncio
async def test_revoke_reports_outcome_without_raising():
    async with httpx.AsyncClient() as http_client:
        with respx.mock() as mock:
            route = mock.post(REVOKE_ENDPOINT)
            route.side_effect = [
                httpx.Response(200),
                httpx.ReadTimeout("timed out"),
            ]
            client = make_client(http_client)

            assert await client.revoke("ya29.token") is True
            assert await client.revoke("ya29.token") is False

    assert form(route.calls[0].request) == {"token": "ya29.token"}
