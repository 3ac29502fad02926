import json
import logging
from typing import Any, Optional

import httpx

lib_logger = logging.getLogger("google_auth_library")


def extract_error_body(response: httpx.Response) -> Any:
    """
    Return the most useful representation of an error response body.

    Google endpoints answer with JSON error objects; anything else (HTML error
    pages from proxies, empty bodies) is returned as text so it can still be
    surfaced to the caller.
    """
    try:
        return response.json()
    except (json.JSONDecodeError, ValueError):
        return response.text or None


class ProxyError(Exception):
    """
    Base class for every error that maps onto an HTTP response.

    Attributes:
        status_code: HTTP status the error is rendered with
        detail: JSON-serialisable payload placed under "error" in the response
    """

    status_code: int = 500

    def __init__(self, detail: Any = None, status_code: Optional[int] = None):
        self.detail = detail if detail is not None else self.default_detail()
        if status_code is not None:
            self.status_code = status_code
        super().__init__(str(self.detail))

    def default_detail(self) -> Any:
        return "Request error"


class BadRequestError(ProxyError):
    """Raised when a required request input (code, return URL) is missing."""

    status_code = 400


class UnauthorizedError(ProxyError):
    """Raised by the authentication gate when no usable credential exists."""

    status_code = 401

    def default_detail(self) -> Any:
        return "Not authorized"


class ExchangeError(ProxyError):
    """
    Raised when the token endpoint rejects an authorization code.

    The provider's error body is kept verbatim in `detail` so the caller sees
    exactly what Google answered (e.g. {"error": "invalid_grant", ...}).
    """

    def __init__(self, detail: Any = None, provider_status: Optional[int] = None):
        self.provider_status = provider_status
        super().__init__(detail)


class RefreshError(ProxyError):
    """
    Raised when the token endpoint refuses a refresh token.

    This is terminal: a revoked or expired refresh token needs a new login,
    so callers must not retry.
    """

    def __init__(self, detail: Any = None, provider_status: Optional[int] = None):
        self.provider_status = provider_status
        super().__init__(detail)


class DownstreamError(ProxyError):
    """
    Raised when a Gmail API call fails.

    The downstream status is passed through; a transport failure with no
    response at all renders as 500.
    """

    def __init__(self, detail: Any = None, status_code: Optional[int] = None):
        super().__init__(detail, status_code=status_code or 500)

    @classmethod
    def from_response(cls, response: httpx.Response) -> "DownstreamError":
        return cls(extract_error_body(response), status_code=response.status_code)
