from .credential_store import (
    Credential,
    CredentialScope,
    CredentialStore,
    ProcessCredentialScope,
    SessionCredentialScope,
    TokenGrant,
    build_credential_scope,
)
from .error_handler import (
    BadRequestError,
    DownstreamError,
    ExchangeError,
    ProxyError,
    RefreshError,
    UnauthorizedError,
)
from .gmail_client import GmailClient
from .timeout_config import TimeoutConfig
from .token_client import GoogleTokenClient

__all__ = [
    "Credential",
    "CredentialScope",
    "CredentialStore",
    "ProcessCredentialScope",
    "SessionCredentialScope",
    "TokenGrant",
    "build_credential_scope",
    "BadRequestError",
    "DownstreamError",
    "ExchangeError",
    "ProxyError",
    "RefreshError",
    "UnauthorizedError",
    "GmailClient",
    "TimeoutConfig",
    "GoogleTokenClient",
]
