"""
Environment-driven settings.

Values come from the process environment, optionally seeded from a `.env`
file in the working directory. Google client credentials are mandatory and
checked once at startup so a misconfigured server never accepts requests.
"""

import logging
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Union

from dotenv import load_dotenv

from google_auth_library import GoogleTokenClient

from .config_exceptions import ConfigLoadError, ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3001
CREDENTIAL_SCOPES = ("process", "session")


@dataclass
class Settings:
    client_id: str
    client_secret: str
    redirect_uri: str
    session_secret: str
    credential_scope: str = "process"
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cors_origin_regex: str = ".*"
    revoke_on_logout: bool = True
    metadata_concurrency: int = 10
    session_max_age: int = 24 * 60 * 60
    oauth_scopes: List[str] = field(
        default_factory=lambda: list(GoogleTokenClient.DEFAULT_SCOPES)
    )
    request_logging: bool = False


def load_env_file(path: Optional[Union[Path, str]] = None) -> bool:
    """Load `.env` (without overriding variables already set)."""
    env_path = Path(path) if path else Path.cwd() / ".env"
    if not env_path.exists():
        return False
    try:
        return load_dotenv(env_path, override=False)
    except OSError as e:
        raise ConfigLoadError(f"Could not read {env_path}: {e}")


def _get_int(env: Mapping[str, str], key: str, default: int, minimum: int = 0) -> int:
    value = env.get(key)
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning(f"Invalid value for {key}: {value}. Using default: {default}")
        return default
    if parsed < minimum:
        logger.warning(
            f"Invalid value for {key}: {value}. Must be >= {minimum}. Using default: {default}"
        )
        return default
    return parsed


def _get_bool(env: Mapping[str, str], key: str, default: bool) -> bool:
    value = env.get(key)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(
    env: Optional[Mapping[str, str]] = None,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> Settings:
    """
    Build Settings from environment variables.

    Args:
        env: Mapping to read from (defaults to os.environ)
        host: CLI override for HOST
        port: CLI override for PORT

    Raises:
        ConfigValidationError: GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET missing,
            or CREDENTIAL_SCOPE not one of "process"/"session"
    """
    env = os.environ if env is None else env

    client_id = (env.get("GOOGLE_CLIENT_ID") or "").strip()
    client_secret = (env.get("GOOGLE_CLIENT_SECRET") or "").strip()
    missing = [
        name
        for name, value in (
            ("GOOGLE_CLIENT_ID", client_id),
            ("GOOGLE_CLIENT_SECRET", client_secret),
        )
        if not value
    ]
    if missing:
        raise ConfigValidationError(
            f"Missing required environment variable(s): {', '.join(missing)}"
        )

    scope = (env.get("CREDENTIAL_SCOPE") or "process").strip().lower()
    if scope not in CREDENTIAL_SCOPES:
        raise ConfigValidationError(
            f"Invalid CREDENTIAL_SCOPE '{scope}'. Expected one of: {', '.join(CREDENTIAL_SCOPES)}"
        )

    resolved_port = port if port is not None else _get_int(env, "PORT", DEFAULT_PORT, 1)
    resolved_host = host or env.get("HOST") or DEFAULT_HOST

    session_secret = env.get("SESSION_SECRET")
    if not session_secret:
        session_secret = secrets.token_hex(32)
        logger.warning(
            "SESSION_SECRET is not set; using a random secret. "
            "Sessions will not survive a restart."
        )

    return Settings(
        client_id=client_id,
        client_secret=client_secret,
        redirect_uri=env.get("GOOGLE_REDIRECT_URI")
        or f"http://localhost:{resolved_port}/auth/callback",
        session_secret=session_secret,
        credential_scope=scope,
        host=resolved_host,
        port=resolved_port,
        cors_origin_regex=env.get("CORS_ORIGIN_REGEX") or ".*",
        revoke_on_logout=_get_bool(env, "REVOKE_ON_LOGOUT", True),
        metadata_concurrency=_get_int(env, "GMAIL_METADATA_CONCURRENCY", 10),
        session_max_age=_get_int(env, "SESSION_MAX_AGE_SECONDS", 24 * 60 * 60, 1),
    )
