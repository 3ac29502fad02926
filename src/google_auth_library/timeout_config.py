# src/google_auth_library/timeout_config.py
"""
Centralized timeout configuration for outbound HTTP requests.

Calls to Google's OAuth and Gmail endpoints use the same defaults httpx
applies on its own (5 seconds per phase). All values can be overridden via
environment variables:
    TIMEOUT_CONNECT - Connection establishment timeout
    TIMEOUT_READ - Response read timeout
    TIMEOUT_WRITE - Request body send timeout
    TIMEOUT_POOL - Connection pool acquisition timeout
"""

import os
import logging
import httpx

lib_logger = logging.getLogger("google_auth_library")


class TimeoutConfig:
    """
    Centralized timeout configuration for HTTP requests.

    All values can be overridden via environment variables.
    """

    # Default values (in seconds), matching httpx.Timeout(5.0)
    _CONNECT = 5.0
    _READ = 5.0
    _WRITE = 5.0
    _POOL = 5.0

    @classmethod
    def _get_env_float(cls, key: str, default: float) -> float:
        """Get a float value from environment variable, or return default."""
        value = os.environ.get(key)
        if value is not None:
            try:
                return float(value)
            except ValueError:
                lib_logger.warning(
                    f"Invalid value for {key}: {value}. Using default: {default}"
                )
        return default

    @classmethod
    def connect(cls) -> float:
        """Connection establishment timeout."""
        return cls._get_env_float("TIMEOUT_CONNECT", cls._CONNECT)

    @classmethod
    def read(cls) -> float:
        """Response read timeout."""
        return cls._get_env_float("TIMEOUT_READ", cls._READ)

    @classmethod
    def write(cls) -> float:
        """Request body send timeout."""
        return cls._get_env_float("TIMEOUT_WRITE", cls._WRITE)

    @classmethod
    def pool(cls) -> float:
        """Connection pool acquisition timeout."""
        return cls._get_env_float("TIMEOUT_POOL", cls._POOL)

    @classmethod
    def default(cls) -> httpx.Timeout:
        """Timeout used by the shared outbound client."""
        return httpx.Timeout(
            connect=cls.connect(),
            read=cls.read(),
            write=cls.write(),
            pool=cls.pool(),
        )
