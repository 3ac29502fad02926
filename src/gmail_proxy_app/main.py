import argparse
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

# Add the 'src' directory to the Python path
sys.path.append(str(Path(__file__).resolve().parent.parent))

import colorlog
import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from rich.console import Console
from starlette.middleware.sessions import SessionMiddleware

from google_auth_library import (
    GmailClient,
    GoogleTokenClient,
    ProxyError,
    TimeoutConfig,
    build_credential_scope,
)
from google_auth_library.utils.paths import get_default_root, get_logs_dir

from gmail_proxy_app.auth_api import router as auth_router
from gmail_proxy_app.auth_gate import AuthenticationGate
from gmail_proxy_app.config import Settings, load_env_file, load_settings
from gmail_proxy_app.config_exceptions import ConfigLoadError, ConfigValidationError
from gmail_proxy_app.gmail_api import router as gmail_router
from gmail_proxy_app.oauth_flow import OAuthFlowController
from gmail_proxy_app.request_logger import log_auth_request_to_console


def configure_logging(root_dir: Optional[Path] = None):
    """Colored console output at INFO plus a plain-text log file."""
    log_dir = get_logs_dir(root_dir)

    console_handler = colorlog.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(
        colorlog.ColoredFormatter(
            "%(log_color)s%(message)s",
            log_colors={
                "DEBUG": "cyan",
                "INFO": "green",
                "WARNING": "yellow",
                "ERROR": "red",
                "CRITICAL": "red,bg_white",
            },
        )
    )

    info_file_handler = logging.FileHandler(log_dir / "proxy.log", encoding="utf-8")
    info_file_handler.setLevel(logging.INFO)
    info_file_handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(info_file_handler)

    # Silence noisy loggers by setting their level higher than root
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Tear down the shared HTTP client and credential scope on shutdown."""
    logging.info(
        f"Credential scope: {app.state.credential_scope.name}, "
        f"redirect URI: {app.state.settings.redirect_uri}"
    )
    yield
    await app.state.oauth_flow.aclose()
    app.state.credential_scope.close()
    await app.state.http_client.aclose()
    logging.info("HTTP client closed, credentials dropped.")


def create_app(
    settings: Settings, http_client: Optional[httpx.AsyncClient] = None
) -> FastAPI:
    """
    Build the FastAPI application and its collaborators.

    Everything the routes need is created here and attached to `app.state`,
    so the app works with or without the lifespan having run.
    """
    app = FastAPI(lifespan=lifespan)

    try:
        credential_scope = build_credential_scope(
            settings.credential_scope, session_max_age=settings.session_max_age
        )
    except ValueError as e:
        raise ConfigValidationError(str(e)) from e
    http_client = http_client or httpx.AsyncClient(timeout=TimeoutConfig.default())
    token_client = GoogleTokenClient(
        client_id=settings.client_id,
        client_secret=settings.client_secret,
        redirect_uri=settings.redirect_uri,
        http_client=http_client,
        scopes=settings.oauth_scopes,
    )

    app.state.settings = settings
    app.state.http_client = http_client
    app.state.credential_scope = credential_scope
    app.state.token_client = token_client
    app.state.auth_gate = AuthenticationGate(credential_scope, token_client)
    app.state.oauth_flow = OAuthFlowController(
        credential_scope, token_client, revoke_on_logout=settings.revoke_on_logout
    )
    app.state.gmail_client = GmailClient(
        http_client, metadata_concurrency=settings.metadata_concurrency
    )

    @app.exception_handler(ProxyError)
    async def proxy_error_handler(request: Request, exc: ProxyError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    if settings.request_logging:

        @app.middleware("http")
        async def log_auth_requests(request: Request, call_next):
            if "/auth" in request.url.path:
                log_auth_request_to_console(request, credential_scope)
            return await call_next(request)

    # Session cookie carries the return URL (and the session id in session scope)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.session_secret,
        max_age=settings.session_max_age,
        same_site="lax",
        https_only=False,
    )
    # Reflect any matching origin so cookies work from other localhost ports
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(gmail_router)
    return app


def main(argv=None):
    parser = argparse.ArgumentParser(description="Gmail OAuth Proxy Server")
    parser.add_argument("--host", type=str, default=None, help="Host to bind the server to.")
    parser.add_argument("--port", type=int, default=None, help="Port to run the server on.")
    parser.add_argument(
        "--enable-request-logging",
        action="store_true",
        help="Log a summary line for every /auth request.",
    )
    args = parser.parse_args(argv)

    console = Console()
    root_dir = get_default_root()

    try:
        load_env_file(root_dir / ".env")
        settings = load_settings(host=args.host, port=args.port)
    except (ConfigLoadError, ConfigValidationError) as e:
        console.print(f"\n[bold red]❌ Configuration error:[/bold red] {e}")
        console.print("Set GOOGLE_CLIENT_ID and GOOGLE_CLIENT_SECRET in .env or the environment.\n")
        sys.exit(1)
    settings.request_logging = args.enable_request_logging

    configure_logging(root_dir)
    if settings.request_logging:
        logging.info("Request logging is enabled.")

    console.print("━" * 70)
    console.print(f"Starting Gmail proxy on http://{settings.host}:{settings.port}")
    console.print(f"Credential scope: {settings.credential_scope}")
    console.print(f"OAuth redirect URI: {settings.redirect_uri}")
    console.print("━" * 70)

    app = create_app(settings)

    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
