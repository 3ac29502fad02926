import logging
from datetime import datetime

from fastapi import Request

from google_auth_library import CredentialScope

def log_auth_request_to_console(request: Request, scope: CredentialScope):
    """
    Logs a concise, single-line summary of an /auth request and the state of
    the caller's credential. Token values are never logged.
    """
    time_str = datetime.now().strftime("%H:%M:%S")
    credential = scope.store_for(request.session).get()
    has_token = bool(credential and credential.access_token)
    email = credential.user_email if credential else None
    client = request.client
    client_str = f"{client.host}:{client.port}" if client else "unknown"

    log_message = (
        f"{time_str} - {client_str} - {request.method} {request.url.path} "
        f"- scope: {scope.name}, has_access_token: {has_token}, email: {email or 'N/A'}"
    )
    logging.info(log_message)
