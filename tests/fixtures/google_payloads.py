"""Sample Google OAuth and Gmail API payloads for testing."""

AUTH_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
USER_INFO_ENDPOINT = "https://www.googleapis.com/oauth2/v2/userinfo"
REVOKE_ENDPOINT = "https://oauth2.googleapis.com/revoke"
GMAIL_HOST = "gmail.googleapis.com"
GMAIL_MESSAGES_PATH = "/gmail/v1/users/me/messages"

TOKEN_RESPONSE = {
    "access_token": "ya29.first-access-token",
    "refresh_token": "1//first-refresh-token",
    "expires_in": 3599,
    "scope": "https://www.googleapis.com/auth/gmail.readonly https://www.googleapis.com/auth/userinfo.email",
    "token_type": "Bearer",
}

TOKEN_RESPONSE_NO_REFRESH = {
    "access_token": "ya29.no-refresh-access-token",
    "expires_in": 3599,
    "token_type": "Bearer",
}

REFRESH_RESPONSE = {
    "access_token": "ya29.refreshed-access-token",
    "expires_in": 3599,
    "token_type": "Bearer",
}

INVALID_GRANT = {
    "error": "invalid_grant",
    "error_description": "Token has been expired or revoked.",
}

USER_INFO = {
    "id": "1234567890",
    "email": "someone@example.com",
    "verified_email": True,
}

MESSAGE_LIST = {
    "messages": [
        {"id": "m1", "threadId": "t1"},
        {"id": "m2", "threadId": "t2"},
    ],
    "resultSizeEstimate": 2,
}

MESSAGE_M1_METADATA = {
    "id": "m1",
    "threadId": "t1",
    "snippet": "Hello there",
    "payload": {
        "headers": [
            {"name": "From", "value": "a@x.com"},
            {"name": "subject", "value": "Hi"},
            {"name": "DATE", "value": "Mon, 19 Oct 2026 09:00:00 +0000"},
        ]
    },
}

MESSAGE_NOT_FOUND = {
    "error": {
        "code": 404,
        "message": "Requested entity was not found.",
        "status": "NOT_FOUND",
    }
}

MESSAGE_FULL = {
    "id": "m1",
    "threadId": "t1",
    "labelIds": ["UNREAD", "INBOX"],
    "snippet": "Hello there",
    "payload": {"mimeType": "text/plain", "headers": [], "body": {"size": 11}},
    "sizeEstimate": 1024,
}
