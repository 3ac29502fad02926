#!/usr/bin/env python3
"""
Gmail API Module

Authenticated pass-through endpoints for the signed-in user's mailbox.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request

from google_auth_library import Credential, GmailClient

from .auth_gate import ensure_authenticated

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/gmail", tags=["gmail"])


def get_gmail_client(request: Request) -> GmailClient:
    """Dependency to get the Gmail client from app state."""
    return request.app.state.gmail_client


@router.get("/messages")
async def list_messages(
    q: str = "is:unread",
    maxResults: str = "20",
    pageToken: Optional[str] = None,
    expand: str = "true",
    credential: Credential = Depends(ensure_authenticated),
    gmail: GmailClient = Depends(get_gmail_client),
) -> Dict[str, Any]:
    """
    List messages. Unless `expand=false`, each message is enriched with its
    From, Subject and Date headers.
    """
    return await gmail.list_messages(
        credential.access_token,
        query=q,
        max_results=maxResults,
        page_token=pageToken,
        expand=expand.strip().lower() != "false",
    )


@router.get("/messages/{message_id}")
async def get_message(
    message_id: str,
    format: str = "full",
    credential: Credential = Depends(ensure_authenticated),
    gmail: GmailClient = Depends(get_gmail_client),
) -> Dict[str, Any]:
    return await gmail.get_message(credential.access_token, message_id, format=format)
