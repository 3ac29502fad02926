#!/usr/bin/env python3
"""
OAuth API Module

FastAPI endpoints for logging in with Google, handling the OAuth callback,
reporting authentication status and logging out.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from .oauth_flow import OAuthFlowController

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class AuthStatus(BaseModel):
    authenticated: bool
    email: Optional[str] = None


class LogoutResult(BaseModel):
    success: bool


def get_flow_controller(request: Request) -> OAuthFlowController:
    """Dependency to get the OAuth flow controller from app state."""
    return request.app.state.oauth_flow


@router.get("/login")
async def login(
    request: Request,
    returnTo: Optional[str] = None,
    flow: OAuthFlowController = Depends(get_flow_controller),
):
    auth_url = flow.login(
        request.session,
        return_to=returnTo,
        referer=request.headers.get("referer"),
    )
    return RedirectResponse(auth_url, status_code=302)


@router.get("/callback")
async def callback(
    request: Request,
    code: Optional[str] = None,
    error: Optional[str] = None,
    flow: OAuthFlowController = Depends(get_flow_controller),
):
    redirect_url = await flow.callback(request.session, code, error=error)
    return RedirectResponse(redirect_url, status_code=302)


@router.get("/status", response_model=AuthStatus)
async def status(
    request: Request,
    flow: OAuthFlowController = Depends(get_flow_controller),
) -> AuthStatus:
    return AuthStatus(**flow.status(request.session))


@router.post("/logout", response_model=LogoutResult)
async def logout(
    request: Request,
    flow: OAuthFlowController = Depends(get_flow_controller),
) -> LogoutResult:
    result = await flow.logout(request.session)
    logger.info("Logged out, credential cleared")
    return LogoutResult(**result)
