"""
Auth router - registration, login, logout and the current user.

Login stores a server-side session and hands its opaque id to the client in
an HttpOnly cookie; every other router resolves that cookie through
core.auth.get_caller_identity.
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Response

from core.auth import CallerIdentity, get_caller_identity
from core.config import SESSION_COOKIE_NAME, SESSION_COOKIE_SECURE, SESSION_TTL_SECONDS
from core.dependencies import get_auth_service
from services import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


@router.post("/register", status_code=201, summary="Register a user account")
async def register(
    body: Optional[Dict[str, Any]] = Body(None),
    caller: CallerIdentity = Depends(get_caller_identity),
    auth_service: AuthService = Depends(get_auth_service)
):
    """
    - **name**, **email**, **password**: required
    - **role**: ADMIN, DOCTOR, NURSE, LAB_TECHNICIAN or PATIENT (default DOCTOR)

    ADMIN needs an admin session unless this is the first account (403
    otherwise). Returns 409 if the e-mail is already registered.
    """
    return {"user": auth_service.register(body, caller)}


@router.post("/login", summary="Log in and receive a session cookie")
async def login(
    response: Response,
    body: Optional[Dict[str, Any]] = Body(None),
    auth_service: AuthService = Depends(get_auth_service)
):
    user, session = auth_service.login(body)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=session.id,
        max_age=SESSION_TTL_SECONDS,
        httponly=True,
        secure=SESSION_COOKIE_SECURE,
        samesite="lax",
    )
    return {"user": user}


@router.post("/logout", summary="End the current session")
async def logout(
    response: Response,
    caller: CallerIdentity = Depends(get_caller_identity),
    auth_service: AuthService = Depends(get_auth_service)
):
    auth_service.logout(caller)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return {"message": "Logged out"}


@router.get("/me", summary="The logged-in user")
async def me(
    caller: CallerIdentity = Depends(get_caller_identity),
    auth_service: AuthService = Depends(get_auth_service)
):
    return {"user": auth_service.current_user(caller)}
