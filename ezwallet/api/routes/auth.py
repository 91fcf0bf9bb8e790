"""Auth Routes — register, admin registration, login, logout.

Invariants:
    - Login sets both session cookies and also returns both tokens in the body
    - Logout expires both cookies (max_age=0) after clearing the stored token
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from ezwallet.api.session_guard import (
    ACCESS_COOKIE, REFRESH_COOKIE, get_store, get_verifier, set_session_cookie,
)
from ezwallet.config import get_settings
from ezwallet.core.domain_types import Role
from ezwallet.core.verify_session import SessionVerifier
from ezwallet.infrastructure.repositories import RecordStore
from ezwallet.schemas.auth import LoginRequest, RegisterRequest
from ezwallet.services.auth_service import AuthService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/register")
async def register(
    body: RegisterRequest,
    store: RecordStore = Depends(get_store),
    verifier: SessionVerifier = Depends(get_verifier),
):
    await AuthService(store, verifier).register(body, Role.REGULAR)
    return {"data": {"message": "User added successfully"}}


@router.post("/admin")
async def register_admin(
    body: RegisterRequest,
    store: RecordStore = Depends(get_store),
    verifier: SessionVerifier = Depends(get_verifier),
):
    await AuthService(store, verifier).register(body, Role.ADMIN)
    return {"data": {"message": "Admin added successfully"}}


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    store: RecordStore = Depends(get_store),
    verifier: SessionVerifier = Depends(get_verifier),
):
    pair = await AuthService(store, verifier).login(body)
    settings = get_settings()
    set_session_cookie(
        response, ACCESS_COOKIE, pair.access_token,
        max_age=settings.access_token_ttl_minutes * 60,
    )
    set_session_cookie(
        response, REFRESH_COOKIE, pair.refresh_token,
        max_age=settings.refresh_token_ttl_days * 24 * 60 * 60,
    )
    return {
        "data": {
            "accessToken": pair.access_token,
            "refreshToken": pair.refresh_token,
        },
    }


@router.get("/logout")
async def logout(
    request: Request,
    response: Response,
    store: RecordStore = Depends(get_store),
    verifier: SessionVerifier = Depends(get_verifier),
):
    await AuthService(store, verifier).logout(request.cookies.get(REFRESH_COOKIE))
    set_session_cookie(response, ACCESS_COOKIE, "", max_age=0)
    set_session_cookie(response, REFRESH_COOKIE, "", max_age=0)
    return {"data": {"message": "User logged out"}}
