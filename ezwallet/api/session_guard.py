"""Session Guard — FastAPI dependency that runs the verifier for a route.

Invariants:
    - Tokens are read from the accessToken / refreshToken cookies only
    - A route passes one or more requirements; the first one granted wins and
      the last denial is the one reported
    - A rotated access token is written back as the accessToken cookie and the
      advisory message is added to the response envelope; it is also kept on
      request.state so an error response raised later still carries both
    - Denials raise typed SessionError subclasses (401), rendered by the global handler

Design Decisions:
    - The verifier is built once per process from Settings (lru_cache) so tests
      can override get_verifier with any TokenSettings
    - Cookie attributes come from Settings, shared with login/logout
"""

import logging
from functools import lru_cache

from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from ezwallet.config import get_settings
from ezwallet.core.errors import error_from_cause
from ezwallet.core.requirements import Requirement, TokenClaims
from ezwallet.core.verify_session import SessionVerifier, TokenSettings
from ezwallet.infrastructure.database import get_db
from ezwallet.infrastructure.repositories import RecordStore

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"
REFRESHED_TOKEN_MESSAGE = (
    "Access token has been refreshed. "
    "Remember to copy the new one in the headers of subsequent calls"
)


@lru_cache
def get_verifier() -> SessionVerifier:
    return SessionVerifier(TokenSettings.from_settings(get_settings()))


async def get_store(db: AsyncSession = Depends(get_db)) -> RecordStore:
    return RecordStore.from_session(db)


def set_session_cookie(response: Response, name: str, value: str, max_age: int) -> None:
    settings = get_settings()
    response.set_cookie(
        name,
        value,
        max_age=max_age,
        path=settings.cookie_path,
        domain=settings.cookie_domain,
        secure=settings.cookie_secure,
        httponly=True,
        samesite=settings.cookie_samesite,
    )


def set_rotated_cookie(response: Response, token: str) -> None:
    set_session_cookie(
        response, ACCESS_COOKIE, token,
        max_age=get_settings().access_token_ttl_minutes * 60,
    )


class SessionGuard:
    """Per-request session check; inject with Depends() and call require()."""

    def __init__(
        self,
        request: Request,
        response: Response,
        verifier: SessionVerifier = Depends(get_verifier),
    ):
        self._access_token = request.cookies.get(ACCESS_COOKIE)
        self._refresh_token = request.cookies.get(REFRESH_COOKIE)
        self._request = request
        self._path = request.url.path
        self._response = response
        self._verifier = verifier
        self.refreshed_token_message: str | None = None

    def require(self, *requirements: Requirement) -> TokenClaims:
        """Grant if ANY requirement is satisfied, otherwise raise the last denial."""
        result = None
        for requirement in requirements:
            result = self._verifier.verify(
                self._access_token, self._refresh_token, requirement,
            )
            if result.granted:
                break

        if not result.granted:
            logger.info(
                f"Session denied: {result.cause.value}",
                extra={"cause": result.cause.value, "path": self._path},
            )
            raise error_from_cause(result.cause)

        if result.rotated:
            self._rotate(result.rotated_token, result.claims)
        return result.claims

    def _rotate(self, token: str, claims: TokenClaims) -> None:
        set_rotated_cookie(self._response, token)
        # read by the error handlers when the route fails after this point
        self._request.state.rotated_access_token = token
        if self.refreshed_token_message is None:
            logger.info("Access token rotated", extra={"username": claims.username})
        self.refreshed_token_message = REFRESHED_TOKEN_MESSAGE

    def envelope(self, data) -> dict:
        return {"data": data, "refreshedTokenMessage": self.refreshed_token_message}
