"""Auth Service — registration, login and logout over the record store.

Invariants:
    - Passwords are stored only as passlib hashes, never in clear
    - An account holds at most one outstanding refresh token (the last login)
    - Logout clears the persisted refresh token; cookies are expired by the route

Design Decisions:
    - pbkdf2_sha256 scheme: pure-python passlib backend, no native bcrypt build
    - Token signing delegated to SessionVerifier.issue_pair(): one place knows the
      secret and lifetimes
"""

import logging

from passlib.context import CryptContext

from ezwallet.core.domain_types import Role
from ezwallet.core.entities import AccountView
from ezwallet.core.errors import ConflictError, NotFoundError, ValidationError
from ezwallet.core.requirements import TokenClaims
from ezwallet.core.verify_session import SessionVerifier, TokenPair
from ezwallet.infrastructure.repositories import RecordStore
from ezwallet.schemas.auth import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def claims_for(account: AccountView) -> TokenClaims:
    return TokenClaims(
        username=account.username,
        email=account.email,
        id=str(account.id),
        role=account.role.value,
    )


class AuthService:
    def __init__(self, store: RecordStore, verifier: SessionVerifier):
        self.store = store
        self.verifier = verifier

    async def register(self, body: RegisterRequest, role: Role = Role.REGULAR) -> AccountView:
        """Create an account; username and email must both be unused."""
        if await self.store.accounts.find_by_username(body.username):
            raise ConflictError(
                "The username in the request body identifies an already existing user",
                code="USERNAME_TAKEN",
            )
        if await self.store.accounts.find_by_email(body.email):
            raise ConflictError(
                "The email in the request body identifies an already existing user",
                code="EMAIL_TAKEN",
            )
        account = await self.store.accounts.create(
            body.username, body.email, hash_password(body.password), role,
        )
        await self.store.commit()
        logger.info(
            f"Account registered ({role.value})", extra={"username": account.username},
        )
        return account

    async def login(self, body: LoginRequest) -> TokenPair:
        account = await self.store.accounts.find_by_email(body.email)
        if account is None:
            raise NotFoundError("User", body.email)
        if not verify_password(body.password, account.password_hash):
            raise ValidationError(
                "The supplied password does not match with the one in the database",
                field="password",
            )
        pair = self.verifier.issue_pair(claims_for(account))
        await self.store.accounts.set_refresh_token(account.id, pair.refresh_token)
        await self.store.commit()
        logger.info("Login", extra={"username": account.username})
        return pair

    async def logout(self, refresh_token: str | None) -> None:
        if not refresh_token:
            raise ValidationError(
                "The request does not have a refresh token in the cookies",
                field="refreshToken",
            )
        account = await self.store.accounts.find_by_refresh_token(refresh_token)
        if account is None:
            raise NotFoundError("Session", "refreshToken")
        await self.store.accounts.set_refresh_token(account.id, None)
        await self.store.commit()
        logger.info("Logout", extra={"username": account.username})
