"""Capability Requirements — what an identity must satisfy for an operation.

Invariants:
    - Each requirement is an immutable value with a single predicate over claims
    - denial() returns None when satisfied, otherwise the AuthCause to report
    - Requirements never decode tokens or touch storage

Design Decisions:
    - One small class per variant instead of a string switch: the verifier runs
      the same decode/rotation pipeline and only asks the requirement for a verdict
"""

from dataclasses import dataclass
from typing import Protocol

from ezwallet.core.domain_types import AuthCause, Role


@dataclass(frozen=True)
class TokenClaims:
    """Identity fields embedded in every session token."""
    username: str
    email: str
    id: str
    role: str

    REQUIRED = ("username", "email", "role")

    @classmethod
    def from_payload(cls, payload: dict) -> "TokenClaims | None":
        """Build claims from a decoded payload, or None when a required field is missing."""
        if any(not payload.get(key) for key in cls.REQUIRED):
            return None
        return cls(
            username=payload["username"],
            email=payload["email"],
            id=str(payload.get("id") or ""),
            role=payload["role"],
        )

    def identity(self) -> tuple[str, str, str]:
        return (self.username, self.email, self.role)

    def to_payload(self) -> dict:
        return {
            "username": self.username,
            "email": self.email,
            "id": self.id,
            "role": self.role,
        }


class Requirement(Protocol):
    def denial(self, claims: TokenClaims) -> AuthCause | None: ...


@dataclass(frozen=True)
class Authenticated:
    """Any structurally valid, internally consistent token pair."""

    def denial(self, claims: TokenClaims) -> AuthCause | None:
        return None


@dataclass(frozen=True)
class Owner:
    """The caller must be the account named in the request."""
    username: str

    def denial(self, claims: TokenClaims) -> AuthCause | None:
        if claims.username != self.username:
            return AuthCause.USERNAME_MISMATCH
        return None


@dataclass(frozen=True)
class Admin:
    def denial(self, claims: TokenClaims) -> AuthCause | None:
        if claims.role != Role.ADMIN.value:
            return AuthCause.NOT_ADMIN
        return None


@dataclass(frozen=True)
class GroupMember:
    """The caller's email must be one of the given emails."""
    emails: frozenset[str]

    @classmethod
    def of(cls, emails) -> "GroupMember":
        return cls(frozenset(emails))

    def denial(self, claims: TokenClaims) -> AuthCause | None:
        if claims.email not in self.emails:
            return AuthCause.NOT_IN_GROUP
        return None
