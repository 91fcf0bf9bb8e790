"""Session Verifier — validates an access/refresh token pair against a requirement.

Invariants:
    - PURE decision function: no IO, no DB, no module-level secret
    - The only side channel is rotated_token, a freshly signed access token
      returned when the access token expired but the refresh token is still valid
    - An expired refresh token is terminal (REAUTHENTICATION_REQUIRED), never rotated
    - Any non-expiry decode failure on either token is DECODE_ERROR, never retried
    - One pipeline for every requirement: only Requirement.denial() differs

Design Decisions:
    - Signing config injected via TokenSettings: the verifier is constructed by the
      shell and can be built with any secret in tests
    - python-jose raises ExpiredSignatureError for expiry and JWTError for everything
      else, so decode outcome is captured once per token and the decision below is a
      plain sequence of checks
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from ezwallet.core.domain_types import AuthCause
from ezwallet.core.requirements import Requirement, TokenClaims


@dataclass(frozen=True)
class TokenSettings:
    """Signing secret and lifetimes for the session token pair."""
    secret: str
    algorithm: str = "HS256"
    access_ttl: timedelta = timedelta(hours=1)
    refresh_ttl: timedelta = timedelta(days=7)

    @classmethod
    def from_settings(cls, settings) -> "TokenSettings":
        return cls(
            secret=settings.access_key,
            algorithm=settings.jwt_algorithm,
            access_ttl=timedelta(minutes=settings.access_token_ttl_minutes),
            refresh_ttl=timedelta(days=settings.refresh_token_ttl_days),
        )


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class VerificationResult:
    granted: bool
    cause: AuthCause
    claims: TokenClaims | None = None
    rotated_token: str | None = None

    @property
    def rotated(self) -> bool:
        return self.rotated_token is not None


@dataclass(frozen=True)
class _Decoded:
    payload: dict | None = None
    expired: bool = False
    invalid: bool = False


def _denied(cause: AuthCause) -> VerificationResult:
    return VerificationResult(granted=False, cause=cause)


class SessionVerifier:
    """Stateless verifier and issuer for access/refresh token pairs."""

    def __init__(self, settings: TokenSettings):
        self._settings = settings

    # ─── Issuing ─────────────────────────────────────────────────

    def sign(self, claims: TokenClaims, lifetime: timedelta) -> str:
        payload = claims.to_payload()
        payload["exp"] = datetime.now(timezone.utc) + lifetime
        return jwt.encode(
            payload, self._settings.secret, algorithm=self._settings.algorithm,
        )

    def issue_pair(self, claims: TokenClaims) -> TokenPair:
        return TokenPair(
            access_token=self.sign(claims, self._settings.access_ttl),
            refresh_token=self.sign(claims, self._settings.refresh_ttl),
        )

    # ─── Verification ────────────────────────────────────────────

    def verify(
        self,
        access_token: str | None,
        refresh_token: str | None,
        requirement: Requirement,
    ) -> VerificationResult:
        """Decide whether the token pair satisfies the requirement."""
        if not access_token or not refresh_token:
            return _denied(AuthCause.UNAUTHENTICATED)

        access = self._decode(access_token)
        refresh = self._decode(refresh_token)

        if access.invalid or refresh.invalid:
            return _denied(AuthCause.DECODE_ERROR)
        if refresh.expired:
            return _denied(AuthCause.REAUTHENTICATION_REQUIRED)

        refresh_claims = TokenClaims.from_payload(refresh.payload)
        if refresh_claims is None:
            return _denied(AuthCause.INCOMPLETE_CLAIMS)

        if access.expired:
            return self._rotate(refresh_claims, requirement)

        access_claims = TokenClaims.from_payload(access.payload)
        if access_claims is None:
            return _denied(AuthCause.INCOMPLETE_CLAIMS)
        if access_claims.identity() != refresh_claims.identity():
            return _denied(AuthCause.MISMATCHED_IDENTITY)

        denial = requirement.denial(access_claims)
        if denial is not None:
            return _denied(denial)
        return VerificationResult(
            granted=True, cause=AuthCause.AUTHORIZED, claims=access_claims,
        )

    def _rotate(
        self, claims: TokenClaims, requirement: Requirement,
    ) -> VerificationResult:
        """Access token expired: judge on refresh claims and mint a new access token."""
        denial = requirement.denial(claims)
        if denial is not None:
            return _denied(denial)
        return VerificationResult(
            granted=True,
            cause=AuthCause.AUTHORIZED,
            claims=claims,
            rotated_token=self.sign(claims, self._settings.access_ttl),
        )

    def _decode(self, token: str) -> _Decoded:
        try:
            payload = jwt.decode(
                token, self._settings.secret, algorithms=[self._settings.algorithm],
            )
        except ExpiredSignatureError:
            return _Decoded(expired=True)
        except JWTError:
            return _Decoded(invalid=True)
        return _Decoded(payload=payload)
