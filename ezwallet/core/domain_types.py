"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - Username, Email, CategoryType wrap str — never pass anonymous strings in domain logic
    - All valid states encoded as Enums — no raw string matching
    - AuthCause carries the public message for each verification outcome

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

Username = NewType("Username", str)
Email = NewType("Email", str)
GroupName = NewType("GroupName", str)
CategoryType = NewType("CategoryType", str)


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """Account roles — maps to DB `role` column."""
    REGULAR = "Regular"
    ADMIN = "Admin"


class AuthCause(str, Enum):
    """Outcome of a session verification, granted or not."""
    AUTHORIZED = "authorized"
    UNAUTHENTICATED = "unauthenticated"
    DECODE_ERROR = "decode_error"
    INCOMPLETE_CLAIMS = "incomplete_claims"
    MISMATCHED_IDENTITY = "mismatched_identity"
    USERNAME_MISMATCH = "username_mismatch"
    NOT_ADMIN = "not_admin"
    NOT_IN_GROUP = "not_in_group"
    REAUTHENTICATION_REQUIRED = "reauthentication_required"

    @property
    def message(self) -> str:
        return _CAUSE_MESSAGES[self]


_CAUSE_MESSAGES = {
    AuthCause.AUTHORIZED: "Authorized",
    AuthCause.UNAUTHENTICATED: "Unauthorized",
    AuthCause.DECODE_ERROR: "Session token could not be decoded",
    AuthCause.INCOMPLETE_CLAIMS: "Token is missing information",
    AuthCause.MISMATCHED_IDENTITY: "Mismatched users",
    AuthCause.USERNAME_MISMATCH: "Token has a username different from the requested one",
    AuthCause.NOT_ADMIN: "Admin authority needed",
    AuthCause.NOT_IN_GROUP: "User is not in the group",
    AuthCause.REAUTHENTICATION_REQUIRED: "Perform login again",
}


class StatusClass(str, Enum):
    """HTTP-style outcome class exposed to the HTTP layer."""
    OK = "OK"
    CLIENT_ERROR = "ClientError"
    UNAUTHORIZED = "Unauthorized"
    SERVER_ERROR = "ServerError"

    @classmethod
    def from_http_status(cls, status: int) -> "StatusClass":
        if status < 400:
            return cls.OK
        if status in (401, 403):
            return cls.UNAUTHORIZED
        if status < 500:
            return cls.CLIENT_ERROR
        return cls.SERVER_ERROR


class MembershipOperation(str, Enum):
    """Which side of the partition the excluded bucket reports."""
    ADD = "add"
    REMOVE = "remove"
