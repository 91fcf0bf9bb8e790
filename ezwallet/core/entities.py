"""Entity Views — immutable snapshots of stored entities handed to the core.

Invariants:
    - Views are frozen: the core reasons over a snapshot, never a live ORM object
    - MemberRef holds the email by value plus a lookup-only account id;
      a group never owns the account it points at
    - GroupView.version is the optimistic-concurrency token for the next write

Design Decisions:
    - Dataclasses over ORM instances: repositories return fresh column values,
      so stale identity-map state never leaks into a decision
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from ezwallet.core.domain_types import Role


@dataclass(frozen=True)
class AccountView:
    id: UUID
    username: str
    email: str
    role: Role
    password_hash: str = field(repr=False, default="")

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def public(self) -> dict:
        return {"username": self.username, "email": self.email, "role": self.role.value}


@dataclass(frozen=True)
class MemberRef:
    email: str
    account_id: UUID | None = None


@dataclass(frozen=True)
class GroupView:
    name: str
    version: int
    members: tuple[MemberRef, ...] = ()

    @property
    def member_emails(self) -> list[str]:
        return [m.email for m in self.members]

    def public(self) -> dict:
        return {
            "name": self.name,
            "members": [{"email": m.email} for m in self.members],
        }


@dataclass(frozen=True)
class CategoryView:
    type: str
    color: str

    def public(self) -> dict:
        return {"type": self.type, "color": self.color}


@dataclass(frozen=True)
class RecordView:
    id: UUID
    username: str
    category_type: str
    amount: float
    date: datetime
    color: str | None = None

    def public(self) -> dict:
        return {
            "id": str(self.id),
            "username": self.username,
            "type": self.category_type,
            "amount": self.amount,
            "date": self.date.isoformat(),
            "color": self.color,
        }
