"""Group ORM — a named set of members, each a weak reference to an account.

Invariants:
    - name is unique
    - group_members.email is unique across ALL groups (one group per account)
    - A group row exists only while it has at least one member row
    - version increments on every membership write (optimistic concurrency)

Design Decisions:
    - GroupMember.account_id is ON DELETE SET NULL: the group never owns the account
    - Integer member ids preserve insertion order (earliest member first)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from ezwallet.db.base import Base


class Group(Base):
    """Group aggregate root — owns its member rows, not the accounts."""
    __tablename__ = "groups"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True,
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    members: Mapped[list["GroupMember"]] = relationship(
        "GroupMember", back_populates="group",
        cascade="all, delete-orphan", order_by="GroupMember.id",
    )


class GroupMember(Base):
    """Membership row: an email by value plus a lookup-only account id."""
    __tablename__ = "group_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("groups.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    email: Mapped[str] = mapped_column(
        String(320), nullable=False, unique=True,
    )
    account_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
    )

    group: Mapped["Group"] = relationship("Group", back_populates="members")
