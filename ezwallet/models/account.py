"""Account ORM — persists a user identity and its outstanding refresh token.

Invariants:
    - username and email are unique
    - role is "Regular" or "Admin"
    - refresh_token holds at most one long-lived token (NULL after logout)

Design Decisions:
    - No ORM relationship to records or group memberships: those reference the
      account weakly (by username / email) and are cleaned up explicitly by the
      account-removal cascade
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from ezwallet.db.base import Base


class Account(Base):
    """Registered account (regular user or administrator)."""
    __tablename__ = "accounts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    username: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True,
    )
    email: Mapped[str] = mapped_column(
        String(320), nullable=False, unique=True, index=True,
    )
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(
        String(20), nullable=False, default="Regular",
    )
    refresh_token: Mapped[str | None] = mapped_column(
        Text, nullable=True, index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
