"""Record ORM — a single expense transaction.

Invariants:
    - username names the owning account; removed with the account
    - category_type always resolves to an existing Category
    - date is timezone-aware (UTC)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Float, DateTime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from ezwallet.db.base import Base


class Record(Base):
    __tablename__ = "records"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    username: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True,
    )
    category_type: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True,
    )
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
