"""Category ORM — a record classification label with a display color.

Invariants:
    - type is unique
    - id is monotonically increasing: ordering by id is creation order,
      which decides the fallback category on removal

Design Decisions:
    - Records reference categories by type (no FK): renames and merges rewrite
      record rows explicitly in the same transaction
"""

from datetime import datetime, timezone

from sqlalchemy import String, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from ezwallet.db.base import Base


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    type: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True, index=True,
    )
    color: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
