"""ORM Models — SQLAlchemy declarative models for all stored entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Accounts, groups, categories and records are separate aggregates;
      cross-aggregate references are weak (by username, email or type)

Design Decisions:
    - One file per entity for locality
    - All models imported here so SQLAlchemy resolves string-based relationship()
      references before any query runs
"""

from ezwallet.models.account import Account  # noqa: F401
from ezwallet.models.group import Group, GroupMember  # noqa: F401
from ezwallet.models.category import Category  # noqa: F401
from ezwallet.models.record import Record  # noqa: F401
