"""Boundary Protocols — record-store contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Repositories never commit: the calling service commits once per aggregate
    - Reads return frozen views (core/entities.py), never ORM instances

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Async in Protocol: boundary methods are async because implementations do IO,
      but the core rules that consume their results are plain functions
"""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from ezwallet.core.domain_types import Role
from ezwallet.core.entities import AccountView, CategoryView, GroupView, RecordView


class AccountRepository(Protocol):
    async def find_by_username(self, username: str) -> AccountView | None: ...
    async def find_by_email(self, email: str) -> AccountView | None: ...
    async def find_by_refresh_token(self, token: str) -> AccountView | None: ...
    async def list_all(self) -> list[AccountView]: ...
    async def find_by_emails(self, emails: list[str]) -> list[AccountView]: ...
    async def create(
        self, username: str, email: str, password_hash: str, role: Role,
    ) -> AccountView: ...
    async def set_refresh_token(self, account_id: UUID, token: str | None) -> None: ...
    async def delete(self, account_id: UUID) -> None: ...


class GroupRepository(Protocol):
    async def find_by_name(self, name: str) -> GroupView | None: ...
    async def find_containing_email(self, email: str) -> GroupView | None: ...
    async def grouped_emails(self, emails: list[str]) -> set[str]: ...
    async def list_all(self) -> list[GroupView]: ...
    async def create(self, name: str, members: list[tuple[str, UUID | None]]) -> None: ...
    async def update_members(
        self,
        name: str,
        expected_version: int,
        add: list[tuple[str, UUID | None]] = (),
        remove: list[str] = (),
    ) -> None: ...
    async def delete(self, name: str) -> None: ...


class CategoryRepository(Protocol):
    async def find_by_type(self, category_type: str) -> CategoryView | None: ...
    async def find_for_share(self, category_type: str) -> CategoryView | None: ...
    async def count(self) -> int: ...
    async def list_in_creation_order(self) -> list[CategoryView]: ...
    async def create(self, category_type: str, color: str) -> CategoryView: ...
    async def update(self, old_type: str, new_type: str, color: str) -> bool: ...
    async def delete_and_reassign(self, category_type: str, fallback: str) -> int | None: ...


class RecordRepository(Protocol):
    async def find_by_filter(
        self,
        usernames: list[str] | None = None,
        category_type: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        min_amount: float | None = None,
        max_amount: float | None = None,
    ) -> list[RecordView]: ...
    async def find_by_id(self, record_id: UUID) -> RecordView | None: ...
    async def find_by_ids(self, record_ids: list[UUID]) -> list[RecordView]: ...
    async def create(
        self, username: str, category_type: str, amount: float, date: datetime,
    ) -> RecordView: ...
    async def delete_by_owner(self, username: str) -> int: ...
    async def delete_by_ids(self, record_ids: list[UUID]) -> int: ...
    async def reassign_category(self, old_type: str, new_type: str) -> int: ...
