"""Record Store Repositories — SQLAlchemy implementations of core/repository_protocols.py.

Invariants:
    - Repositories never commit; RecordStore.commit() is called once per aggregate write
    - Reads select columns or use populate_existing, so views never carry stale
      identity-map state from earlier writes in the same session
    - Group writes are conditional on the group's version (optimistic concurrency);
      a lost race raises ConcurrencyError before any member row changes
    - Category delete + record reassignment happen in the caller's transaction and
      require the fallback category to still exist
    - Record creation share-locks its category row, so a concurrent delete or
      rename either waits for the new record to commit (and then reassigns it)
      or commits first (and the creation finds no category)

Design Decisions:
    - One repository per aggregate sharing a single AsyncSession, bundled in
      RecordStore so services take one collaborator
    - Bulk UPDATE/DELETE statements with synchronize_session=False: rowcounts are
      the source of truth, ORM objects are never reused after a bulk write
"""

import uuid
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ezwallet.core.domain_types import Role
from ezwallet.core.entities import (
    AccountView, CategoryView, GroupView, MemberRef, RecordView,
)
from ezwallet.core.errors import ConcurrencyError
from ezwallet.core.repository_protocols import (
    AccountRepository, CategoryRepository, GroupRepository, RecordRepository,
)
from ezwallet.models.account import Account
from ezwallet.models.category import Category
from ezwallet.models.group import Group, GroupMember
from ezwallet.models.record import Record

_BULK = {"synchronize_session": False}


def category_share_lock(category_type: str):
    """SELECT ... FOR SHARE of one category row (a no-op clause on SQLite)."""
    return (
        select(Category.type, Category.color)
        .where(Category.type == category_type)
        .with_for_update(read=True)
    )


def _account_view(account: Account) -> AccountView:
    return AccountView(
        id=account.id,
        username=account.username,
        email=account.email,
        role=Role(account.role),
        password_hash=account.password_hash,
    )


class SqlAccountRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, *criteria) -> AccountView | None:
        result = await self.db.execute(
            select(Account).where(*criteria)
            .execution_options(populate_existing=True),
        )
        account = result.scalar_one_or_none()
        return _account_view(account) if account else None

    async def find_by_username(self, username: str) -> AccountView | None:
        return await self._find(Account.username == username)

    async def find_by_email(self, email: str) -> AccountView | None:
        return await self._find(Account.email == email)

    async def find_by_refresh_token(self, token: str) -> AccountView | None:
        return await self._find(Account.refresh_token == token)

    async def list_all(self) -> list[AccountView]:
        result = await self.db.execute(
            select(Account).order_by(Account.created_at, Account.username)
            .execution_options(populate_existing=True),
        )
        return [_account_view(a) for a in result.scalars().all()]

    async def find_by_emails(self, emails: list[str]) -> list[AccountView]:
        if not emails:
            return []
        result = await self.db.execute(
            select(Account).where(Account.email.in_(emails))
            .execution_options(populate_existing=True),
        )
        return [_account_view(a) for a in result.scalars().all()]

    async def create(
        self, username: str, email: str, password_hash: str, role: Role,
    ) -> AccountView:
        account = Account(
            id=uuid.uuid4(), username=username, email=email,
            password_hash=password_hash, role=role.value,
        )
        self.db.add(account)
        await self.db.flush()
        return _account_view(account)

    async def set_refresh_token(self, account_id: UUID, token: str | None) -> None:
        await self.db.execute(
            update(Account).where(Account.id == account_id)
            .values(refresh_token=token).execution_options(**_BULK),
        )

    async def delete(self, account_id: UUID) -> None:
        await self.db.execute(
            delete(Account).where(Account.id == account_id)
            .execution_options(**_BULK),
        )


class SqlGroupRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _members(self, group_id: UUID) -> tuple[MemberRef, ...]:
        result = await self.db.execute(
            select(GroupMember.email, GroupMember.account_id)
            .where(GroupMember.group_id == group_id)
            .order_by(GroupMember.id),
        )
        return tuple(MemberRef(email=row.email, account_id=row.account_id) for row in result)

    async def _load(self, *criteria) -> GroupView | None:
        result = await self.db.execute(
            select(Group.id, Group.name, Group.version).where(*criteria),
        )
        row = result.one_or_none()
        if row is None:
            return None
        return GroupView(
            name=row.name, version=row.version, members=await self._members(row.id),
        )

    async def _group_id(self, name: str) -> UUID | None:
        result = await self.db.execute(select(Group.id).where(Group.name == name))
        return result.scalar_one_or_none()

    async def find_by_name(self, name: str) -> GroupView | None:
        return await self._load(Group.name == name)

    async def find_containing_email(self, email: str) -> GroupView | None:
        membership = select(GroupMember.group_id).where(GroupMember.email == email)
        return await self._load(Group.id.in_(membership))

    async def grouped_emails(self, emails: list[str]) -> set[str]:
        if not emails:
            return set()
        result = await self.db.execute(
            select(GroupMember.email).where(GroupMember.email.in_(emails)),
        )
        return set(result.scalars().all())

    async def list_all(self) -> list[GroupView]:
        groups = (await self.db.execute(
            select(Group.id, Group.name, Group.version)
            .order_by(Group.created_at, Group.name),
        )).all()
        members = await self.db.execute(
            select(GroupMember.group_id, GroupMember.email, GroupMember.account_id)
            .order_by(GroupMember.id),
        )
        by_group: dict[UUID, list[MemberRef]] = defaultdict(list)
        for row in members:
            by_group[row.group_id].append(MemberRef(row.email, row.account_id))
        return [
            GroupView(name=g.name, version=g.version, members=tuple(by_group[g.id]))
            for g in groups
        ]

    async def create(self, name: str, members: list[tuple[str, UUID | None]]) -> None:
        group_id = uuid.uuid4()
        self.db.add(Group(id=group_id, name=name, version=1))
        await self.db.flush()
        self.db.add_all([
            GroupMember(group_id=group_id, email=email, account_id=account_id)
            for email, account_id in members
        ])
        await self.db.flush()

    async def update_members(
        self,
        name: str,
        expected_version: int,
        add: list[tuple[str, UUID | None]] = (),
        remove: list[str] = (),
    ) -> None:
        """Apply member changes only if nobody else wrote the group since it was read."""
        result = await self.db.execute(
            update(Group)
            .where(Group.name == name, Group.version == expected_version)
            .values(version=Group.version + 1)
            .execution_options(**_BULK),
        )
        if result.rowcount != 1:
            raise ConcurrencyError(f"Group '{name}' was modified concurrently")
        group_id = await self._group_id(name)
        if remove:
            await self.db.execute(
                delete(GroupMember)
                .where(GroupMember.group_id == group_id, GroupMember.email.in_(list(remove)))
                .execution_options(**_BULK),
            )
        if add:
            self.db.add_all([
                GroupMember(group_id=group_id, email=email, account_id=account_id)
                for email, account_id in add
            ])
        await self.db.flush()

    async def delete(self, name: str) -> None:
        group_id = await self._group_id(name)
        if group_id is None:
            return
        await self.db.execute(
            delete(GroupMember).where(GroupMember.group_id == group_id)
            .execution_options(**_BULK),
        )
        await self.db.execute(
            delete(Group).where(Group.id == group_id).execution_options(**_BULK),
        )


class SqlCategoryRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_type(self, category_type: str) -> CategoryView | None:
        result = await self.db.execute(
            select(Category.type, Category.color).where(Category.type == category_type),
        )
        row = result.one_or_none()
        return CategoryView(row.type, row.color) if row else None

    async def find_for_share(self, category_type: str) -> CategoryView | None:
        """Read a category and hold it until commit against rename or delete."""
        result = await self.db.execute(category_share_lock(category_type))
        row = result.one_or_none()
        return CategoryView(row.type, row.color) if row else None

    async def count(self) -> int:
        result = await self.db.execute(select(func.count()).select_from(Category))
        return result.scalar_one()

    async def list_in_creation_order(self) -> list[CategoryView]:
        result = await self.db.execute(
            select(Category.type, Category.color).order_by(Category.id),
        )
        return [CategoryView(row.type, row.color) for row in result]

    async def create(self, category_type: str, color: str) -> CategoryView:
        self.db.add(Category(type=category_type, color=color))
        await self.db.flush()
        return CategoryView(category_type, color)

    async def update(self, old_type: str, new_type: str, color: str) -> bool:
        result = await self.db.execute(
            update(Category).where(Category.type == old_type)
            .values(type=new_type, color=color).execution_options(**_BULK),
        )
        return result.rowcount == 1

    async def delete_and_reassign(self, category_type: str, fallback: str) -> int | None:
        """Delete one category and move its records to fallback.

        Returns the number of records moved, or None if the category was already gone.
        """
        fallback_row = await self.db.execute(
            select(Category.id).where(Category.type == fallback).with_for_update(),
        )
        if fallback_row.scalar_one_or_none() is None:
            raise ConcurrencyError(f"Fallback category '{fallback}' was removed concurrently")
        deleted = await self.db.execute(
            delete(Category).where(Category.type == category_type)
            .execution_options(**_BULK),
        )
        if deleted.rowcount == 0:
            return None
        moved = await self.db.execute(
            update(Record).where(Record.category_type == category_type)
            .values(category_type=fallback).execution_options(**_BULK),
        )
        return moved.rowcount


class SqlRecordRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    def _select(self):
        return (
            select(Record, Category.color)
            .outerjoin(Category, Category.type == Record.category_type)
            .execution_options(populate_existing=True)
        )

    @staticmethod
    def _view(record: Record, color: str | None) -> RecordView:
        return RecordView(
            id=record.id,
            username=record.username,
            category_type=record.category_type,
            amount=record.amount,
            date=record.date,
            color=color,
        )

    async def find_by_filter(
        self,
        usernames: list[str] | None = None,
        category_type: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        min_amount: float | None = None,
        max_amount: float | None = None,
    ) -> list[RecordView]:
        query = self._select()
        if usernames is not None:
            query = query.where(Record.username.in_(usernames))
        if category_type is not None:
            query = query.where(Record.category_type == category_type)
        if date_from is not None:
            query = query.where(Record.date >= date_from)
        if date_to is not None:
            query = query.where(Record.date <= date_to)
        if min_amount is not None:
            query = query.where(Record.amount >= min_amount)
        if max_amount is not None:
            query = query.where(Record.amount <= max_amount)
        result = await self.db.execute(query.order_by(Record.date, Record.username))
        return [self._view(record, color) for record, color in result.all()]

    async def find_by_id(self, record_id: UUID) -> RecordView | None:
        result = await self.db.execute(self._select().where(Record.id == record_id))
        row = result.one_or_none()
        return self._view(*row) if row else None

    async def find_by_ids(self, record_ids: list[UUID]) -> list[RecordView]:
        if not record_ids:
            return []
        result = await self.db.execute(self._select().where(Record.id.in_(record_ids)))
        return [self._view(record, color) for record, color in result.all()]

    async def create(
        self, username: str, category_type: str, amount: float, date: datetime,
    ) -> RecordView:
        record = Record(
            id=uuid.uuid4(), username=username, category_type=category_type,
            amount=amount, date=date,
        )
        self.db.add(record)
        await self.db.flush()
        return self._view(record, None)

    async def delete_by_owner(self, username: str) -> int:
        result = await self.db.execute(
            delete(Record).where(Record.username == username)
            .execution_options(**_BULK),
        )
        return result.rowcount

    async def delete_by_ids(self, record_ids: list[UUID]) -> int:
        result = await self.db.execute(
            delete(Record).where(Record.id.in_(record_ids))
            .execution_options(**_BULK),
        )
        return result.rowcount

    async def reassign_category(self, old_type: str, new_type: str) -> int:
        result = await self.db.execute(
            update(Record).where(Record.category_type == old_type)
            .values(category_type=new_type).execution_options(**_BULK),
        )
        return result.rowcount


@dataclass
class RecordStore:
    """All repositories over one session; the unit of commit for a service call."""
    db: AsyncSession
    accounts: AccountRepository
    groups: GroupRepository
    categories: CategoryRepository
    records: RecordRepository

    @classmethod
    def from_session(cls, db: AsyncSession) -> "RecordStore":
        return cls(
            db=db,
            accounts=SqlAccountRepository(db),
            groups=SqlGroupRepository(db),
            categories=SqlCategoryRepository(db),
            records=SqlRecordRepository(db),
        )

    async def commit(self) -> None:
        await self.db.commit()

    async def rollback(self) -> None:
        await self.db.rollback()
