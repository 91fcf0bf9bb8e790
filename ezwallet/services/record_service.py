"""Record Service — creation, filtered listing and deletion of transactions.

Invariants:
    - A record is created only for an existing account and an existing category
    - Listings never return records of accounts outside the requested scope
    - Batch deletion is all-or-nothing: one unknown id and nothing is deleted
    - The category of a new record is share-locked in the insert's transaction:
      a concurrent category delete or rename cannot strand the record

Design Decisions:
    - Record ids arrive as strings; anything that is not a UUID is simply unknown
    - Group listings resolve member emails to usernames at read time, since
      records reference their owner by username

Limitations:
    - Row locks are a no-op on SQLite, where the create/delete race stays open;
      records.category_type carries no foreign key, so PostgreSQL row locking
      is the only guard
"""

import logging
from dataclasses import replace
from datetime import datetime, timezone
from uuid import UUID

from ezwallet.core.entities import GroupView, RecordView
from ezwallet.core.errors import NotFoundError, ValidationError
from ezwallet.infrastructure.repositories import RecordStore
from ezwallet.schemas.record import RecordCreate, RecordFilterParams

logger = logging.getLogger(__name__)


def _parse_ids(ids: list[str]) -> tuple[list[UUID], list[str]]:
    parsed, invalid = [], []
    for raw in ids:
        try:
            parsed.append(UUID(raw))
        except (ValueError, TypeError, AttributeError):
            invalid.append(raw)
    return parsed, invalid


class RecordService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def _require_account(self, username: str) -> None:
        if await self.store.accounts.find_by_username(username) is None:
            raise NotFoundError("User", username)

    async def _require_category(self, category_type: str) -> str:
        category = await self.store.categories.find_by_type(category_type)
        if category is None:
            raise NotFoundError("Category", category_type)
        return category.color

    async def create_record(self, username: str, body: RecordCreate) -> RecordView:
        if body.username != username:
            raise ValidationError(
                "The username in the request body does not match the one in the route",
                field="username",
            )
        await self._require_account(username)
        category = await self.store.categories.find_for_share(body.type)
        if category is None:
            raise NotFoundError("Category", body.type)
        record = await self.store.records.create(
            username, body.type, body.amount, datetime.now(timezone.utc),
        )
        await self.store.commit()
        logger.info(
            "Transaction created", extra={"username": username, "category": body.type},
        )
        return replace(record, color=category.color)

    async def list_all(self) -> list[RecordView]:
        return await self.store.records.find_by_filter()

    async def list_for_user(
        self,
        username: str,
        filters: RecordFilterParams | None = None,
        category: str | None = None,
    ) -> list[RecordView]:
        filters = filters or RecordFilterParams()
        if filters.conflicting_dates:
            raise ValidationError(
                "`date` cannot be combined with `from` or `upTo`", field="date",
            )
        await self._require_account(username)
        if category is not None:
            await self._require_category(category)
        date_from, date_to = filters.date_bounds
        return await self.store.records.find_by_filter(
            usernames=[username],
            category_type=category,
            date_from=date_from,
            date_to=date_to,
            min_amount=filters.min_amount,
            max_amount=filters.max_amount,
        )

    async def list_for_group(
        self, group: GroupView, category: str | None = None,
    ) -> list[RecordView]:
        if category is not None:
            await self._require_category(category)
        accounts = await self.store.accounts.find_by_emails(group.member_emails)
        return await self.store.records.find_by_filter(
            usernames=[a.username for a in accounts], category_type=category,
        )

    async def delete_record(self, username: str, record_id: str | None) -> None:
        """Delete one record, which must belong to the account in the route."""
        if not record_id:
            raise ValidationError(
                "The request body does not contain all the necessary attributes",
                field="_id",
            )
        await self._require_account(username)
        parsed, _ = _parse_ids([record_id])
        record = await self.store.records.find_by_id(parsed[0]) if parsed else None
        if record is None:
            raise NotFoundError("Transaction", record_id)
        if record.username != username:
            raise ValidationError(
                "The transaction does not belong to the requested user", field="_id",
            )
        await self.store.records.delete_by_ids([record.id])
        await self.store.commit()
        logger.info("Transaction deleted", extra={"username": username})

    async def delete_records(self, ids: list[str] | None) -> int:
        if not ids:
            raise ValidationError(
                "The request body does not contain all the necessary attributes",
                field="_ids",
            )
        if any(not i for i in ids):
            raise ValidationError(
                "At least one of the ids is an empty string", field="_ids",
            )
        parsed, invalid = _parse_ids(ids)
        found = {r.id for r in await self.store.records.find_by_ids(parsed)}
        missing = invalid + [str(i) for i in parsed if i not in found]
        if missing:
            raise NotFoundError("Transaction", ", ".join(missing))
        deleted = await self.store.records.delete_by_ids(list(found))
        await self.store.commit()
        logger.info(f"Deleted {deleted} transactions", extra={"removed": deleted})
        return deleted
