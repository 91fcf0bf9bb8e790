"""Transaction Routes — create, list (by user, group, category) and delete.

Invariants:
    - Owner routes live under /api/users/{username}/..., Admin routes under
      /api/transactions/...; both call the same service methods
    - Listing filters (date | from/upTo, min/max) apply to per-user listings only
    - Filter combinations are checked by the service, after the session check,
      so an anonymous caller always sees 401 first
"""

from datetime import date

from fastapi import APIRouter, Depends, Query

from ezwallet.api.session_guard import SessionGuard, get_store
from ezwallet.core.entities import RecordView
from ezwallet.core.requirements import Admin, GroupMember, Owner
from ezwallet.infrastructure.repositories import RecordStore
from ezwallet.schemas.record import (
    RecordCreate, RecordDelete, RecordFilterParams, RecordsDelete,
)
from ezwallet.services.group_service import GroupService
from ezwallet.services.record_service import RecordService

router = APIRouter(prefix="/api", tags=["transactions"])


def record_filters(
    on_date: date | None = Query(None, alias="date"),
    date_from: date | None = Query(None, alias="from"),
    up_to: date | None = Query(None, alias="upTo"),
    min_amount: float | None = Query(None, alias="min"),
    max_amount: float | None = Query(None, alias="max"),
) -> RecordFilterParams:
    """Query-string filters, mapped from their public aliases."""
    return RecordFilterParams(
        date=on_date, date_from=date_from, up_to=up_to,
        min_amount=min_amount, max_amount=max_amount,
    )


def _public(records: list[RecordView]) -> list[dict]:
    return [r.public() for r in records]


@router.post("/users/{username}/transactions")
async def create_transaction(
    username: str,
    body: RecordCreate,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Owner(username))
    record = await RecordService(store).create_record(username, body)
    return guard.envelope(record.public())


@router.get("/transactions")
async def list_all_transactions(
    guard: SessionGuard = Depends(), store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    return guard.envelope(_public(await RecordService(store).list_all()))


@router.get("/users/{username}/transactions")
async def list_user_transactions(
    username: str,
    filters: RecordFilterParams = Depends(record_filters),
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Owner(username))
    records = await RecordService(store).list_for_user(username, filters)
    return guard.envelope(_public(records))


@router.get("/transactions/users/{username}")
async def admin_list_user_transactions(
    username: str,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    records = await RecordService(store).list_for_user(username)
    return guard.envelope(_public(records))


@router.get("/users/{username}/transactions/category/{category}")
async def list_user_transactions_by_category(
    username: str,
    category: str,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Owner(username))
    records = await RecordService(store).list_for_user(username, category=category)
    return guard.envelope(_public(records))


@router.get("/transactions/users/{username}/category/{category}")
async def admin_list_user_transactions_by_category(
    username: str,
    category: str,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    records = await RecordService(store).list_for_user(username, category=category)
    return guard.envelope(_public(records))


@router.get("/groups/{name}/transactions")
async def list_group_transactions(
    name: str,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    group = await GroupService(store).get_group(name)
    guard.require(GroupMember.of(group.member_emails))
    records = await RecordService(store).list_for_group(group)
    return guard.envelope(_public(records))


@router.get("/transactions/groups/{name}")
async def admin_list_group_transactions(
    name: str,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    group = await GroupService(store).get_group(name)
    records = await RecordService(store).list_for_group(group)
    return guard.envelope(_public(records))


@router.get("/groups/{name}/transactions/category/{category}")
async def list_group_transactions_by_category(
    name: str,
    category: str,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    group = await GroupService(store).get_group(name)
    guard.require(GroupMember.of(group.member_emails))
    records = await RecordService(store).list_for_group(group, category)
    return guard.envelope(_public(records))


@router.get("/transactions/groups/{name}/category/{category}")
async def admin_list_group_transactions_by_category(
    name: str,
    category: str,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    group = await GroupService(store).get_group(name)
    records = await RecordService(store).list_for_group(group, category)
    return guard.envelope(_public(records))


@router.delete("/users/{username}/transactions")
async def delete_transaction(
    username: str,
    body: RecordDelete,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Owner(username), Admin())
    await RecordService(store).delete_record(username, body.id)
    return guard.envelope({"message": "Transaction deleted"})


@router.delete("/transactions")
async def delete_transactions(
    body: RecordsDelete,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    deleted = await RecordService(store).delete_records(body.ids)
    return guard.envelope({"message": "Transactions deleted", "count": deleted})
