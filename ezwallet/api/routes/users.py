"""Account Routes — list, read and delete accounts.

Invariants:
    - Listing and deletion need Admin; a single account is readable by Admin or Owner
    - Deleting an admin is refused before the caller is authorized
"""

from fastapi import APIRouter, Depends

from ezwallet.api.session_guard import SessionGuard, get_store
from ezwallet.core.requirements import Admin, Owner
from ezwallet.infrastructure.repositories import RecordStore
from ezwallet.schemas.account import AccountDelete
from ezwallet.services.account_service import AccountService

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("")
async def list_users(
    guard: SessionGuard = Depends(), store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    accounts = await AccountService(store).list_accounts()
    return guard.envelope([a.public() for a in accounts])


@router.get("/{username}")
async def get_user(
    username: str,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin(), Owner(username))
    account = await AccountService(store).get_account(username)
    return guard.envelope(account.public())


@router.delete("")
async def delete_user(
    body: AccountDelete,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    service = AccountService(store)
    account = await service.get_deletable_account(body.email)
    guard.require(Admin())
    return guard.envelope(await service.delete_account(account))
