"""Account Service — listing and removal of accounts with their dependents.

Invariants:
    - Admin accounts are never deleted; the guard runs before caller authorization
    - Removal deletes owned records, detaches the account from its group (deleting
      the group when it was the only member) and deletes the account, in ONE commit
    - Group detachment goes through the version-checked member update

Design Decisions:
    - get_deletable_account() and delete_account() are split so the route can
      authorize between the admin guard and the mutation
"""

import logging

from ezwallet.core.enforce_accounts import (
    check_account_deletable, check_account_email, group_cascade_deletes_group,
)
from ezwallet.core.entities import AccountView
from ezwallet.core.errors import NotFoundError, error_from_rejection
from ezwallet.infrastructure.repositories import RecordStore

logger = logging.getLogger(__name__)


class AccountService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def list_accounts(self) -> list[AccountView]:
        return await self.store.accounts.list_all()

    async def get_account(self, username: str) -> AccountView:
        account = await self.store.accounts.find_by_username(username)
        if account is None:
            raise NotFoundError("User", username)
        return account

    async def get_deletable_account(self, email: str | None) -> AccountView:
        """Validate the email, load the account and refuse admins."""
        error = check_account_email(email)
        if error:
            raise error_from_rejection(error)
        account = await self.store.accounts.find_by_email(email)
        if account is None:
            raise NotFoundError("User", email)
        error = check_account_deletable(account)
        if error:
            logger.warning(
                "Refused to delete an admin account",
                extra={"username": account.username, "error_code": error["error_code"]},
            )
            raise error_from_rejection(error)
        return account

    async def delete_account(self, account: AccountView) -> dict:
        deleted_records = await self.store.records.delete_by_owner(account.username)

        deleted_from_group = False
        group = await self.store.groups.find_containing_email(account.email)
        if group is not None:
            if group_cascade_deletes_group(group):
                await self.store.groups.delete(group.name)
            else:
                await self.store.groups.update_members(
                    group.name, group.version, remove=[account.email],
                )
            deleted_from_group = True

        await self.store.accounts.delete(account.id)
        await self.store.commit()
        logger.info(
            f"Account deleted with {deleted_records} records",
            extra={
                "username": account.username,
                "group": group.name if group else None,
                "removed": deleted_records,
            },
        )
        return {
            "deletedTransactions": deleted_records,
            "deletedFromGroup": deleted_from_group,
        }
