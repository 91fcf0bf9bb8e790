"""Group Service — creation, membership changes and deletion of groups.

Invariants:
    - Structural email checks reject the whole request before any partitioning
    - Only the eligible subset is applied; exclusions are reported, never fatal
    - An empty eligible set is a conflict and nothing is written
    - Member changes are ONE version-checked update per request (see
      SqlGroupRepository.update_members); a lost race surfaces as ConcurrencyError
    - A group is never left without members by membership removal

Design Decisions:
    - Known/grouped email sets are fetched here and handed to the pure partition
      functions in core/enforce_membership.py
    - Each member row keeps the account id as a lookup-only reference
"""

import logging

from ezwallet.core.enforce_membership import (
    MembershipPartition,
    check_eligible_not_empty,
    check_email_list,
    check_not_last_member,
    dedupe,
    include_creator,
    members_to_remove,
    partition_for_addition,
    partition_for_removal,
)
from ezwallet.core.entities import GroupView
from ezwallet.core.errors import (
    ConflictError, NotFoundError, ValidationError, error_from_rejection,
)
from ezwallet.core.requirements import TokenClaims
from ezwallet.infrastructure.repositories import RecordStore

logger = logging.getLogger(__name__)

_MISSING_ATTRIBUTES = "The request body does not contain all the necessary attributes"


def membership_result(group: GroupView, partition: MembershipPartition) -> dict:
    """Public payload: the group after the change plus the excluded candidates."""
    return {
        "group": group.public(),
        partition.excluded_key: [{"email": e} for e in partition.excluded],
        "membersNotFound": [{"email": e} for e in partition.not_found],
    }


class GroupService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def list_groups(self) -> list[GroupView]:
        return await self.store.groups.list_all()

    async def get_group(self, name: str) -> GroupView:
        group = await self.store.groups.find_by_name(name)
        if group is None:
            raise NotFoundError("Group", name)
        return group

    async def _partition_for_addition(
        self, candidates: list[str],
    ) -> tuple[MembershipPartition, dict]:
        accounts = {
            a.email: a for a in await self.store.accounts.find_by_emails(candidates)
        }
        grouped = await self.store.groups.grouped_emails(candidates)
        partition = partition_for_addition(candidates, set(accounts), grouped)
        return partition, accounts

    async def create_group(
        self, name: str | None, emails: list[str] | None, creator: TokenClaims,
    ) -> dict:
        """Create a group from the eligible candidates; the creator is always included."""
        if name is None or emails is None:
            raise ValidationError(_MISSING_ATTRIBUTES)
        if name.strip() == "":
            raise ValidationError("The group name is an empty string", field="name")
        error = check_email_list(emails)
        if error:
            raise error_from_rejection(error)

        if await self.store.groups.find_by_name(name):
            raise ConflictError(
                "A group with the same name already exists", code="GROUP_NAME_TAKEN",
            )
        if await self.store.groups.find_containing_email(creator.email):
            raise ConflictError(
                "The user who calls the API is already in a group",
                code="CREATOR_IN_GROUP",
            )

        candidates = include_creator(dedupe(emails), creator.email)
        partition, accounts = await self._partition_for_addition(candidates)
        error = check_eligible_not_empty(partition)
        if error:
            raise error_from_rejection(error)

        await self.store.groups.create(
            name, [(e, accounts[e].id) for e in partition.eligible],
        )
        await self.store.commit()
        logger.info(
            f"Group created with {len(partition.eligible)} members",
            extra={"group": name, "username": creator.username},
        )
        return membership_result(await self.get_group(name), partition)

    async def add_members(self, group: GroupView, emails: list[str] | None) -> dict:
        error = check_email_list(emails)
        if error:
            raise error_from_rejection(error)

        partition, accounts = await self._partition_for_addition(dedupe(emails))
        error = check_eligible_not_empty(partition)
        if error:
            raise error_from_rejection(error)

        await self.store.groups.update_members(
            group.name, group.version,
            add=[(e, accounts[e].id) for e in partition.eligible],
        )
        await self.store.commit()
        logger.info(
            f"Added {len(partition.eligible)} members", extra={"group": group.name},
        )
        return membership_result(await self.get_group(group.name), partition)

    async def remove_members(self, group: GroupView, emails: list[str] | None) -> dict:
        error = check_email_list(emails)
        if error:
            raise error_from_rejection(error)
        error = check_not_last_member(len(group.members))
        if error:
            raise error_from_rejection(error)

        candidates = dedupe(emails)
        known = {a.email for a in await self.store.accounts.find_by_emails(candidates)}
        partition = partition_for_removal(candidates, known, group.member_emails)
        error = check_eligible_not_empty(partition)
        if error:
            raise error_from_rejection(error)

        removing = members_to_remove(partition, group.member_emails)
        await self.store.groups.update_members(
            group.name, group.version, remove=removing,
        )
        await self.store.commit()
        logger.info(f"Removed {len(removing)} members", extra={"group": group.name})
        return membership_result(await self.get_group(group.name), partition)

    async def delete_group(self, name: str | None) -> None:
        if name is None:
            raise ValidationError(_MISSING_ATTRIBUTES)
        if name == "":
            raise ValidationError("The group name is an empty string", field="name")
        await self.get_group(name)
        await self.store.groups.delete(name)
        await self.store.commit()
        logger.info("Group deleted", extra={"group": name})
