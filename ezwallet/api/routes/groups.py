"""Group Routes — create, read, change membership, delete.

Invariants:
    - Reading one group accepts Admin or GroupMember; /add and /remove need
      GroupMember, and /insert and /pull are their Admin-only counterparts
    - Group existence is checked first: the member list IS the requirement
"""

from fastapi import APIRouter, Depends

from ezwallet.api.session_guard import SessionGuard, get_store
from ezwallet.core.requirements import Admin, Authenticated, GroupMember
from ezwallet.infrastructure.repositories import RecordStore
from ezwallet.schemas.group import GroupCreate, GroupDelete, MemberEmails
from ezwallet.services.group_service import GroupService

router = APIRouter(prefix="/api/groups", tags=["groups"])


@router.post("")
async def create_group(
    body: GroupCreate,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    claims = guard.require(Authenticated())
    result = await GroupService(store).create_group(
        body.name, body.member_emails, claims,
    )
    return guard.envelope(result)


@router.get("")
async def list_groups(
    guard: SessionGuard = Depends(), store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    groups = await GroupService(store).list_groups()
    return guard.envelope([g.public() for g in groups])


@router.get("/{name}")
async def get_group(
    name: str,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    group = await GroupService(store).get_group(name)
    guard.require(Admin(), GroupMember.of(group.member_emails))
    return guard.envelope({"group": group.public()})


@router.patch("/{name}/add")
async def add_to_group(
    name: str,
    body: MemberEmails,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    service = GroupService(store)
    group = await service.get_group(name)
    guard.require(GroupMember.of(group.member_emails))
    return guard.envelope(await service.add_members(group, body.emails))


@router.patch("/{name}/insert")
async def insert_into_group(
    name: str,
    body: MemberEmails,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    service = GroupService(store)
    group = await service.get_group(name)
    return guard.envelope(await service.add_members(group, body.emails))


@router.patch("/{name}/remove")
async def remove_from_group(
    name: str,
    body: MemberEmails,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    service = GroupService(store)
    group = await service.get_group(name)
    guard.require(GroupMember.of(group.member_emails))
    return guard.envelope(await service.remove_members(group, body.emails))


@router.patch("/{name}/pull")
async def pull_from_group(
    name: str,
    body: MemberEmails,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    service = GroupService(store)
    group = await service.get_group(name)
    return guard.envelope(await service.remove_members(group, body.emails))


@router.delete("")
async def delete_group(
    body: GroupDelete,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    await GroupService(store).delete_group(body.name)
    return guard.envelope({"message": "Group deleted successfully"})
