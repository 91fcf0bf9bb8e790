"""Group Routes — tests for the membership partition applied through the API.

Tests cover:
    - creation includes the creator and reports exclusions
    - creator already in a group / duplicate name are conflicts
    - addition applies only the eligible subset
    - an empty eligible set changes nothing
    - removal guards: one-member group, emptying keeps the earliest member
    - group membership gates member routes; admin routes need Admin
    - a stale version is rejected (optimistic concurrency)
"""

import pytest
from sqlalchemy import select

from ezwallet.core.domain_types import Role
from ezwallet.core.errors import ConcurrencyError
from ezwallet.models.group import GroupMember


async def _member_emails(db) -> list[str]:
    result = await db.execute(select(GroupMember.email).order_by(GroupMember.id))
    return list(result.scalars().all())


async def test_create_group_includes_creator_and_reports_exclusions(
    client, seed_account, seed_group, auth_headers,
):
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    carol = await seed_account("carol")
    dave = await seed_account("dave")
    await seed_group("other", [dave])

    res = await client.post("/api/groups", json={
        "name": "family",
        "memberEmails": [bob.email, dave.email, "unknown@example.com", bob.email, carol.email],
    }, headers=auth_headers(alice))

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["group"] == {
        "name": "family",
        "members": [{"email": bob.email}, {"email": carol.email}, {"email": alice.email}],
    }
    assert data["alreadyInGroup"] == [{"email": dave.email}]
    assert data["membersNotFound"] == [{"email": "unknown@example.com"}]


async def test_create_group_when_creator_already_grouped_is_conflict(
    client, seed_account, seed_group, auth_headers,
):
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    await seed_group("first", [alice])
    res = await client.post("/api/groups", json={
        "name": "second", "memberEmails": [bob.email],
    }, headers=auth_headers(alice))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "CREATOR_IN_GROUP"


async def test_create_group_with_taken_name_is_conflict(
    client, seed_account, seed_group, auth_headers,
):
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    await seed_group("family", [bob])
    res = await client.post("/api/groups", json={
        "name": "family", "memberEmails": [],
    }, headers=auth_headers(alice))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "GROUP_NAME_TAKEN"


async def test_create_group_malformed_email_rejects_everything(
    client, test_db, seed_account, auth_headers,
):
    alice = await seed_account("alice")
    res = await client.post("/api/groups", json={
        "name": "family", "memberEmails": ["bob@example.com", "not-an-email"],
    }, headers=auth_headers(alice))
    assert res.status_code == 400
    assert await _member_emails(test_db) == []


async def test_add_applies_only_eligible_members(
    client, test_db, seed_account, seed_group, auth_headers,
):
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    carol = await seed_account("carol")
    await seed_group("family", [alice])
    await seed_group("other", [carol])

    res = await client.patch("/api/groups/family/add", json={
        "emails": [bob.email, carol.email, "unknown@example.com"],
    }, headers=auth_headers(alice))

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["group"]["members"] == [{"email": alice.email}, {"email": bob.email}]
    assert data["alreadyInGroup"] == [{"email": carol.email}]
    assert data["membersNotFound"] == [{"email": "unknown@example.com"}]


async def test_add_with_no_eligible_member_changes_nothing(
    client, test_db, seed_account, seed_group, auth_headers,
):
    alice = await seed_account("alice")
    carol = await seed_account("carol")
    await seed_group("family", [alice])
    await seed_group("other", [carol])

    res = await client.patch("/api/groups/family/add", json={
        "emails": [carol.email, "unknown@example.com"],
    }, headers=auth_headers(alice))

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "NO_ELIGIBLE_MEMBERS"
    assert await _member_emails(test_db) == [alice.email, carol.email]


async def test_non_member_cannot_add(client, seed_account, seed_group, auth_headers):
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    await seed_group("family", [alice])
    res = await client.patch("/api/groups/family/add", json={
        "emails": [bob.email],
    }, headers=auth_headers(bob))
    assert res.status_code == 401
    assert res.json()["error"]["code"] == "NOT_IN_GROUP"


async def test_admin_insert_does_not_need_membership(
    client, seed_account, seed_group, auth_headers,
):
    root = await seed_account("root", Role.ADMIN)
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    await seed_group("family", [alice])
    res = await client.patch("/api/groups/family/insert", json={
        "emails": [bob.email],
    }, headers=auth_headers(root))
    assert res.status_code == 200
    assert len(res.json()["data"]["group"]["members"]) == 2


async def test_remove_from_one_member_group_is_conflict(
    client, test_db, seed_account, seed_group, auth_headers,
):
    alice = await seed_account("alice")
    await seed_group("solo", [alice])
    res = await client.patch("/api/groups/solo/remove", json={
        "emails": [alice.email],
    }, headers=auth_headers(alice))
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "LAST_GROUP_MEMBER"
    assert await _member_emails(test_db) == [alice.email]


async def test_removing_everyone_keeps_earliest_member(
    client, test_db, seed_account, seed_group, auth_headers,
):
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    carol = await seed_account("carol")
    await seed_group("family", [alice, bob, carol])

    res = await client.patch("/api/groups/family/remove", json={
        "emails": [carol.email, bob.email, alice.email],
    }, headers=auth_headers(bob))

    assert res.status_code == 200
    assert res.json()["data"]["group"]["members"] == [{"email": alice.email}]
    assert await _member_emails(test_db) == [alice.email]


async def test_remove_reports_not_in_group(
    client, seed_account, seed_group, auth_headers,
):
    root = await seed_account("root", Role.ADMIN)
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    carol = await seed_account("carol")
    await seed_group("family", [alice, bob])

    res = await client.patch("/api/groups/family/pull", json={
        "emails": [bob.email, carol.email],
    }, headers=auth_headers(root))

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["group"]["members"] == [{"email": alice.email}]
    assert data["notInGroup"] == [{"email": carol.email}]


async def test_member_can_read_group(client, seed_account, seed_group, auth_headers):
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    await seed_group("family", [alice])
    assert (await client.get("/api/groups/family", headers=auth_headers(alice))).status_code == 200
    assert (await client.get("/api/groups/family", headers=auth_headers(bob))).status_code == 401


async def test_unknown_group_is_client_error(client, seed_account, auth_headers):
    alice = await seed_account("alice")
    res = await client.get("/api/groups/nope", headers=auth_headers(alice))
    assert res.status_code == 400


async def test_admin_deletes_group(client, test_db, seed_account, seed_group, auth_headers):
    root = await seed_account("root", Role.ADMIN)
    alice = await seed_account("alice")
    await seed_group("family", [alice])
    res = await client.request(
        "DELETE", "/api/groups", json={"name": "family"}, headers=auth_headers(root),
    )
    assert res.status_code == 200
    assert await _member_emails(test_db) == []


async def test_stale_version_is_rejected(store, seed_account, seed_group):
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    carol = await seed_account("carol")
    group = await seed_group("family", [alice])

    await store.groups.update_members(group.name, group.version, add=[(bob.email, bob.id)])
    await store.commit()

    with pytest.raises(ConcurrencyError):
        await store.groups.update_members(
            group.name, group.version, add=[(carol.email, carol.id)],
        )
    await store.rollback()
    members = (await store.groups.find_by_name("family")).member_emails
    assert members == [alice.email, bob.email]
