"""Account Removal — tests for the cascade over records and groups.

Tests cover:
    - owned records are deleted and counted
    - the account leaves its group; a sole member's group is deleted
    - admin accounts are refused even for non-admin callers
    - non-admin callers cannot delete anyone else
"""

from sqlalchemy import func, select

from ezwallet.core.domain_types import Role
from ezwallet.models.account import Account
from ezwallet.models.group import Group, GroupMember
from ezwallet.models.record import Record


async def _count(db, model, *criteria) -> int:
    query = select(func.count()).select_from(model)
    if criteria:
        query = query.where(*criteria)
    return (await db.execute(query)).scalar_one()


async def test_delete_removes_records_and_group_membership(
    client, test_db, seed_account, seed_category, seed_record, seed_group, auth_headers,
):
    root = await seed_account("root", Role.ADMIN)
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    await seed_category("food")
    await seed_record("alice", "food")
    await seed_record("alice", "food")
    await seed_record("bob", "food")
    await seed_group("family", [alice, bob])

    res = await client.request(
        "DELETE", "/api/users", json={"email": alice.email}, headers=auth_headers(root),
    )
    assert res.status_code == 200
    assert res.json()["data"] == {"deletedTransactions": 2, "deletedFromGroup": True}

    assert await _count(test_db, Account, Account.username == "alice") == 0
    assert await _count(test_db, Record, Record.username == "alice") == 0
    assert await _count(test_db, Record, Record.username == "bob") == 1
    members = (await test_db.execute(select(GroupMember.email))).scalars().all()
    assert members == [bob.email]


async def test_sole_member_group_is_deleted(
    client, test_db, seed_account, seed_group, auth_headers,
):
    root = await seed_account("root", Role.ADMIN)
    alice = await seed_account("alice")
    await seed_group("solo", [alice])

    res = await client.request(
        "DELETE", "/api/users", json={"email": alice.email}, headers=auth_headers(root),
    )
    assert res.status_code == 200
    assert res.json()["data"]["deletedFromGroup"] is True
    assert await _count(test_db, Group) == 0
    assert await _count(test_db, GroupMember) == 0


async def test_account_without_group_or_records(
    client, seed_account, auth_headers,
):
    root = await seed_account("root", Role.ADMIN)
    alice = await seed_account("alice")
    res = await client.request(
        "DELETE", "/api/users", json={"email": alice.email}, headers=auth_headers(root),
    )
    assert res.json()["data"] == {"deletedTransactions": 0, "deletedFromGroup": False}


async def test_admin_account_is_never_deleted(
    client, test_db, seed_account, auth_headers,
):
    root = await seed_account("root", Role.ADMIN)
    other = await seed_account("other_admin", Role.ADMIN)
    res = await client.request(
        "DELETE", "/api/users", json={"email": other.email}, headers=auth_headers(root),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "ADMIN_NOT_DELETABLE"
    assert await _count(test_db, Account) == 2


async def test_admin_guard_runs_before_authorization(
    client, seed_account, auth_headers,
):
    alice = await seed_account("alice")
    root = await seed_account("root", Role.ADMIN)
    res = await client.request(
        "DELETE", "/api/users", json={"email": root.email}, headers=auth_headers(alice),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "ADMIN_NOT_DELETABLE"


async def test_regular_caller_cannot_delete_accounts(
    client, test_db, seed_account, auth_headers,
):
    alice = await seed_account("alice")
    bob = await seed_account("bob")
    res = await client.request(
        "DELETE", "/api/users", json={"email": bob.email}, headers=auth_headers(alice),
    )
    assert res.status_code == 401
    assert await _count(test_db, Account, Account.username == "bob") == 1


async def test_unknown_email_is_client_error(client, seed_account, auth_headers):
    root = await seed_account("root", Role.ADMIN)
    res = await client.request(
        "DELETE", "/api/users", json={"email": "unknown@example.com"},
        headers=auth_headers(root),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_malformed_email_is_validation_error(client, seed_account, auth_headers):
    root = await seed_account("root", Role.ADMIN)
    res = await client.request(
        "DELETE", "/api/users", json={"email": "unknown"}, headers=auth_headers(root),
    )
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_owner_can_read_own_account(client, seed_account, auth_headers):
    alice = await seed_account("alice")
    res = await client.get("/api/users/alice", headers=auth_headers(alice))
    assert res.status_code == 200
    assert res.json()["data"] == {
        "username": "alice", "email": "alice@example.com", "role": "Regular",
    }


async def test_user_cannot_read_other_account(client, seed_account, auth_headers):
    alice = await seed_account("alice")
    await seed_account("bob")
    res = await client.get("/api/users/bob", headers=auth_headers(alice))
    assert res.status_code == 401
