"""Account Rules — tests for email checks, admin guard and group cascade."""

import uuid

from ezwallet.core.domain_types import Role
from ezwallet.core.enforce_accounts import (
    check_account_deletable, check_account_email, group_cascade_deletes_group,
)
from ezwallet.core.entities import AccountView, GroupView, MemberRef


def _account(role: Role) -> AccountView:
    return AccountView(uuid.uuid4(), "alice", "alice@example.com", role)


def test_missing_email_rejected():
    assert check_account_email(None)["error_code"] == "MISSING_EMAIL"


def test_empty_email_rejected():
    assert check_account_email("")["error_code"] == "EMPTY_EMAIL"


def test_malformed_email_rejected():
    assert check_account_email("alice")["error_code"] == "MALFORMED_EMAIL"


def test_wellformed_email_passes():
    assert check_account_email("alice@example.com") is None


def test_admin_is_not_deletable():
    result = check_account_deletable(_account(Role.ADMIN))
    assert result["error_code"] == "ADMIN_NOT_DELETABLE"
    assert result["category"] == "conflict"


def test_regular_account_is_deletable():
    assert check_account_deletable(_account(Role.REGULAR)) is None


def test_sole_member_group_is_deleted():
    group = GroupView("g", 1, (MemberRef("alice@example.com"),))
    assert group_cascade_deletes_group(group)


def test_shared_group_survives():
    group = GroupView("g", 1, (MemberRef("alice@example.com"), MemberRef("bob@example.com")))
    assert not group_cascade_deletes_group(group)
