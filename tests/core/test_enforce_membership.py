"""Membership Enforcement — tests for the three-way partition and its guards.

Tests cover:
    - every candidate lands in exactly one bucket
    - duplicates collapse to the first occurrence
    - structural email checks reject the whole list
    - empty eligible set is a conflict
    - the last-member guard and the earliest-member retention rule
"""

import pytest

from ezwallet.core.domain_types import MembershipOperation
from ezwallet.core.enforce_membership import (
    check_eligible_not_empty,
    check_email_list,
    check_not_last_member,
    include_creator,
    is_valid_email,
    members_to_remove,
    partition_for_addition,
    partition_for_removal,
)

KNOWN = {"a@x.com", "b@x.com", "c@x.com", "d@x.com"}


# ─── Email checks ────────────────────────────────────────────────

@pytest.mark.parametrize("email", ["a@x.com", "first.last+tag@sub.example.org"])
def test_valid_emails_pass(email):
    assert is_valid_email(email)


@pytest.mark.parametrize("email", ["plain", "@x.com", "a@", "a@-x.com", "a b@x.com"])
def test_malformed_emails_fail(email):
    assert not is_valid_email(email)


def test_missing_email_list_is_rejected():
    result = check_email_list(None)
    assert result["error_code"] == "MISSING_EMAILS"
    assert result["category"] == "validation"


def test_empty_string_rejects_whole_list():
    result = check_email_list(["a@x.com", ""])
    assert result["error_code"] == "EMPTY_EMAIL"


def test_malformed_email_rejects_whole_list():
    result = check_email_list(["a@x.com", "nope"])
    assert result["error_code"] == "MALFORMED_EMAIL"


def test_wellformed_list_passes():
    assert check_email_list(["a@x.com", "b@x.com"]) is None


# ─── Partition ───────────────────────────────────────────────────

def test_addition_partition_is_complete_and_disjoint():
    candidates = ["a@x.com", "b@x.com", "unknown@x.com", "c@x.com"]
    partition = partition_for_addition(candidates, KNOWN, grouped_emails={"b@x.com"})

    assert partition.eligible == ["a@x.com", "c@x.com"]
    assert partition.excluded == ["b@x.com"]
    assert partition.not_found == ["unknown@x.com"]
    buckets = partition.eligible + partition.excluded + partition.not_found
    assert sorted(buckets) == sorted(candidates)
    assert partition.excluded_key == "alreadyInGroup"


def test_duplicates_collapse_to_first_occurrence():
    partition = partition_for_addition(
        ["a@x.com", "a@x.com", "unknown@x.com", "unknown@x.com"], KNOWN, set(),
    )
    assert partition.eligible == ["a@x.com"]
    assert partition.not_found == ["unknown@x.com"]


def test_removal_partition_reports_not_in_group():
    partition = partition_for_removal(
        ["a@x.com", "c@x.com", "unknown@x.com"], KNOWN, member_emails=["a@x.com", "b@x.com"],
    )
    assert partition.operation == MembershipOperation.REMOVE
    assert partition.eligible == ["a@x.com"]
    assert partition.excluded == ["c@x.com"]
    assert partition.not_found == ["unknown@x.com"]
    assert partition.excluded_key == "notInGroup"


def test_unknown_email_is_not_found_even_if_grouped():
    partition = partition_for_addition(["unknown@x.com"], KNOWN, {"unknown@x.com"})
    assert partition.not_found == ["unknown@x.com"]
    assert partition.excluded == []


def test_include_creator_appends_once():
    assert include_creator(["a@x.com"], "b@x.com") == ["a@x.com", "b@x.com"]
    assert include_creator(["a@x.com", "b@x.com"], "b@x.com") == ["a@x.com", "b@x.com"]


# ─── Guards ──────────────────────────────────────────────────────

def test_empty_eligible_set_is_conflict_for_addition():
    partition = partition_for_addition(["b@x.com"], KNOWN, {"b@x.com"})
    result = check_eligible_not_empty(partition)
    assert result["error_code"] == "NO_ELIGIBLE_MEMBERS"
    assert result["category"] == "conflict"
    assert "already in a group" in result["message"]


def test_empty_eligible_set_is_conflict_for_removal():
    partition = partition_for_removal(["c@x.com"], KNOWN, ["a@x.com", "b@x.com"])
    result = check_eligible_not_empty(partition)
    assert "not in the group" in result["message"]


def test_non_empty_eligible_set_passes():
    partition = partition_for_addition(["a@x.com"], KNOWN, set())
    assert check_eligible_not_empty(partition) is None


def test_one_member_group_cannot_lose_members():
    result = check_not_last_member(1)
    assert result["error_code"] == "LAST_GROUP_MEMBER"


def test_two_member_group_passes_last_member_guard():
    assert check_not_last_member(2) is None


def test_removing_every_member_keeps_the_earliest():
    members = ["a@x.com", "b@x.com", "c@x.com"]
    partition = partition_for_removal(["c@x.com", "a@x.com", "b@x.com"], KNOWN, members)
    assert members_to_remove(partition, members) == ["c@x.com", "b@x.com"]


def test_partial_removal_is_applied_in_full():
    members = ["a@x.com", "b@x.com", "c@x.com"]
    partition = partition_for_removal(["a@x.com", "b@x.com"], KNOWN, members)
    assert members_to_remove(partition, members) == ["a@x.com", "b@x.com"]
