"""Group Membership Enforcement — three-way partition of candidate emails.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Return rejection dict on violation, None on success
    - Structural checks (empty / malformed email) run before any partitioning
    - Every deduplicated candidate lands in exactly one bucket:
      eligible, excluded (alreadyInGroup | notInGroup) or not_found
    - A one-member group never loses a member through membership removal

Design Decisions:
    - Known and grouped emails are passed in as sets: the shell fetches them,
      the core only classifies
    - Duplicates collapse to their first occurrence so the buckets stay disjoint
"""

import re
from dataclasses import dataclass, field

from ezwallet.core.domain_types import MembershipOperation

EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


def is_valid_email(email: object) -> bool:
    return isinstance(email, str) and EMAIL_PATTERN.match(email) is not None


@dataclass(frozen=True)
class MembershipPartition:
    """Result of classifying candidate emails for one membership operation."""
    operation: MembershipOperation
    eligible: list[str] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)

    @property
    def excluded_key(self) -> str:
        """Public name of the excluded bucket for this operation."""
        if self.operation == MembershipOperation.ADD:
            return "alreadyInGroup"
        return "notInGroup"


def _rejection(error_code: str, category: str, message: str, **extra) -> dict:
    return {
        "status": "error",
        "error_code": error_code,
        "category": category,
        "message": message,
        **extra,
    }


def check_email_list(emails: list[str] | None) -> dict | None:
    """Reject the whole request if any candidate is missing, empty or malformed."""
    if emails is None:
        return _rejection(
            "MISSING_EMAILS", "validation",
            "The request body does not contain all the necessary attributes",
            field="emails",
        )
    for email in emails:
        if email == "":
            return _rejection(
                "EMPTY_EMAIL", "validation",
                "At least one of the member emails is an empty string",
                field="emails",
            )
        if not is_valid_email(email):
            return _rejection(
                "MALFORMED_EMAIL", "validation",
                "At least one of the member emails is not in a valid email format",
                field="emails",
            )
    return None


def dedupe(emails: list[str]) -> list[str]:
    return list(dict.fromkeys(emails))


def include_creator(candidates: list[str], creator_email: str) -> list[str]:
    """Group creation always includes the creator."""
    if creator_email in candidates:
        return list(candidates)
    return [*candidates, creator_email]


def partition_for_addition(
    candidates: list[str], known_emails: set[str], grouped_emails: set[str],
) -> MembershipPartition:
    """Split candidates for group creation or member addition."""
    partition = MembershipPartition(MembershipOperation.ADD)
    for email in dedupe(candidates):
        if email not in known_emails:
            partition.not_found.append(email)
        elif email in grouped_emails:
            partition.excluded.append(email)
        else:
            partition.eligible.append(email)
    return partition


def partition_for_removal(
    candidates: list[str], known_emails: set[str], member_emails: list[str],
) -> MembershipPartition:
    """Split candidates for member removal from one group."""
    partition = MembershipPartition(MembershipOperation.REMOVE)
    members = set(member_emails)
    for email in dedupe(candidates):
        if email not in known_emails:
            partition.not_found.append(email)
        elif email not in members:
            partition.excluded.append(email)
        else:
            partition.eligible.append(email)
    return partition


def check_eligible_not_empty(partition: MembershipPartition) -> dict | None:
    if partition.eligible:
        return None
    if partition.operation == MembershipOperation.ADD:
        message = (
            "All the `memberEmails` either do not exist or are already in a group"
        )
    else:
        message = (
            "All the `memberEmails` either do not exist or are not in the group"
        )
    return _rejection("NO_ELIGIBLE_MEMBERS", "conflict", message)


def check_not_last_member(member_count: int) -> dict | None:
    """Membership removal never touches a one-member group."""
    if member_count <= 1:
        return _rejection(
            "LAST_GROUP_MEMBER", "conflict", "The group contains only one member",
        )
    return None


def members_to_remove(
    partition: MembershipPartition, member_emails: list[str],
) -> list[str]:
    """Eligible removals, sparing the earliest member if all would go."""
    removing = set(partition.eligible)
    if member_emails and removing.issuperset(member_emails):
        removing.discard(member_emails[0])
    return [email for email in partition.eligible if email in removing]
