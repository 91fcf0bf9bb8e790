"""Account Rules — pure checks for registration, login and account removal.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - Admin accounts are never removable, whoever asks
    - Group cascade: a sole member's group is deleted, otherwise only the member goes
"""

from ezwallet.core.entities import AccountView, GroupView
from ezwallet.core.enforce_membership import is_valid_email


def check_account_email(email: str | None) -> dict | None:
    if email is None:
        return {
            "status": "error",
            "error_code": "MISSING_EMAIL",
            "category": "validation",
            "message": "The request body does not contain all the necessary attributes",
            "field": "email",
        }
    if email == "":
        return {
            "status": "error",
            "error_code": "EMPTY_EMAIL",
            "category": "validation",
            "message": "The email passed in the request body is an empty string",
            "field": "email",
        }
    if not is_valid_email(email):
        return {
            "status": "error",
            "error_code": "MALFORMED_EMAIL",
            "category": "validation",
            "message": "The email passed in the request body is not in correct email format",
            "field": "email",
        }
    return None


def check_account_deletable(account: AccountView) -> dict | None:
    if account.is_admin:
        return {
            "status": "error",
            "error_code": "ADMIN_NOT_DELETABLE",
            "category": "conflict",
            "message": "Cannot delete an admin",
        }
    return None


def group_cascade_deletes_group(group: GroupView) -> bool:
    """True when removing the member would leave the group empty."""
    return len(group.members) <= 1
