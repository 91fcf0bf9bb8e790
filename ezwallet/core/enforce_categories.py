"""Category Removal Planning — decides fallback and deletions for a merge removal.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - The store keeps at least one category: a single-category store rejects removal
    - Fallback = earliest-created category that is not targeted; when every
      category is targeted the earliest one becomes the fallback and is spared
    - The fallback is never in plan.to_remove
    - Unknown labels are reported in plan.not_found, never fatal

Design Decisions:
    - The plan is computed from a creation-ordered snapshot of category types;
      the shell applies it one label at a time, each in its own transaction
    - "Delete all" degrading to "all but the oldest" is kept as documented
      behavior rather than rejected
"""

from dataclasses import dataclass, field

from ezwallet.core.enforce_membership import dedupe


@dataclass(frozen=True)
class CategoryRemovalPlan:
    fallback: str
    to_remove: list[str] = field(default_factory=list)
    not_found: list[str] = field(default_factory=list)
    spared: list[str] = field(default_factory=list)


def check_removal_targets(types: list[str] | None) -> dict | None:
    """Target list must be present, non-empty and free of empty labels."""
    if types is None:
        return {
            "status": "error",
            "error_code": "MISSING_TYPES",
            "category": "validation",
            "message": "The request body does not contain all the necessary attributes",
            "field": "types",
        }
    if len(types) == 0:
        return {
            "status": "error",
            "error_code": "EMPTY_TYPES",
            "category": "validation",
            "message": "Request body types cannot be empty",
            "field": "types",
        }
    if any(not isinstance(t, str) or t == "" for t in types):
        return {
            "status": "error",
            "error_code": "EMPTY_TYPE",
            "category": "validation",
            "message": "Categories cannot be empty strings",
            "field": "types",
        }
    return None


def check_categories_remain(category_count: int) -> dict | None:
    if category_count <= 1:
        return {
            "status": "error",
            "error_code": "LAST_CATEGORY",
            "category": "conflict",
            "message": "You cannot delete categories when there is only one category in the db",
        }
    return None


def select_fallback(existing: list[str], targets: set[str]) -> str:
    """Earliest untargeted category, or the earliest overall if all are targeted."""
    for category_type in existing:
        if category_type not in targets:
            return category_type
    return existing[0]


def plan_category_removal(
    existing: list[str], targets: list[str],
) -> CategoryRemovalPlan:
    """Build a removal plan from creation-ordered existing types.

    Assumes check_removal_targets and check_categories_remain already passed.
    """
    wanted = dedupe(targets)
    fallback = select_fallback(existing, set(wanted))
    known = set(existing)
    plan = CategoryRemovalPlan(fallback=fallback)
    for category_type in wanted:
        if category_type not in known:
            plan.not_found.append(category_type)
        elif category_type == fallback:
            plan.spared.append(category_type)
        else:
            plan.to_remove.append(category_type)
    return plan
