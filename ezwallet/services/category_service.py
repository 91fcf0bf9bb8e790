"""Category Service — category CRUD and merge removal.

Invariants:
    - Renaming a category moves every record that referenced the old type
    - Merge removal never leaves a record pointing at a deleted category:
      each label's delete + reassignment commits together
    - Labels are applied one transaction at a time; a failure stops the loop
      and labels already committed stay removed

Design Decisions:
    - The removal plan is computed once from a creation-ordered snapshot
      (core/enforce_categories.plan_category_removal); a label that disappears
      between snapshot and delete is reported as not found
"""

import logging

from ezwallet.core.enforce_categories import (
    check_categories_remain, check_removal_targets, plan_category_removal,
)
from ezwallet.core.entities import CategoryView
from ezwallet.core.errors import (
    ConcurrencyError, ConflictError, NotFoundError, error_from_rejection,
)
from ezwallet.infrastructure.repositories import RecordStore
from ezwallet.schemas.category import CategoryBody

logger = logging.getLogger(__name__)


class CategoryService:
    def __init__(self, store: RecordStore):
        self.store = store

    async def list_categories(self) -> list[CategoryView]:
        return await self.store.categories.list_in_creation_order()

    async def create_category(self, body: CategoryBody) -> CategoryView:
        if await self.store.categories.find_by_type(body.type):
            raise ConflictError(
                f"Category '{body.type}' already exists", code="CATEGORY_EXISTS",
            )
        category = await self.store.categories.create(body.type, body.color)
        await self.store.commit()
        logger.info("Category created", extra={"category": body.type})
        return category

    async def update_category(self, current_type: str, body: CategoryBody) -> dict:
        """Rename/recolor a category; records follow the new type."""
        if await self.store.categories.find_by_type(current_type) is None:
            raise NotFoundError("Category", current_type)
        renamed = body.type != current_type
        if renamed and await self.store.categories.find_by_type(body.type):
            raise ConflictError(
                f"Category '{body.type}' already exists", code="CATEGORY_EXISTS",
            )

        if not await self.store.categories.update(current_type, body.type, body.color):
            raise ConcurrencyError(f"Category '{current_type}' was removed concurrently")
        count = 0
        if renamed:
            count = await self.store.records.reassign_category(current_type, body.type)
        await self.store.commit()
        logger.info(
            f"Category updated, {count} records moved",
            extra={"category": body.type, "reassigned": count},
        )
        return {"message": "Category edited successfully", "count": count}

    async def remove_categories(self, types: list[str] | None) -> dict:
        """Delete the targeted categories, merging their records into the fallback."""
        error = check_removal_targets(types)
        if error:
            raise error_from_rejection(error)
        error = check_categories_remain(await self.store.categories.count())
        if error:
            raise error_from_rejection(error)

        existing = [c.type for c in await self.store.categories.list_in_creation_order()]
        plan = plan_category_removal(existing, types)

        removed: list[str] = []
        not_found = list(plan.not_found)
        count = 0
        for category_type in plan.to_remove:
            moved = await self.store.categories.delete_and_reassign(
                category_type, plan.fallback,
            )
            await self.store.commit()
            if moved is None:
                not_found.append(category_type)
                continue
            removed.append(category_type)
            count += moved

        logger.info(
            f"Removed {len(removed)} categories into '{plan.fallback}'",
            extra={"category": plan.fallback, "removed": removed, "reassigned": count},
        )
        return {
            "message": "Categories deleted",
            "count": count,
            "removed": removed,
            "notFound": not_found,
            "fallback": plan.fallback,
        }
