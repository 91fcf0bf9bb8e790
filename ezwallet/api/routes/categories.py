"""Category Routes — create, edit, merge-remove, list.

Invariants:
    - Every mutation needs Admin; listing needs only an authenticated session
"""

from fastapi import APIRouter, Depends

from ezwallet.api.session_guard import SessionGuard, get_store
from ezwallet.core.requirements import Admin, Authenticated
from ezwallet.infrastructure.repositories import RecordStore
from ezwallet.schemas.category import CategoryBody, CategoryDelete
from ezwallet.services.category_service import CategoryService

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.post("")
async def create_category(
    body: CategoryBody,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    category = await CategoryService(store).create_category(body)
    return guard.envelope(category.public())


@router.patch("/{category_type}")
async def update_category(
    category_type: str,
    body: CategoryBody,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    result = await CategoryService(store).update_category(category_type, body)
    return guard.envelope(result)


@router.delete("")
async def delete_categories(
    body: CategoryDelete,
    guard: SessionGuard = Depends(),
    store: RecordStore = Depends(get_store),
):
    guard.require(Admin())
    result = await CategoryService(store).remove_categories(body.types)
    return guard.envelope(result)


@router.get("")
async def list_categories(
    guard: SessionGuard = Depends(), store: RecordStore = Depends(get_store),
):
    guard.require(Authenticated())
    categories = await CategoryService(store).list_categories()
    return guard.envelope([c.public() for c in categories])
