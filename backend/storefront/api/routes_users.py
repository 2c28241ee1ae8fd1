from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from storefront.api.deps import RowId, authenticate, get_app_settings, require_permission
from storefront.config import Settings
from storefront.db import get_db
from storefront.rbac import Permission
from storefront.schemas.user_schema import UserUpdate, user_to_dict
from storefront.services.product_query import normalize_limit, normalize_page
from storefront.services.token_service import Identity
from storefront.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", summary="List users", dependencies=[Depends(require_permission(Permission.USERS_READ))])
def list_users(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    size = normalize_limit(limit, settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    page_no = normalize_page(page, size)
    items, total = UserService(db).list(skip=(page_no - 1) * size, limit=size)
    return {"total": total, "users": [user_to_dict(u) for u in items]}


@router.get("/{user_id}", summary="Get user")
def get_user(user_id: RowId, identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    return user_to_dict(UserService(db).get(identity, user_id))


@router.put("/{user_id}", summary="Update user")
def update_user(
    user_id: RowId,
    payload: UserUpdate,
    identity: Identity = Depends(authenticate),
    db: Session = Depends(get_db),
):
    return user_to_dict(UserService(db).update(identity, user_id, payload))


@router.delete("/{user_id}", summary="Delete user")
def delete_user(user_id: RowId, identity: Identity = Depends(authenticate), db: Session = Depends(get_db)):
    snapshot = UserService(db).delete(identity, user_id)
    return {"message": "User deleted", "user": snapshot}
