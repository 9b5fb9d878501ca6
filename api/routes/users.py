"""
api/routes/users.py -- User management (admin only).

Routes:
  GET   /api/users       -- list all users
  PATCH /api/users/{id}  -- replace roles and/or (de)activate

Users are never deleted; deactivation is the end of the lifecycle.
An admin cannot deactivate their own account.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request

from api.models import UserAdminResponse, UserPatch
from auth.dependencies import require_admin
from auth.models import User
from auth.service import parse_roles
from auth.store import UserStore
from core.errors import BadRequest, NotFound

logger = logging.getLogger("countries.api")

router = APIRouter()


@router.get("/users", response_model=list[UserAdminResponse])
def list_users(request: Request, current_user: User = Depends(require_admin)) -> list[UserAdminResponse]:
    user_store: UserStore = request.app.state.user_store
    return [UserAdminResponse.from_user(u) for u in user_store.list_users()]


@router.patch("/users/{user_id}", response_model=UserAdminResponse)
def update_user(
    request: Request,
    user_id: int,
    body: UserPatch,
    current_user: User = Depends(require_admin),
) -> UserAdminResponse:
    """Update a user's roles or active status."""
    user_store: UserStore = request.app.state.user_store

    target = user_store.get_by_id(user_id)
    if target is None:
        raise NotFound("User not found.")

    if body.roles is None and body.is_active is None:
        raise BadRequest("No fields to update.")

    if body.is_active is False and target.id == current_user.id:
        raise BadRequest("You cannot deactivate your own account.")

    if body.roles is not None:
        roles = parse_roles(request.app.state.role_store, body.roles)
        user_store.set_roles(user_id, roles)
        logger.info("Admin %s set roles of %s to %s", current_user.username, target.username, [r.value for r in roles])
    if body.is_active is not None:
        user_store.set_active(user_id, body.is_active)
        logger.info("Admin %s set is_active=%s for %s", current_user.username, body.is_active, target.username)

    return UserAdminResponse.from_user(user_store.get_by_id(user_id))
