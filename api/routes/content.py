"""
api/routes/content.py -- Role-gated sample content.

Routes:
  GET /api/test/all    -- public
  GET /api/test/user   -- any signed-in user
  GET /api/test/mod    -- moderator role
  GET /api/test/admin  -- admin role

The browser client uses these to decide which boards to show.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from api.models import MessageResponse
from auth.dependencies import get_current_user, require_admin, require_moderator
from auth.models import User

router = APIRouter()


@router.get("/test/all", response_model=MessageResponse)
def all_access() -> MessageResponse:
    return MessageResponse(message="Public Content.")


@router.get("/test/user", response_model=MessageResponse)
def user_board(current_user: User = Depends(get_current_user)) -> MessageResponse:
    return MessageResponse(message="User Content.")


@router.get("/test/mod", response_model=MessageResponse)
def moderator_board(current_user: User = Depends(require_moderator)) -> MessageResponse:
    return MessageResponse(message="Moderator Content.")


@router.get("/test/admin", response_model=MessageResponse)
def admin_board(current_user: User = Depends(require_admin)) -> MessageResponse:
    return MessageResponse(message="Admin Content.")
