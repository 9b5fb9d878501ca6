"""
api/routes/favorites.py -- The signed-in user's favorite countries.

Routes:
  GET  /api/favorites         -- list (requires auth)
  POST /api/favorites/toggle  -- add if absent, remove if present (requires auth)

The owner is always the authenticated user; there is no way to read or
toggle another user's list. Missing body fields are rejected with 400 by
the validation handler in api/main.py before the store is touched.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import FavoriteResponse, ToggleFavoriteRequest, ToggleFavoriteResponse
from auth.dependencies import get_current_user
from auth.models import User
from favorites.store import FavoriteStore

router = APIRouter()


@router.get("/favorites", response_model=list[FavoriteResponse])
def list_favorites(request: Request, current_user: User = Depends(get_current_user)) -> list[FavoriteResponse]:
    favorite_store: FavoriteStore = request.app.state.favorite_store
    return [FavoriteResponse.from_favorite(f) for f in favorite_store.list_for_user(current_user.id)]


@router.post("/favorites/toggle", response_model=ToggleFavoriteResponse)
def toggle_favorite(
    request: Request,
    body: ToggleFavoriteRequest,
    current_user: User = Depends(get_current_user),
) -> ToggleFavoriteResponse:
    """Flip the favorite state of one country for the current user."""
    favorite_store: FavoriteStore = request.app.state.favorite_store
    added = favorite_store.toggle(current_user.id, body.country_code, body.country_name, body.flag_url)
    return ToggleFavoriteResponse(added=added)
