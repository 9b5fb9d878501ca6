"""
api/routes/auth.py -- Sign-up, sign-in and sign-out endpoints.

Routes:
  POST /api/auth/signup   -- create an account (public)
  POST /api/auth/signin   -- password login; stores the token in the session cookie
  POST /api/auth/signout  -- clears the session cookie
  GET  /api/auth/me       -- current user (requires auth)

Security:
  POST /signin and /signup are rate-limited per IP.
  auth.service.sign_in() provides timing equalization -- use it, never inline
  get_by_username() + verify_password().
  Cache-Control: no-store on sign-in responses.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response

from api.limiter import limiter
from api.models import MessageResponse, SigninRequest, SigninResponse, SignupRequest, UserResponse
from auth.dependencies import get_current_user
from auth.models import User
from auth.service import register_user, sign_in
from core.config import get_settings

logger = logging.getLogger("countries.api")

_settings = get_settings()

# Auth policy:
# - POST /api/auth/signup:  public
# - POST /api/auth/signin:  public
# - POST /api/auth/signout: public -- clearing a session needs no prior auth
# - GET  /api/auth/me:      requires auth (get_current_user)
router = APIRouter()


@router.post("/auth/signup", response_model=MessageResponse)
@limiter.limit(_settings.signin_rate_limit)
def signup(request: Request, body: SignupRequest) -> MessageResponse:
    """Register a new user. Fails with 400 on a taken username/email or an unknown role."""
    register_user(
        request.app.state.user_store,
        request.app.state.role_store,
        username=body.username,
        email=body.email,
        password=body.password,
        roles=body.roles,
    )
    return MessageResponse(message="User was registered successfully!")


@router.post("/auth/signin", response_model=SigninResponse)
@limiter.limit(_settings.signin_rate_limit)
def signin(request: Request, response: Response, body: SigninRequest) -> SigninResponse:
    """Authenticate with username and password and open a session.

    The same InvalidCredentials error is returned for an unknown username and
    a wrong password so the endpoint cannot be used to enumerate accounts.
    """
    user, token = sign_in(request.app.state.user_store, body.username, body.password)
    request.session["token"] = token
    response.headers["Cache-Control"] = "no-store"
    logger.info("User %s signed in", user.username)
    return SigninResponse.from_sign_in(user, token)


@router.post("/auth/signout", response_model=MessageResponse)
def signout(request: Request) -> MessageResponse:
    """Drop the session. SessionMiddleware expires the cookie on an empty session."""
    request.session.clear()
    return MessageResponse(message="You've been signed out!")


@router.get("/auth/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return identity information for the currently authenticated user."""
    return UserResponse.from_user(current_user)
