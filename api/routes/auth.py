"""
api/routes/auth.py -- Login and current-user lookup.

Routes:
  GET  /api/auth  -- the caller's user record, without the password hash (requires auth)
  POST /api/auth  -- email/password login; returns {"token": ...}

Security:
  POST /api/auth is rate-limited per client IP.
  authenticate_user() runs bcrypt even for unknown emails, and both wrong
  email and wrong password produce the same "Invalid Credentials" error, so
  the endpoint does not reveal which emails are registered.
"""

import logging

from fastapi import APIRouter, Depends, Request

from api.limiter import LOGIN_RATE_LIMIT, limiter
from api.models import LoginRequest, TokenResponse, UserResponse
from auth.dependencies import get_current_user
from auth.models import Identity
from auth.store import UserStore
from auth.tokens import authenticate_user, create_access_token
from core.errors import InvalidInput, NotFound

logger = logging.getLogger("devconnector.auth")

router = APIRouter()


@router.get("/auth", response_model=UserResponse)
def current_user(request: Request, identity: Identity = Depends(get_current_user)) -> UserResponse:
    """Return the authenticated caller's account."""
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(identity.id)
    if user is None:
        raise NotFound("User not found")
    return UserResponse.from_user(user)


@router.post("/auth", response_model=TokenResponse)
@limiter.limit(LOGIN_RATE_LIMIT)
def login(request: Request, body: LoginRequest) -> TokenResponse:
    """Exchange email and password for an access token."""
    settings = request.app.state.settings
    user_store: UserStore = request.app.state.user_store

    user = authenticate_user(user_store, body.email, body.password)
    if user is None:
        raise InvalidInput.field_errors("Invalid Credentials")

    logger.info("User %s logged in", user.id)
    token = create_access_token(user.id, settings.secret_key, settings.token_expire_seconds)
    return TokenResponse(token=token)
