"""
api/routes/users.py -- Account registration.

Routes:
  POST /api/users  -- register; returns {"token": ...}

The credential issuer itself (duplicate check, avatar, bcrypt hash) lives in
auth/tokens.register_user(); this module only wires it to HTTP and signs the
token with the configured secret and lifetime.
"""

from fastapi import APIRouter, Request

from api.models import RegisterRequest, TokenResponse
from auth.store import UserStore
from auth.tokens import create_access_token, register_user

# Public: registration is how a caller obtains its first token.
router = APIRouter()


@router.post("/users", response_model=TokenResponse)
def register(request: Request, body: RegisterRequest) -> TokenResponse:
    """Register an account and return a signed access token.

    A duplicate email fails with 400 {"errors": [{"msg": "User already exists"}]}
    and creates nothing.
    """
    settings = request.app.state.settings
    user_store: UserStore = request.app.state.user_store

    user = register_user(user_store, body.name, body.email, body.password)
    token = create_access_token(user.id, settings.secret_key, settings.token_expire_seconds)
    return TokenResponse(token=token)
