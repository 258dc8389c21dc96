"""
auth/dependencies.py -- The auth gate, as a FastAPI Depends() helper.

get_current_user() reads the access token from the configured header
(x-auth-token by default), falling back to "Authorization: Bearer <token>".
It has exactly four outcomes:

  no token                      -> Unauthorized "No token, authorization denied"
  bad signature / expired token -> Unauthorized "Token is not valid"
  unexpected failure            -> re-raised; the app answers 500 "Server Error"
  valid token                   -> Identity, handed to the route handler

Because it is a dependency, a rejected request never reaches the handler
body and therefore never causes a side effect.
"""

from __future__ import annotations

import logging

from fastapi import Request
from jose import JWTError

from auth.models import Identity
from auth.tokens import decode_access_token
from core.errors import Unauthorized

logger = logging.getLogger("devconnector.auth")


def _extract_token(request: Request, header_name: str) -> str | None:
    token = request.headers.get(header_name, "").strip()
    if token:
        return token
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def get_current_user(request: Request) -> Identity:
    """Require a valid access token and return the caller's Identity.

    Use as a FastAPI dependency:
        @router.get("/me")
        def route(identity: Identity = Depends(get_current_user)): ...
    """
    settings = request.app.state.settings
    token = _extract_token(request, settings.token_header)
    if token is None:
        raise Unauthorized("No token, authorization denied")

    try:
        user_id = decode_access_token(token, settings.secret_key)
    except JWTError:
        raise Unauthorized("Token is not valid") from None
    except Exception:
        logger.exception("Auth gate failed while verifying a token")
        raise

    request.state.identity = Identity(id=user_id)
    return request.state.identity
