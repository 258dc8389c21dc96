"""
auth/tokens.py -- Password hashing, access tokens, registration and login.

  JWT: python-jose with HS256. The payload embeds {"user": {"id": ...}} and
       an "exp" claim. Tokens are stateless: nothing is persisted server-side
       and validity is purely signature + expiry. The signing secret and the
       lifetime are passed in by the caller (from Settings), never read from
       module state.

  Passwords: bcrypt directly, no passlib wrapper. _DUMMY_HASH lets
       authenticate_user() run bcrypt even for unknown emails, so response
       time does not reveal which emails are registered.

Layer rule: no imports from api/ or social/.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError

from auth.models import User
from core.errors import InvalidInput
from core.urls import gravatar_url

if TYPE_CHECKING:
    from auth.store import UserStore

logger = logging.getLogger("devconnector.auth")

ALGORITHM = "HS256"
BCRYPT_ROUNDS = 10

# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt only looks at the first 72 bytes; the API caps password length
    well below that.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


_DUMMY_HASH: str = hash_password("devconnector_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: str, secret_key: str, expire_seconds: int) -> str:
    """Sign a token carrying the user's identity, valid for expire_seconds."""
    expire = datetime.now(timezone.utc) + timedelta(seconds=expire_seconds)
    payload = {
        "user": {"id": user_id},
        "exp": expire,
    }
    return jwt.encode(payload, secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, secret_key: str) -> str:
    """Verify token and return the embedded user id.

    Raises jose.JWTError on a bad signature, an expired token, a malformed
    token, or a payload without a user id. Anything else that escapes is an
    unexpected failure; the auth gate reports it as a server error.
    """
    payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    user = payload.get("user")
    if not isinstance(user, dict) or not isinstance(user.get("id"), str) or not user["id"]:
        raise JWTError("Token payload carries no user id")
    return user["id"]


# ---------------------------------------------------------------------------
# Credential issuer
# ---------------------------------------------------------------------------


def register_user(store: UserStore, name: str, email: str, password: str) -> User:
    """Create a User with a derived avatar and a hashed password.

    Raises InvalidInput (rendered with the field-error envelope) if the email
    is already registered. The UNIQUE index backs the pre-check, so a
    concurrent duplicate registration fails the same way.
    """
    email = email.strip().lower()
    if store.get_by_email(email) is not None:
        raise InvalidInput.field_errors("User already exists")

    user = User(
        name=name.strip(),
        email=email,
        avatar=gravatar_url(email),
        hashed_password=hash_password(password),
    )
    try:
        user.id = store.create_user(user)
    except IntegrityError as exc:
        raise InvalidInput.field_errors("User already exists") from exc
    logger.info("Registered user %s", user.id)
    return user


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Check an email/password pair with timing equalization.

    Always runs bcrypt whether or not the email exists. Returns the User on
    success, None on any failure.
    """
    user = store.get_by_email(email)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user
