"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Stores and routes do
the work.

Layer rule: no imports from api/, core/ or social/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    avatar is derived from the email once, at registration.
    hashed_password is a bcrypt hash; the plaintext is never stored.
    id is None before the record is written to the database.
    """

    name: str
    email: str
    hashed_password: str
    avatar: str = ""
    id: str | None = None
    date: str = ""  # ISO 8601, set by store on insert


@dataclass(frozen=True)
class Identity:
    """The verified caller, as decoded from an access token.

    The gate does not load the User record; tokens are stateless and the
    embedded id is all downstream handlers and ownership checks need.
    """

    id: str
