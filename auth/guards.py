"""
auth/guards.py -- Authorization checks applied inside route handlers.

require_owner() is the ownership guard: after a handler has loaded a post
or comment, it confirms the verified caller is the recorded owner. Profile
experience/education mutations need no explicit check because they only
ever load the profile keyed by the caller's own id.

require_object_id() rejects malformed path identifiers before any lookup.
"""

from auth.models import Identity
from core.errors import Forbidden, InvalidInput
from core.ids import is_object_id


def require_owner(owner_id: str, identity: Identity, msg: str = "User not authorized") -> None:
    """Raise Forbidden unless identity owns the resource."""
    if str(owner_id) != str(identity.id):
        raise Forbidden(msg)


def require_object_id(*values: str) -> None:
    for value in values:
        if not is_object_id(value):
            raise InvalidInput("Invalid ID")
