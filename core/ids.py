"""
core/ids.py -- Document identities.

Every stored document and every embedded collection entry (experience,
education, like, comment) carries a 24-character lowercase hex id, the same
shape as a MongoDB ObjectId, so clients written against a document store see
familiar identifiers.
"""

import re
import secrets

_OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")


def new_object_id() -> str:
    return secrets.token_hex(12)


def is_object_id(value: str) -> bool:
    return bool(_OBJECT_ID_RE.match(value or ""))
