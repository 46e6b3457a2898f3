import re
import secrets

_OBJECT_ID_RE = re.compile(r"^[0-9a-f]{24}$")


def new_object_id() -> str:
    """Generate an opaque 24 hex character identifier."""
    return secrets.token_hex(12)


def is_valid_object_id(value) -> bool:
    return isinstance(value, str) and bool(_OBJECT_ID_RE.match(value))
