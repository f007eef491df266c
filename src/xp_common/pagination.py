"""Opaque cursor pagination over time-ordered string IDs."""

import base64
import json


def cursor_encode(last_id: str) -> str:
    """Encode the last seen ID into an opaque Base64 cursor string."""
    payload = json.dumps({"id": last_id})
    return base64.urlsafe_b64encode(payload.encode()).decode()


def cursor_decode(cursor: str | None) -> str | None:
    """Decode a cursor back to the last seen ID. Returns None on garbage."""
    if not cursor:
        return None
    try:
        payload = json.loads(base64.urlsafe_b64decode(cursor.encode()).decode())
        return str(payload["id"])
    except (ValueError, KeyError, TypeError):
        return None
