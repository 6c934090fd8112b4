"""Cache key helpers (Redis)."""

from __future__ import annotations

import hashlib
from uuid import UUID


def view_seen_key(session_id: str, project_id: UUID | str) -> str:
    # session ids are client supplied, so hash them to a fixed-size key
    session_hash = hashlib.sha256(session_id.encode("utf-8")).hexdigest()[:32]
    return f"views:seen:{session_hash}:{project_id}"
