"""ID generation and timestamp utilities."""

import random
import re
import string
import time
import uuid
from datetime import datetime, timezone

_BASE36 = string.digits + string.ascii_lowercase
_QUERY_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def _epoch_ms() -> int:
    return int(time.time() * 1000)


def generate_request_id(kind: str) -> str:
    """Generate a per-call request ID, e.g. ``ask_ai_1718000000000_k3j9x0a1b``.

    Unique per call, not per kind: two calls of the same kind in the same
    millisecond still differ in the random suffix.
    """
    suffix = "".join(random.choices(_BASE36, k=9))
    return f"{kind}_{_epoch_ms()}_{suffix}"


def generate_query_id() -> str:
    """Generate a saved query ID (32-char hex UUID4)."""
    return uuid.uuid4().hex


def is_valid_query_id(query_id: str) -> bool:
    """True if *query_id* has the shape produced by generate_query_id()."""
    return bool(_QUERY_ID_RE.match(query_id))


def generate_edge_id(source: str, target: str) -> str:
    """Generate an ID for a user-drawn edge."""
    return f"e{source}-{target}-{_epoch_ms()}"


def generate_history_id() -> str:
    """Generate a run history entry ID (UUID4)."""
    return str(uuid.uuid4())


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
