# feedbackhub/identity.py
"""Id and timestamp minting for stored rows."""
import uuid
from datetime import datetime, timezone


def new_id() -> str:
    return str(uuid.uuid4())


def utc_now_iso() -> str:
    # Fixed microsecond width keeps the text sortable in time order
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")
