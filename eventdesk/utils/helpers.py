import re
from datetime import datetime, timezone
from typing import Optional

OBJECT_ID_RE = re.compile(r"^[0-9a-fA-F]{24}$")

def utcnow() -> datetime:
    # Mongo hands back naive UTC datetimes, so everything is compared naive
    return datetime.now(timezone.utc).replace(tzinfo=None)

def as_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)

def is_object_id(value) -> bool:
    return isinstance(value, str) and bool(OBJECT_ID_RE.match(value))

def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "event"

def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
