"""
Identifier Generation

Two kinds of ids exist in the system:
- opaque random ids for new entities (committees, members, payments, ...)
- deterministic notification keys derived from an event's natural key,
  used for both insertion and duplicate checks
"""

import hashlib
from uuid import uuid4

from committee_manager.models.notification import NotificationType


def generate_id() -> str:
    """Opaque unique id for a new entity."""
    return uuid4().hex[:12]


def notification_key(notification_type: NotificationType, *parts: object) -> str:
    """
    Deterministic key for a notification.

    The same type and natural-key parts always produce the same key.
    Decimal amounts should be normalized by the caller so that
    1000 and 1000.00 produce one key.
    """
    raw = "|".join([notification_type.value, *(str(part) for part in parts)])
    digest = hashlib.sha1(raw.encode("utf-8")).hexdigest()[:16]
    return f"{notification_type.value}:{digest}"
