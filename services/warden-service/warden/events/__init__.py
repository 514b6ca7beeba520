from __future__ import annotations

from enum import Enum

SERVICE = "warden"


class Event(str, Enum):
    INVITATION_CREATED = "invitation.created"
    CONTACT_ADDED = "contact.added"


def rk(org: str, event: Event | str, version: str = "v1") -> str:
    """
    Versioned routing key: <org>.warden.<event>.<version>

        rk("acme", Event.INVITATION_CREATED) -> "acme.warden.invitation.created.v1"
    """
    ev = event.value if isinstance(event, Event) else str(event)
    return f"{org}.{SERVICE}.{ev}.{version}"
