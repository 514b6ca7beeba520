from __future__ import annotations

import logging
from typing import Protocol

from ..models import ContactMethod, Invitation, User
from . import Event
from .rabbit import RabbitPublisher

log = logging.getLogger("warden.notify")


class InvitationNotifier(Protocol):
    async def send_invitation(self, invitation: Invitation) -> None: ...


class ContactConfirmationNotifier(Protocol):
    async def notify_contact_added(self, contact: ContactMethod, user: User) -> None: ...


def acceptance_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/invitations/accept/{token}"


class LoggingInvitationNotifier:
    """Writes the acceptance link to the service log instead of mailing it."""

    def __init__(self, base_url: str):
        self.base_url = base_url

    async def send_invitation(self, invitation: Invitation) -> None:
        log.info(
            "invitation notice to=%s role_id=%s expires_at=%s accept_url=%s",
            invitation.email,
            invitation.role_id,
            invitation.expires_at.isoformat(),
            acceptance_url(self.base_url, invitation.token),
        )


class NoOpContactConfirmationNotifier:
    async def notify_contact_added(self, contact: ContactMethod, user: User) -> None:
        log.debug("contact added, no notification sent user_id=%s type=%s", user.id, contact.type.value)


class RabbitInvitationNotifier:
    def __init__(self, publisher: RabbitPublisher, base_url: str):
        self.publisher = publisher
        self.base_url = base_url

    async def send_invitation(self, invitation: Invitation) -> None:
        payload = invitation.model_dump(mode="json")
        payload["accept_url"] = acceptance_url(self.base_url, invitation.token)
        await self.publisher.publish_v1(Event.INVITATION_CREATED, payload)


class RabbitContactNotifier:
    def __init__(self, publisher: RabbitPublisher):
        self.publisher = publisher

    async def notify_contact_added(self, contact: ContactMethod, user: User) -> None:
        await self.publisher.publish_v1(
            Event.CONTACT_ADDED,
            {"contact": contact.model_dump(mode="json"), "user_id": user.id, "user_status": user.status.value},
        )
