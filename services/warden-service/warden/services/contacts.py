from __future__ import annotations

import logging
from typing import List, Optional

from ..errors import ContactMethodNotFound, InvalidInputError, UserNotFound
from ..events.notifiers import ContactConfirmationNotifier
from ..models import Clock, ContactMethod, ContactType, User, normalize_contact, utcnow
from ..repositories import Store

log = logging.getLogger("warden.contacts")


class ContactMethodService:
    def __init__(
        self,
        store: Store,
        *,
        notifier: Optional[ContactConfirmationNotifier] = None,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.notifier = notifier
        self.clock = clock

    async def create_unverified(self, user_id: str, type: ContactType, value: str) -> ContactMethod:
        return await self._create(user_id, type, value, verified=False)

    async def create_verified(self, user_id: str, type: ContactType, value: str) -> ContactMethod:
        return await self._create(user_id, type, value, verified=True)

    async def mark_verified(self, contact_id: str) -> ContactMethod:
        contact = await self.store.contacts.get(contact_id)
        if contact is None:
            raise ContactMethodNotFound(contact_id)
        if contact.verified:
            return contact
        verified = await self.store.contacts.save(contact.mark_verified(self.clock()))
        log.info("contact verified contact_id=%s user_id=%s", contact_id, contact.user_id)
        return verified

    async def get(self, contact_id: str) -> Optional[ContactMethod]:
        return await self.store.contacts.get(contact_id)

    async def find_by_user(self, user_id: str) -> List[ContactMethod]:
        return await self.store.contacts.find_by_user(user_id)

    async def find_by_user_and_type(self, user_id: str, type: ContactType) -> Optional[ContactMethod]:
        """Oldest contact of that type, if any."""
        return next((c for c in await self.store.contacts.find_by_user(user_id) if c.type == type), None)

    async def find_by_type_and_value(self, type: ContactType, value: str) -> Optional[ContactMethod]:
        return await self.store.contacts.find_by_type_and_value(type, normalize_contact(value, type))

    async def delete(self, contact_id: str) -> None:
        if not await self.store.contacts.delete(contact_id):
            raise ContactMethodNotFound(contact_id)
        log.info("contact deleted contact_id=%s", contact_id)

    async def _create(self, user_id: str, type: ContactType, value: str, *, verified: bool) -> ContactMethod:
        if not value or not value.strip():
            raise InvalidInputError("contact value must not be blank")
        user = await self.store.users.get(user_id)
        if user is None:
            raise UserNotFound(user_id)

        contact = ContactMethod.create(user_id, type, value, verified=verified, now=self.clock())
        contact = await self.store.contacts.save(contact)
        log.info(
            "contact added contact_id=%s user_id=%s type=%s verified=%s",
            contact.id,
            user_id,
            type.value,
            verified,
        )
        await self._notify(contact, user)
        return contact

    async def _notify(self, contact: ContactMethod, user: User) -> None:
        if self.notifier is None:
            return
        try:
            await self.notifier.notify_contact_added(contact, user)
        except Exception:
            # delivery is best effort; the contact is already stored
            log.exception("contact notification failed contact_id=%s user_id=%s", contact.id, user.id)
