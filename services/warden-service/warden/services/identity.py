from __future__ import annotations

import logging
from typing import List

from ..errors import IdentityAlreadyLinked, IdentityNotFound, UserNotFound
from ..models import ExternalIdentity, ExternalIdentityKey
from ..repositories import Store

log = logging.getLogger("warden.identity")


class IdentityService:
    def __init__(self, store: Store):
        self.store = store

    async def link_external_identity(self, user_id: str, issuer: str, subject: str) -> ExternalIdentity:
        """
        Bind (issuer, subject) to user_id.

        Re-linking a pair the user already owns returns the existing link. A pair
        owned by someone else raises IdentityAlreadyLinked, including when two
        callers race for the same fresh pair (the repository insert decides).
        """
        key = ExternalIdentityKey.of(issuer, subject)
        if not await self.store.users.exists(user_id):
            raise UserNotFound(user_id)

        existing = await self.store.identities.find_by_issuer_and_subject(key.issuer, key.subject)
        if existing is not None:
            if existing.user_id == user_id:
                return existing
            raise IdentityAlreadyLinked(key.issuer, key.subject, existing.user_id)

        try:
            identity = await self.store.identities.insert(ExternalIdentity.create(user_id, key))
        except IdentityAlreadyLinked as e:
            if e.user_id != user_id:
                raise
            # lost a race against a concurrent link of the same pair to this user
            return await self.store.identities.find_by_issuer_and_subject(key.issuer, key.subject)
        log.info("identity linked user_id=%s issuer=%s subject=%s", user_id, key.issuer, key.subject)
        return identity

    async def unlink_external_identity(self, user_id: str, identity_id: str) -> None:
        if not await self.store.users.exists(user_id):
            raise UserNotFound(user_id)
        identity = await self.store.identities.get(identity_id)
        if identity is None or identity.user_id != user_id:
            raise IdentityNotFound(f"External identity {identity_id} is not linked to user {user_id}")
        await self.store.identities.delete(identity_id)
        log.info("identity unlinked user_id=%s issuer=%s subject=%s", user_id, identity.issuer, identity.subject)

    async def identities_for_user(self, user_id: str) -> List[ExternalIdentity]:
        return await self.store.identities.find_by_user(user_id)
