from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from ..errors import (
    EmailMismatch,
    EmailNotVerified,
    InvalidInputError,
    InvitationAlreadyAccepted,
    InvitationExpired,
    InvitationNotFound,
    InvitationNotRevocable,
    RoleNotFound,
    UserAlreadyExists,
)
from ..events.notifiers import InvitationNotifier
from ..locks import KeyedLock
from ..models import (
    Clock,
    ContactType,
    ExternalIdentityKey,
    Invitation,
    InvitationStatus,
    UserStatus,
    VerifiedClaims,
    normalize_email,
    utcnow,
)
from ..repositories import Store
from .contacts import ContactMethodService
from .identity import IdentityService
from .rbac import RbacService
from .users import UserService

log = logging.getLogger("warden.invitations")


class InvitationService:
    """
    Invitation lifecycle.

        PENDING --accept--> ACCEPTED
        PENDING --revoke--> REVOKED
        PENDING, now > expires_at  => treated as EXPIRED (never written)

    At most one PENDING invitation exists per normalized email: create() revokes
    the previous one before writing the new one, serialized per email.
    """

    def __init__(
        self,
        store: Store,
        *,
        users: UserService,
        identities: IdentityService,
        rbac: RbacService,
        contacts: ContactMethodService,
        notifier: InvitationNotifier,
        ttl_hours: int = 72,
        require_verified_email: bool = True,
        trust_issuer_verification: bool = True,
        clock: Clock = utcnow,
        locks: Optional[KeyedLock] = None,
    ):
        if ttl_hours <= 0:
            raise InvalidInputError("ttl_hours must be positive")
        self.store = store
        self.users = users
        self.identities = identities
        self.rbac = rbac
        self.contacts = contacts
        self.notifier = notifier
        self.ttl_hours = ttl_hours
        self.require_verified_email = require_verified_email
        self.trust_issuer_verification = trust_issuer_verification
        self.clock = clock
        self.locks = locks or KeyedLock()

    async def create(self, email: str, role_id: str, invited_by: str) -> Invitation:
        if not email or not email.strip():
            raise InvalidInputError("email must not be blank")
        normalized = normalize_email(email)

        async with self.locks.hold(normalized):
            if await self.store.contacts.find_by_type_and_value(ContactType.EMAIL, normalized) is not None:
                raise UserAlreadyExists(f"User already exists with email: {normalized}")
            if not await self.store.roles.exists(role_id):
                raise RoleNotFound(role_id)

            previous = await self.store.invitations.find_pending_by_email(normalized)
            if previous is not None:
                await self.store.invitations.save(previous.revoke())
                log.info("invitation auto-revoked invitation_id=%s email=%s", previous.id, normalized)

            invitation = Invitation.create(
                email=normalized,
                role_id=role_id,
                invited_by=invited_by,
                ttl_hours=self.ttl_hours,
                now=self.clock(),
            )
            invitation = await self.store.invitations.save(invitation)

        log.info(
            "invitation created invitation_id=%s email=%s role_id=%s invited_by=%s expires_at=%s",
            invitation.id,
            invitation.email,
            role_id,
            invited_by,
            invitation.expires_at.isoformat(),
        )
        await self._notify(invitation)
        return invitation

    async def accept(self, token: str, claims: VerifiedClaims) -> Invitation:
        """
        Redeem `token` for the caller described by `claims`.

        Checks run in a fixed order (found, not expired, still pending, email
        match, email verified) before anything is written. The writes that
        follow (user, identity link, role, contact, invitation) are sequential;
        a failure part way leaves the earlier ones in place.
        """
        invitation = await self.store.invitations.find_by_token(token)
        if invitation is None:
            raise InvitationNotFound("Invitation not found for token")

        # same key as create(): a redeem never interleaves with a re-invite or a second redeem
        async with self.locks.hold(invitation.email):
            return await self._accept_locked(token, claims)

    async def _accept_locked(self, token: str, claims: VerifiedClaims) -> Invitation:
        invitation = await self.store.invitations.find_by_token(token)
        if invitation is None:
            raise InvitationNotFound("Invitation not found for token")

        now = self.clock()
        if invitation.is_expired(now):
            raise InvitationExpired(f"Invitation has expired for email: {invitation.email}")
        if invitation.status != InvitationStatus.PENDING:
            verb = "accepted" if invitation.status == InvitationStatus.ACCEPTED else "revoked"
            raise InvitationAlreadyAccepted(
                f"Invitation has already been {verb} for email: {invitation.email}",
                status=invitation.status.value,
            )

        claimed = normalize_email(claims.email) if claims.email else None
        if claimed != invitation.email:
            raise EmailMismatch(f"Token email ({claims.email}) does not match invitation email ({invitation.email})")
        if self.require_verified_email and not claims.email_verified:
            raise EmailNotVerified(f"Email not verified for: {invitation.email}")
        # blank issuer/subject must fail before any write
        key = ExternalIdentityKey.of(claims.issuer, claims.subject)

        user = await self.users.create_user(UserStatus.ACTIVE)
        await self.identities.link_external_identity(user.id, key.issuer, key.subject)
        await self.rbac.assign_role_to_user(user.id, invitation.role_id)
        if self.trust_issuer_verification and claims.email_verified:
            await self.contacts.create_verified(user.id, ContactType.EMAIL, invitation.email)
        else:
            await self.contacts.create_unverified(user.id, ContactType.EMAIL, invitation.email)

        accepted = await self.store.invitations.save(invitation.accept(now))
        log.info(
            "invitation accepted invitation_id=%s user_id=%s issuer=%s subject=%s",
            accepted.id,
            user.id,
            claims.issuer,
            claims.subject,
        )
        return accepted

    async def revoke(self, invitation_id: str) -> Invitation:
        invitation = await self.store.invitations.get(invitation_id)
        if invitation is None:
            raise InvitationNotFound(f"Invitation not found with id: {invitation_id}")
        async with self.locks.hold(invitation.email):
            invitation = await self.store.invitations.get(invitation_id) or invitation
            if invitation.status == InvitationStatus.ACCEPTED:
                raise InvitationNotRevocable(f"Invitation {invitation_id} has already been accepted")
            revoked = await self.store.invitations.save(invitation.revoke())
        log.info("invitation revoked invitation_id=%s email=%s", invitation_id, invitation.email)
        return revoked

    async def list(
        self,
        status: Optional[InvitationStatus] = None,
        since: Optional[datetime] = None,
    ) -> List[Invitation]:
        return await self.store.invitations.list(status=status, since=since)

    async def find_by_token(self, token: str) -> Optional[Invitation]:
        return await self.store.invitations.find_by_token(token)

    async def get(self, invitation_id: str) -> Optional[Invitation]:
        return await self.store.invitations.get(invitation_id)

    async def _notify(self, invitation: Invitation) -> None:
        try:
            await self.notifier.send_invitation(invitation)
        except Exception:
            log.exception("invitation notification failed invitation_id=%s", invitation.id)
