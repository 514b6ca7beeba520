from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Tuple

import pytest

from warden.memory import memory_store
from warden.models import ContactMethod, Invitation, User
from warden.services import build_services

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


class FixedClock:
    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class RecordingInvitationNotifier:
    def __init__(self, fail: bool = False):
        self.sent: List[Invitation] = []
        self.fail = fail

    async def send_invitation(self, invitation: Invitation) -> None:
        self.sent.append(invitation)
        if self.fail:
            raise RuntimeError("smtp down")


class RecordingContactNotifier:
    def __init__(self, fail: bool = False):
        self.added: List[Tuple[ContactMethod, User]] = []
        self.fail = fail

    async def notify_contact_added(self, contact: ContactMethod, user: User) -> None:
        self.added.append((contact, user))
        if self.fail:
            raise RuntimeError("sms gateway down")


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def store():
    return memory_store()


@pytest.fixture
def invitation_notifier():
    return RecordingInvitationNotifier()


@pytest.fixture
def contact_notifier():
    return RecordingContactNotifier()


@pytest.fixture
def make_services(store, clock, invitation_notifier, contact_notifier):
    """Services over the shared store; keyword overrides go to build_services."""

    def _make(**overrides):
        kwargs = dict(
            invitation_notifier=invitation_notifier,
            contact_notifier=contact_notifier,
            provisioning_policy="deny",
            ttl_hours=24,
            require_verified_email=True,
            trust_issuer_verification=True,
            clock=clock,
        )
        kwargs.update(overrides)
        return build_services(store, **kwargs)

    return _make


@pytest.fixture
def services(make_services):
    return make_services()
