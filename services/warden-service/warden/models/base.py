from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable

from pydantic import BaseModel, ConfigDict

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


def as_utc(value: datetime) -> datetime:
    """Mongo hands back naive datetimes; everything here compares in aware UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class WardenDoc(BaseModel):
    """
    Base for stored documents.

    `id` is serialized as `_id` (by_alias=True) so a dump can be written to Mongo as-is.
    """
    model_config = ConfigDict(populate_by_name=True)
