from __future__ import annotations

from typing import Any, Dict

from pydantic import Field

from .base import WardenDoc, new_id


class UserPreferences(WardenDoc):
    """
    Stored in MongoDB.

    One document per (user_id, namespace); `data` is replaced wholesale on update.
    """
    id: str = Field(alias="_id")
    user_id: str
    namespace: str
    data: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def create(cls, user_id: str, namespace: str, data: Dict[str, Any]) -> "UserPreferences":
        return cls(id=new_id(), user_id=user_id, namespace=namespace, data=data)

    def with_data(self, data: Dict[str, Any]) -> "UserPreferences":
        return self.model_copy(update={"data": data})
