from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Type, TypeVar, Union

from pydantic import BaseModel

from ..errors import InvalidInputError, UserNotFound
from ..models import UserPreferences
from ..repositories import Store

log = logging.getLogger("warden.preferences")

M = TypeVar("M", bound=BaseModel)
Layer = Union[Mapping[str, Any], BaseModel]


def merge_layers(layers: Sequence[Any]) -> Optional[Dict[str, Any]]:
    """
    Deep-merge JSON-like documents, later layers winning.

    - no layers -> None
    - a None value in a later layer never overwrites
    - dict onto dict merges recursively; anything else (lists included) replaces
    - later layers that are not dicts are ignored
    The first layer must be a dict; it is copied, never mutated.
    """
    if not layers:
        return None
    first = layers[0]
    if not isinstance(first, Mapping):
        raise InvalidInputError(f"first preference layer must be an object, got {type(first).__name__}")
    result = copy.deepcopy(dict(first))
    for layer in layers[1:]:
        if isinstance(layer, Mapping):
            _merge_into(result, layer)
    return result


def _merge_into(target: Dict[str, Any], incoming: Mapping[str, Any]) -> None:
    for key, value in incoming.items():
        if value is None:
            continue
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            _merge_into(current, value)
        else:
            target[key] = copy.deepcopy(value)


def _as_document(layer: Any) -> Any:
    if isinstance(layer, BaseModel):
        return layer.model_dump(mode="json")
    return layer


class PreferencesService:
    def __init__(self, store: Store):
        self.store = store

    async def get_preferences(
        self,
        user_id: str,
        namespace: str,
        model: Optional[Type[M]] = None,
    ) -> Union[Dict[str, Any], M]:
        """Stored document for (user, namespace); {} (all defaults) when nothing is stored."""
        stored = await self.store.preferences.find(user_id, namespace)
        data = copy.deepcopy(stored.data) if stored else {}
        if model is not None:
            return model.model_validate(data)
        return data

    async def set_preferences(self, user_id: str, namespace: str, preferences: Layer) -> UserPreferences:
        if not namespace or not namespace.strip():
            raise InvalidInputError("namespace must not be blank")
        if not await self.store.users.exists(user_id):
            raise UserNotFound(user_id)

        data = _as_document(preferences)
        if not isinstance(data, Mapping):
            raise InvalidInputError("preferences must be an object")
        data = copy.deepcopy(dict(data))
        existing = await self.store.preferences.find(user_id, namespace)
        record = existing.with_data(data) if existing else UserPreferences.create(user_id, namespace, data)
        saved = await self.store.preferences.save(record)
        log.info("preferences saved user_id=%s namespace=%s", user_id, namespace)
        return saved

    def merge_preferences(self, *layers: Layer, model: Optional[Type[M]] = None) -> Union[None, Dict[str, Any], M]:
        merged = merge_layers([_as_document(layer) for layer in layers])
        if merged is None or model is None:
            return merged
        return model.model_validate(merged)
