from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional, Type, TypeVar

from pydantic import BaseModel

M = TypeVar("M", bound=BaseModel)


def to_doc(model: BaseModel) -> Dict[str, Any]:
    """Model -> Mongo document (`id` stored as `_id`, enums as their string value)."""
    doc = model.model_dump(by_alias=True)
    return {k: (v.value if isinstance(v, Enum) else v) for k, v in doc.items()}


def from_doc(model_type: Type[M], doc: Optional[Dict[str, Any]]) -> Optional[M]:
    if not doc:
        return None
    return model_type.model_validate(doc)
