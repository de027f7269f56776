"""Adapter for pydantic models kept in an in-memory store."""

import itertools
import logging
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class PydanticAdapter:
    """Build pydantic models and "persist" them in memory.

    Building validates the merged attributes with ``model_validate`` so nested
    dicts become nested models. Saving assigns an auto-increment ``id`` when
    the model declares an ``id`` field that is still ``None``.
    """

    def __init__(self) -> None:
        self.store: dict[type[BaseModel], list[BaseModel]] = {}
        self._ids: dict[type[BaseModel], itertools.count] = {}

    def build(self, model: type[BaseModel], attributes: dict[str, Any]) -> BaseModel:
        return model.model_validate(attributes)

    async def save(self, instance: BaseModel, model: type[BaseModel]) -> BaseModel:
        if "id" in type(instance).model_fields and getattr(instance, "id") is None:
            counter = self._ids.setdefault(model, itertools.count(1))
            instance = instance.model_copy(update={"id": next(counter)})
        self.store.setdefault(model, []).append(instance)
        logger.debug(
            "Stored %s (%d in store)", model.__name__, len(self.store[model])
        )
        return instance

    def get(self, instance: BaseModel, key: str) -> Any:
        return getattr(instance, key)

    def clear(self) -> None:
        """Drop every stored instance and restart id numbering."""
        self.store.clear()
        self._ids.clear()
