"""In-memory adapter for plain dicts, dataclasses and simple classes."""

from collections.abc import Mapping
from typing import Any


class ObjectAdapter:
    """Default adapter that keeps nothing.

    A ``None``, ``dict`` or string model descriptor is a type witness only and
    yields a new dict. Any other class is instantiated with the attributes as
    keyword arguments. Saving returns the instance unchanged; use
    ``fixtura.testing.RecordingAdapter`` to inspect what was saved.
    """

    def build(self, model: Any, attributes: dict[str, Any]) -> Any:
        if model is None or model is dict or isinstance(model, str):
            return dict(attributes)
        return model(**attributes)

    async def save(self, instance: Any, model: Any) -> Any:
        return instance

    def get(self, instance: Any, key: str) -> Any:
        if isinstance(instance, Mapping):
            return instance[key]
        return getattr(instance, key)
