"""Adapters and helpers for testing code that uses fixtura."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

from fixtura import config as config_mod
from fixtura import registry
from fixtura.sequences import sequences


class RecordingAdapter:
    """In-memory dict adapter that records every build and save.

    Saving assigns an incremental ``id`` unless the record already has one.
    """

    def __init__(self) -> None:
        self.built: list[tuple[Any, dict[str, Any]]] = []
        self.saved: list[dict[str, Any]] = []
        self._last_id = 0

    @property
    def build_count(self) -> int:
        return len(self.built)

    @property
    def save_count(self) -> int:
        return len(self.saved)

    def build(self, model: Any, attributes: dict[str, Any]) -> dict[str, Any]:
        record = dict(attributes)
        self.built.append((model, record))
        return record

    async def save(self, instance: dict[str, Any], model: Any) -> dict[str, Any]:
        if instance.get("id") is None:
            self._last_id += 1
            instance = {**instance, "id": self._last_id}
        self.saved.append(instance)
        return instance

    def get(self, instance: dict[str, Any], key: str) -> Any:
        return instance[key]


def create_mock_adapter(
    build: Callable[..., Any] | None = None,
    save: Callable[..., Any] | None = None,
    get: Callable[..., Any] | None = None,
) -> MagicMock:
    """Create a mock ModelAdapter with dict semantics.

    Args:
        build: Side effect for build(model, attributes). Defaults to dict copy.
        save: Side effect for the async save(instance, model). Defaults to
            returning the instance.
        get: Side effect for get(instance, key). Defaults to item access.

    Returns:
        MagicMock with the ModelAdapter interface; save is an AsyncMock.
    """
    mock = MagicMock()
    mock.build.side_effect = build or (lambda model, attributes: dict(attributes))
    mock.save = AsyncMock(side_effect=save or (lambda instance, model: instance))
    mock.get.side_effect = get or (lambda instance, key: instance[key])
    return mock


@contextmanager
def isolated_state() -> Iterator[None]:
    """Reset sequences and restore the default adapter and config on exit."""
    adapter = registry.get_adapter()
    config = config_mod._config
    sequences.reset()
    try:
        yield
    finally:
        sequences.reset()
        registry.set_adapter(adapter)
        config_mod.set_config(config)
