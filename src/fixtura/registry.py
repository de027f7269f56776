"""Factory registration, the shared default adapter and adapter discovery."""

import logging
from importlib.metadata import entry_points
from typing import Any, Callable

from fixtura.adapters.base import ModelAdapter
from fixtura.adapters.object import ObjectAdapter
from fixtura.config import FixturaConfig, load_config, set_config
from fixtura.factory import AttributesGenerator, Factory
from fixtura.sequences import sequences

logger = logging.getLogger(__name__)

ADAPTER_GROUP = "fixtura.adapters"

# Shared default adapter, read by factories defined without one
_adapter: ModelAdapter = ObjectAdapter()


def get_adapter() -> ModelAdapter:
    """Return the shared default adapter."""
    return _adapter


def set_adapter(adapter: ModelAdapter) -> None:
    """Replace the shared default adapter.

    Factories defined without an explicit adapter pick up the new adapter
    on their next build/create call.

    Args:
        adapter: Object implementing the ModelAdapter protocol.

    Raises:
        TypeError: If adapter does not implement build, save and get.
    """
    global _adapter

    if not isinstance(adapter, ModelAdapter):
        raise TypeError(
            f"{type(adapter).__name__} does not implement the ModelAdapter "
            "protocol (build, save, get)."
        )
    _adapter = adapter
    logger.info("Default adapter set to %s", type(adapter).__name__)


def define(
    model: Any,
    attributes: AttributesGenerator,
    adapter: ModelAdapter | None = None,
) -> Factory:
    """Define a factory for a model.

    Args:
        model: Model descriptor: a class, a pydantic model, a mapped ORM
            class, or any tag understood by the adapter.
        attributes: Generator of default attributes.
        adapter: Adapter pinned to this factory. If None, the shared
            default adapter at call time is used.

    Returns:
        A new Factory.
    """
    accessor: Callable[[], ModelAdapter]
    if adapter is not None:
        accessor = lambda: adapter  # noqa: E731
    else:
        accessor = get_adapter
    return Factory(attributes=attributes, model=model, adapter_accessor=accessor)


def sequence(name: str, mapper: Callable[[int], Any] | None = None) -> Any:
    """Advance a named sequence and return ``mapper(n)``.

    Example:
        define(dict, lambda: {"email": sequence("email", lambda n: f"u{n}@x.io")})
    """
    return sequences.next(name, mapper)


def clean_up() -> None:
    """Reset every sequence so numbering starts at 1 again."""
    sequences.reset()


def available_adapters() -> list[str]:
    """Return the names of all adapters registered via entry points."""
    return sorted(ep.name for ep in entry_points(group=ADAPTER_GROUP))


def adapter_available(name: str) -> bool:
    """Check if an adapter is registered under ``name``.

    Args:
        name: Adapter entry-point name, e.g. 'object' or 'pydantic'.

    Returns:
        True if an adapter entry point exists, False otherwise.
    """
    eps = entry_points(group=ADAPTER_GROUP)
    return any(ep.name == name for ep in eps)


def load_adapter(name: str) -> ModelAdapter:
    """Load and instantiate an adapter by entry-point name.

    Packages register adapters in pyproject.toml:

        [project.entry-points."fixtura.adapters"]
        mongo = "my_package.adapters:MongoAdapter"

    Args:
        name: Adapter entry-point name.

    Returns:
        An instantiated adapter.

    Raises:
        RuntimeError: If no adapter is registered under name, or it fails
            to import.
    """
    eps = entry_points(group=ADAPTER_GROUP)
    available = [ep.name for ep in eps]

    for ep in eps:
        if ep.name == name:
            try:
                adapter_cls = ep.load()
            except Exception as exc:
                raise RuntimeError(
                    f"Adapter '{name}' found but failed to import: {exc}. "
                    f"Check that its package is installed correctly."
                ) from exc
            return adapter_cls()

    available_str = ", ".join(sorted(available)) if available else "none"
    raise RuntimeError(
        f"No adapter found with name: {name}. "
        f"Available adapters: [{available_str}]."
    )


def configure(config: FixturaConfig | None = None) -> FixturaConfig:
    """Apply a configuration to the process.

    Loads the default adapter by name and makes the config active for
    settings read at call time (such as ``concurrent_many``).

    Args:
        config: Configuration to apply. Loaded from the environment if None.

    Returns:
        The applied configuration.

    Raises:
        RuntimeError: If the configured adapter cannot be loaded.
    """
    config = config or load_config()
    set_adapter(load_adapter(config.default_adapter))
    set_config(config)
    return config
