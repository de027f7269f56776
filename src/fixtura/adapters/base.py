"""Adapter protocol between factories and persistence back-ends."""

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ModelAdapter(Protocol):
    """Interface that each persistence back-end implements.

    Factories never talk to a model class or a database directly; they hand
    the merged attribute tree to an adapter. Any of the three methods may be a
    coroutine function or a plain function; factories and associations await
    results that are awaitable.
    """

    def build(self, model: Any, attributes: dict[str, Any]) -> Any:
        """Construct an in-memory instance. Must not perform I/O.

        Args:
            model: The model descriptor the factory was defined with.
            attributes: Fully resolved and merged attribute tree.

        Returns:
            The built instance, or an awaitable resolving to it.
        """
        ...

    def save(self, instance: Any, model: Any) -> Any:
        """Persist an instance built by :meth:`build`.

        Args:
            instance: The built instance.
            model: The model descriptor the factory was defined with.

        Returns:
            The persisted instance (e.g. with its id populated), or an
            awaitable resolving to it.
        """
        ...

    def get(self, instance: Any, key: str) -> Any:
        """Read a named field off a built or saved instance.

        Args:
            instance: The instance to read from.
            key: Field name.

        Returns:
            The field value, or an awaitable resolving to it.
        """
        ...
