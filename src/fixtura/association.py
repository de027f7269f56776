"""Deferred references from one factory's attributes to another factory.

An ``Association`` is a placeholder value placed inside an attribute tree.
The owning factory resolves it while building or creating, so the referenced
record is only produced when (and if) it is actually needed.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from fixtura.factory import Factory

logger = logging.getLogger(__name__)

Mode = Literal["build", "create"]

MODES: tuple[str, ...] = ("build", "create")


def is_association(value: Any) -> bool:
    """Return True if ``value`` is an association placeholder."""
    return isinstance(value, Association)


def validate_count(count: Any) -> int:
    """Check that ``count`` is a usable number of instances.

    Raises:
        ValueError: If count is not a non-negative integer.
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise ValueError(f"Count must be a non-negative integer, got {count!r}.")
    return count


def validate_mode(mode: str) -> str:
    """Check that ``mode`` names a resolution path.

    Raises:
        ValueError: If mode is neither 'build' nor 'create'.
    """
    if mode not in MODES:
        raise ValueError(f"Invalid mode '{mode}'. Must be one of: {', '.join(MODES)}")
    return mode


class Association:
    """Lazy, memoized reference to the output of another factory.

    Build and create results are cached independently. Associations derived
    with :meth:`get` or :meth:`with_count` share the cache of the association
    they came from, so reading several fields of one associated record never
    produces more than one record.

    Args:
        factory: Factory that produces the associated record.
        key: Field to read off the resolved record. None returns the record.
        override: Attributes passed to the factory when resolving.
        transient_params: Transient params passed to the factory.
        count: Number of records. None means a single record.
    """

    def __init__(
        self,
        factory: Factory,
        key: str | None = None,
        override: Any = None,
        transient_params: Any = None,
        count: int | None = None,
        _cache: dict[tuple[str, int | None], asyncio.Future] | None = None,
    ) -> None:
        if count is not None:
            validate_count(count)
        self.factory = factory
        self.key = key
        self.override = override
        self.transient_params = transient_params
        self.count = count
        self._cache = {} if _cache is None else _cache

    def __repr__(self) -> str:
        return (
            f"Association(model={self.factory.model!r}, key={self.key!r}, "
            f"count={self.count!r})"
        )

    def _derive(self, **changes: Any) -> Association:
        fields = {
            "key": self.key,
            "override": self.override,
            "transient_params": self.transient_params,
            "count": self.count,
        }
        fields.update(changes)
        return Association(self.factory, _cache=self._cache, **fields)

    def get(self, key: str) -> Association:
        """Scope this association to a single field.

        The returned association shares this one's pending or cached
        resolution.

        Args:
            key: Field to read off the resolved record(s).

        Returns:
            A new Association bound to the same resolution.
        """
        return self._derive(key=key)

    def with_count(self, count: int) -> Association:
        """Return an association that resolves to ``count`` records."""
        return self._derive(count=validate_count(count))

    async def build(self) -> Any:
        """Build the associated record once and return it (or its field)."""
        return await self._narrow(await self._resolve_once("build", None))

    async def create(self) -> Any:
        """Create the associated record once and return it (or its field)."""
        return await self._narrow(await self._resolve_once("create", None))

    async def build_many(self) -> list[Any]:
        """Build ``count`` associated records once and return them."""
        records = await self._resolve_once("build", self._many_count())
        return [await self._narrow(record) for record in records]

    async def create_many(self) -> list[Any]:
        """Create ``count`` associated records once and return them."""
        records = await self._resolve_once("create", self._many_count())
        return [await self._narrow(record) for record in records]

    async def resolve(self, mode: Mode) -> Any:
        """Resolve through the build or create path.

        Args:
            mode: 'build' or 'create'.

        Returns:
            A single value, or a list when a count is set.

        Raises:
            ValueError: If mode is invalid.
        """
        validate_mode(mode)
        if self.count is None:
            return await (self.build() if mode == "build" else self.create())
        return await (self.build_many() if mode == "build" else self.create_many())

    def _many_count(self) -> int:
        return 1 if self.count is None else self.count

    async def _narrow(self, record: Any) -> Any:
        if self.key is None:
            return record
        value = self.factory.adapter.get(record, self.key)
        if inspect.isawaitable(value):
            return await value
        return value

    async def _resolve_once(self, mode: str, count: int | None) -> Any:
        cache_key = (mode, count)
        future = self._cache.get(cache_key)
        if future is None:
            logger.debug(
                "Resolving association to %r via %s (count=%s)",
                self.factory.model,
                mode,
                count,
            )
            future = asyncio.ensure_future(self._invoke(mode, count))
            self._cache[cache_key] = future
        try:
            return await future
        except BaseException:
            # Failed resolutions are not cached.
            if self._cache.get(cache_key) is future:
                del self._cache[cache_key]
            raise

    async def _invoke(self, mode: str, count: int | None) -> Any:
        if count is None:
            if mode == "build":
                return await self.factory.build(self.override, self.transient_params)
            return await self.factory.create(self.override, self.transient_params)
        if mode == "build":
            return await self.factory.build_many(
                count, self.override, self.transient_params
            )
        return await self.factory.create_many(
            count, self.override, self.transient_params
        )
