"""Factories: default attributes, association resolution and hook pipelines.

A ``Factory`` is an immutable value. Every method that customises it
(``extend``, ``extend_params``, ``after_build``, ``after_create``, ``mutate``)
returns a new factory and leaves the original untouched.
"""

from __future__ import annotations

import asyncio
import dataclasses
import inspect
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from fixtura.adapters.base import ModelAdapter
from fixtura.association import (
    Association,
    Mode,
    is_association,
    validate_count,
    validate_mode,
)
from fixtura.config import get_config
from fixtura.merge import merge_deep

logger = logging.getLogger(__name__)

AttributesGenerator = Callable[..., Any]
Hook = Callable[..., Any]


@dataclass(frozen=True)
class AttributesContext:
    """Context passed to attribute generators.

    Attributes:
        transient_params: Caller-supplied values that steer default
            attributes but are not part of the built record.
    """

    transient_params: Any = None


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _positional_arity(func: Callable[..., Any]) -> int | None:
    """Count the positional parameters of ``func``. None means unbounded."""
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return None
    count = 0
    for param in signature.parameters.values():
        if param.kind is param.VAR_POSITIONAL:
            return None
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            count += 1
    return count


def _call(func: Callable[..., Any], *args: Any) -> Any:
    """Call ``func`` with as many leading ``args`` as it accepts.

    Lets generators skip the context argument and after-create hooks skip
    the adapter argument.
    """
    arity = _positional_arity(func)
    if arity is not None:
        args = args[:arity]
    return func(*args)


def _replaced_keys(override: Mapping[str, Any] | None) -> frozenset[str]:
    """Keys whose override value fully replaces the default value."""
    if not override:
        return frozenset()
    return frozenset(
        key
        for key, value in override.items()
        if not isinstance(value, (Mapping, list))
    )


def _absorbed_keys(
    defaults: Mapping[str, Any], override: Mapping[str, Any] | None
) -> frozenset[str]:
    """Keys whose mapping override is folded into a single-record association.

    The override is handed to the associated factory instead of being merged
    over its result, so it works for any record type, not only dicts.
    """
    if not override:
        return frozenset()
    return frozenset(
        key
        for key, value in override.items()
        if isinstance(value, Mapping)
        and not is_association(value)
        and is_association(defaults.get(key))
        and defaults[key].key is None
        and defaults[key].count is None
    )


def _fold_override(association: Association, extra: Mapping[str, Any]) -> Association:
    return Association(
        association.factory,
        override=merge_deep(association.override, extra),
        transient_params=association.transient_params,
    )


def _partials_for(count: int, partials: Any) -> list[Any]:
    if isinstance(partials, (list, tuple)):
        return [partials[i] if i < len(partials) else None for i in range(count)]
    return [partials] * count


async def _resolve_values(
    attributes: Mapping[str, Any],
    mode: Mode,
    skip: frozenset[str] = frozenset(),
) -> dict[str, Any]:
    """Replace top-level associations with their resolved values.

    Nested mappings are copied through as-is and never scanned.
    """
    resolved: dict[str, Any] = {}
    for key, value in attributes.items():
        if is_association(value) and key not in skip:
            resolved[key] = await value.resolve(mode)
        else:
            resolved[key] = value
    return resolved


@dataclass(frozen=True)
class Factory:
    """Produces built or persisted fixtures for one model.

    Args:
        attributes: Generator of default attributes. Called with an
            AttributesContext (or with no arguments if it takes none); may be
            sync or async.
        model: Model descriptor handed to the adapter.
        adapter_accessor: Zero-argument callable returning the adapter,
            evaluated on every build/create.
        after_build_hooks: Hooks applied to built instances, in order.
        after_create_hooks: Hooks applied to created instances, in order.
    """

    attributes: AttributesGenerator
    model: Any
    adapter_accessor: Callable[[], ModelAdapter]
    after_build_hooks: tuple[Hook, ...] = ()
    after_create_hooks: tuple[Hook, ...] = ()

    @property
    def adapter(self) -> ModelAdapter:
        """The adapter in effect right now."""
        return self.adapter_accessor()

    # ------------------------------------------------------------------
    # Attribute resolution
    # ------------------------------------------------------------------

    async def resolve_associations(
        self,
        mode: Mode,
        transient_params: Any = None,
        override: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Generate default attributes and resolve their associations.

        Only top-level association values are resolved. Keys that
        ``override`` replaces with a non-mapping, non-list value are left
        unresolved, since the override discards them anyway. A mapping
        override for a single, un-keyed association is passed to the
        associated factory as part of its own override.

        Args:
            mode: 'build' or 'create'; selects the association path.
            transient_params: Passed to the attributes generator.
            override: Caller overrides, used to skip replaced keys and to
                extend association overrides.

        Returns:
            Default attributes with associations replaced by their values.

        Raises:
            ValueError: If mode is invalid.
        """
        resolved, _ = await self._resolve_defaults(mode, transient_params, override)
        return resolved

    async def _resolve_defaults(
        self,
        mode: Mode,
        transient_params: Any,
        override: Mapping[str, Any] | None,
    ) -> tuple[dict[str, Any], frozenset[str]]:
        validate_mode(mode)
        context = AttributesContext(transient_params=transient_params)
        defaults = dict(await _maybe_await(_call(self.attributes, context)))
        absorbed = _absorbed_keys(defaults, override)
        for key in absorbed:
            defaults[key] = _fold_override(defaults[key], override[key])
        resolved = await _resolve_values(defaults, mode, _replaced_keys(override))
        return resolved, absorbed

    async def attributes_for(
        self,
        override: Mapping[str, Any] | None = None,
        transient_params: Any = None,
        mode: Mode = "build",
    ) -> dict[str, Any]:
        """Return the final attribute tree without building an instance.

        Associations supplied through ``override`` are resolved as well.
        """
        resolved, absorbed = await self._resolve_defaults(
            mode, transient_params, override
        )
        remaining = {k: v for k, v in (override or {}).items() if k not in absorbed}
        merged = merge_deep(resolved, remaining)
        return await _resolve_values(merged, mode)

    # ------------------------------------------------------------------
    # Build / create
    # ------------------------------------------------------------------

    async def build(
        self,
        override: Mapping[str, Any] | None = None,
        transient_params: Any = None,
    ) -> Any:
        """Build an instance without persisting it.

        Args:
            override: Attributes deep-merged over the defaults.
            transient_params: Passed to the attributes generator.

        Returns:
            The built instance after all after-build hooks.
        """
        attributes = await self.attributes_for(override, transient_params, "build")
        instance = await _maybe_await(self.adapter.build(self.model, attributes))
        logger.debug(
            "Built %r, running %d after-build hook(s)",
            self.model,
            len(self.after_build_hooks),
        )
        for hook in self.after_build_hooks:
            instance = await self._apply_hook(hook, instance)
        return instance

    async def create(
        self,
        override: Mapping[str, Any] | None = None,
        transient_params: Any = None,
    ) -> Any:
        """Build an instance and persist it through the adapter.

        Associations are resolved through their create path.

        Args:
            override: Attributes deep-merged over the defaults.
            transient_params: Passed to the attributes generator.

        Returns:
            The saved instance after all after-create hooks.
        """
        attributes = await self.attributes_for(override, transient_params, "create")
        adapter = self.adapter
        instance = await _maybe_await(adapter.build(self.model, attributes))
        saved = await _maybe_await(adapter.save(instance, self.model))
        logger.debug(
            "Created %r, running %d after-create hook(s)",
            self.model,
            len(self.after_create_hooks),
        )
        for hook in self.after_create_hooks:
            saved = await self._apply_hook(hook, saved, adapter)
        return saved

    async def build_many(
        self,
        count: int,
        partials: Any = None,
        transient_params: Any = None,
        concurrent: bool | None = None,
    ) -> list[Any]:
        """Build ``count`` independent instances.

        Args:
            count: Number of instances.
            partials: A list of overrides, one per index (missing entries
                mean plain defaults), or one mapping applied to every item.
            transient_params: Passed to every generator call.
            concurrent: Gather items concurrently. Defaults to the
                ``concurrent_many`` config setting.

        Returns:
            Instances in index order.

        Raises:
            ValueError: If count is not a non-negative integer.
        """
        return await self._many(self.build, count, partials, transient_params, concurrent)

    async def create_many(
        self,
        count: int,
        partials: Any = None,
        transient_params: Any = None,
        concurrent: bool | None = None,
    ) -> list[Any]:
        """Create ``count`` independent instances. See :meth:`build_many`."""
        return await self._many(self.create, count, partials, transient_params, concurrent)

    async def _many(
        self,
        method: Callable[[Any, Any], Awaitable[Any]],
        count: int,
        partials: Any,
        transient_params: Any,
        concurrent: bool | None,
    ) -> list[Any]:
        validate_count(count)
        overrides = _partials_for(count, partials)
        if concurrent is None:
            concurrent = get_config().concurrent_many
        logger.debug(
            "Producing %d x %r (%s)",
            count,
            self.model,
            "concurrent" if concurrent else "sequential",
        )
        if concurrent:
            tasks = [
                asyncio.ensure_future(method(override, transient_params))
                for override in overrides
            ]
            try:
                results = await asyncio.gather(*tasks)
            except BaseException:
                # One failed item stops the rest.
                for task in tasks:
                    task.cancel()
                raise
            return list(results)
        return [await method(override, transient_params) for override in overrides]

    @staticmethod
    async def _apply_hook(hook: Hook, value: Any, *extra: Any) -> Any:
        result = await _maybe_await(_call(hook, value, *extra))
        # Hooks that only mutate in place may return None.
        return value if result is None else result

    # ------------------------------------------------------------------
    # Associations
    # ------------------------------------------------------------------

    def associate(
        self,
        key: str | Mapping[str, Any] | None = None,
        override: Any = None,
        transient_params: Any = None,
    ) -> Association:
        """Create a lazy reference to an instance of this factory.

        ``associate({"name": "x"}, params)`` treats the mapping as the
        override and the second argument as transient params.
        ``associate("id", {"name": "x"}, params)`` narrows the result to the
        ``id`` field.

        Raises:
            TypeError: If key is neither a string, a mapping nor None.
        """
        if isinstance(key, Mapping):
            if transient_params is not None:
                raise TypeError(
                    "associate() takes (override, transient_params) when the "
                    "first argument is a mapping."
                )
            return Association(self, override=key, transient_params=override)
        if key is not None and not isinstance(key, str):
            raise TypeError(
                f"associate() key must be a string or a mapping, got {type(key).__name__}."
            )
        return Association(
            self, key=key, override=override, transient_params=transient_params
        )

    def associate_many(
        self,
        count: int,
        override: Any = None,
        transient_params: Any = None,
    ) -> Association:
        """Create a lazy reference to ``count`` instances of this factory."""
        return Association(
            self, override=override, transient_params=transient_params, count=count
        )

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def extend(self, generator: AttributesGenerator) -> Factory:
        """Layer extra default attributes over this factory's defaults.

        Both generators receive the same context. The new generator's values
        win; associations it returns replace the base values unresolved.
        """
        base = self.attributes

        async def extended(context: AttributesContext) -> dict[str, Any]:
            defaults = await _maybe_await(_call(base, context))
            extra = await _maybe_await(_call(generator, context))
            return merge_deep(defaults, extra)

        return dataclasses.replace(self, attributes=extended)

    def extend_params(self, transient_params: Any) -> Factory:
        """Pin transient params, ignoring any supplied by callers."""
        base = self.attributes
        pinned = AttributesContext(transient_params=transient_params)

        def with_params(context: AttributesContext) -> Any:
            return _call(base, pinned)

        return dataclasses.replace(self, attributes=with_params)

    def after_build(self, hook: Hook) -> Factory:
        """Append a hook called with each built instance.

        The hook's return value replaces the instance, except that a hook
        returning ``None`` keeps the previous value.
        """
        return dataclasses.replace(
            self, after_build_hooks=(*self.after_build_hooks, hook)
        )

    def after_create(self, hook: Hook) -> Factory:
        """Append a hook called with ``(instance, adapter)`` after saving.

        As with :meth:`after_build`, returning ``None`` keeps the previous
        value.
        """
        return dataclasses.replace(
            self, after_create_hooks=(*self.after_create_hooks, hook)
        )

    def mutate(self, callback: Callable[[Any], Any]) -> Factory:
        """Transform created instances, e.g. wrap them in another type.

        A callback returning ``None`` leaves the created instance as it was,
        so a mutation can never turn a record into ``None``.
        """

        def mutation(value: Any, adapter: ModelAdapter) -> Any:
            return callback(value)

        return self.after_create(mutation)
