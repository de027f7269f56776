"""Named monotonic counters for generating unique fixture values."""

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger(__name__)


class SequenceRegistry:
    """Process-wide named counters.

    Each call to :meth:`next` increments the counter for a name under a lock,
    so values stay unique even when fixtures are built from several threads
    or from concurrently gathered coroutines.
    """

    def __init__(self) -> None:
        self._counters: dict[str, int] = {}
        self._lock = threading.Lock()

    def next(self, name: str, mapper: Callable[[int], Any] | None = None) -> Any:
        """Advance the named sequence and map its new value.

        Args:
            name: Sequence identifier, e.g. 'user.email'.
            mapper: Function applied to the counter value. Identity if None.

        Returns:
            ``mapper(n)`` where n is 1 on first use of ``name``.
        """
        with self._lock:
            value = self._counters.get(name, 0) + 1
            self._counters[name] = value
        return mapper(value) if mapper is not None else value

    def current(self, name: str) -> int:
        """Return the last value handed out for ``name`` (0 if unused)."""
        with self._lock:
            return self._counters.get(name, 0)

    def reset(self, name: str | None = None) -> None:
        """Reset one sequence, or all of them when ``name`` is None."""
        with self._lock:
            if name is None:
                self._counters.clear()
            else:
                self._counters.pop(name, None)
        logger.debug("Reset sequence(s): %s", name or "all")

    def names(self) -> list[str]:
        """Return the names of all sequences in use."""
        with self._lock:
            return sorted(self._counters)


sequences = SequenceRegistry()
