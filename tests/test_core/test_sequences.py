"""Tests for named sequences."""

import threading

import pytest

from fixtura import clean_up, define, sequence
from fixtura.sequences import SequenceRegistry, sequences


class TestSequence:
    """Tests for the sequence() helper."""

    def test_counts_from_one(self) -> None:
        """Each call hands out the next integer for a name."""
        assert [sequence("counter") for _ in range(5)] == [1, 2, 3, 4, 5]

    def test_names_are_independent(self) -> None:
        sequence("a")
        sequence("a")
        assert sequence("b") == 1
        assert sequence("a") == 3

    def test_mapper_formats_value(self) -> None:
        """The mapper receives the counter value."""
        assert sequence("email", lambda n: f"user{n}@mail.com") == "user1@mail.com"
        assert sequence("email", lambda n: f"user{n}@mail.com") == "user2@mail.com"

    def test_clean_up_restarts_numbering(self) -> None:
        sequence("x")
        sequence("x")

        clean_up()

        assert sequence("x") == 1

    @pytest.mark.asyncio
    async def test_clean_up_between_builds(self) -> None:
        """After clean_up, factories restart their sequences."""
        factory = define(dict, lambda: {"id": sequence("user.id")})

        await factory.build_many(3)
        clean_up()

        assert await factory.build() == {"id": 1}


class TestSequenceRegistry:
    """Tests for SequenceRegistry."""

    def test_current_and_names(self) -> None:
        registry = SequenceRegistry()
        registry.next("b")
        registry.next("a")
        registry.next("a")

        assert registry.current("a") == 2
        assert registry.current("missing") == 0
        assert registry.names() == ["a", "b"]

    def test_reset_single_name(self) -> None:
        """Resetting one name leaves the others untouched."""
        registry = SequenceRegistry()
        registry.next("a")
        registry.next("b")

        registry.reset("a")

        assert registry.current("a") == 0
        assert registry.current("b") == 1

    def test_reset_unknown_name_is_noop(self) -> None:
        registry = SequenceRegistry()
        registry.reset("never-used")
        assert registry.names() == []

    def test_values_unique_across_threads(self) -> None:
        """Concurrent callers never receive the same value."""
        registry = SequenceRegistry()
        results: list[int] = []
        lock = threading.Lock()

        def worker() -> None:
            values = [registry.next("shared") for _ in range(200)]
            with lock:
                results.extend(values)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(results) == list(range(1, 1601))

    def test_module_registry_backs_sequence(self) -> None:
        sequence("shared.name")
        assert sequences.current("shared.name") == 1
