"""Shared test utilities for projects using fixtura."""

from fixtura.testing.fixtures import (
    RecordingAdapter,
    create_mock_adapter,
    isolated_state,
)

__all__ = [
    "RecordingAdapter",
    "create_mock_adapter",
    "isolated_state",
]
