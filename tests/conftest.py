"""Shared test configuration and fixtures."""

import pytest

from fixtura.testing import RecordingAdapter, isolated_state


@pytest.fixture(autouse=True)
def _isolated_fixtura_state():
    """Give every test fresh sequences and the original default adapter."""
    with isolated_state():
        yield


@pytest.fixture
def recording_adapter() -> RecordingAdapter:
    """Provide an in-memory adapter that records builds and saves."""
    return RecordingAdapter()
