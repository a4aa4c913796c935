"""Pytest configuration and shared fixtures."""

import pytest

from fakes import FakeSession, RecordingPublisher


@pytest.fixture
def session() -> FakeSession:
    """Empty fake OPC-UA session."""
    return FakeSession()


@pytest.fixture
def publisher() -> RecordingPublisher:
    """Publisher recording every event."""
    return RecordingPublisher()
