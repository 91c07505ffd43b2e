# tests/conftest.py
import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from feedbackhub.app import create_app
from feedbackhub.store import FeedbackStore

CLOCK_START = datetime(2026, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_clock():
    """Factory for deterministic clocks: every call is one `step` later than the previous."""
    def _make(start=CLOCK_START, step=timedelta(seconds=1)):
        ticks = itertools.count()

        def clock():
            return (start + step * next(ticks)).isoformat(timespec="microseconds")

        return clock

    return _make


@pytest.fixture
def make_store(make_clock):
    """Factory for isolated in-memory stores; strictly increasing timestamps unless a clock is given."""
    def _make(**kwargs):
        kwargs.setdefault("clock", make_clock())
        return FeedbackStore.from_url("sqlite://", **kwargs)

    return _make


@pytest.fixture
def store(make_store):
    return make_store()


@pytest.fixture
def client(store):
    return TestClient(create_app(store))
