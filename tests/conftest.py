import pytest

from formations.events.repository import FormationRepository
from formations.events.store import InMemoryEventStore


@pytest.fixture
def event_store():
    """Fresh in-memory event store per test."""
    return InMemoryEventStore()


@pytest.fixture
def repository(event_store):
    """Repository over the test's event store, without concurrency checks."""
    return FormationRepository(event_store)
