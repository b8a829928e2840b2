"""
Repository for event-sourced Formation aggregates.

Loading reads the whole event log, keeps the events of one aggregate, orders
them by creation time and folds their changes into a projection state the
aggregate is rehydrated from. Saving appends the aggregate's pending events.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from .aggregates import Formation
from .formation_events import DomainEvent
from .store import ConcurrencyError, EventStore

logger = logging.getLogger(__name__)


class RepositoryError(Exception):
    """Base exception for repository operations."""

    pass


class AggregateNotFound(RepositoryError):
    """Raised when no stored event belongs to the requested aggregate."""

    def __init__(self, aggregate_id: str):
        super().__init__(f"Aggregate '{aggregate_id}' not found")
        self.aggregate_id = aggregate_id


def fold_changes(events: Iterable[DomainEvent]) -> Dict[str, Any]:
    """
    Merge event changes left to right; later keys overwrite earlier ones.

    Args:
        events: Events already in the order they should be applied

    Returns:
        Dict[str, Any]: The merged projection state
    """
    state: Dict[str, Any] = {}
    for event in events:
        state.update(event.changes)
    return state


class FormationRepository:
    """
    Repository for Formation aggregates.

    With ``check_concurrency`` enabled, :meth:`persist` refuses to append when
    the store holds a different number of events for the aggregate than the
    instance was loaded from, instead of letting a stale snapshot win.
    """

    def __init__(self, event_store: EventStore, check_concurrency: bool = False):
        """
        Initialize the repository.

        Args:
            event_store: Store to read from and append to
            check_concurrency: Reject persists from stale snapshots
        """
        self.event_store = event_store
        self.check_concurrency = check_concurrency

    def _events_for(self, aggregate_id: str) -> List[DomainEvent]:
        """Events of one aggregate sorted by created_at; ties keep store order."""
        matching = [event for event in self.event_store.list_all() if event.aggregate_id == aggregate_id]
        return sorted(matching, key=lambda event: event.created_at)

    def get_state(self, aggregate_id: str) -> Dict[str, Any]:
        """
        Fold the aggregate's events into its projection state.

        Args:
            aggregate_id: Id of the aggregate

        Returns:
            Dict[str, Any]: Merged state, empty if no event matches
        """
        return fold_changes(self._events_for(aggregate_id))

    def get_by_id(self, aggregate_id: str) -> Formation:
        """
        Load a Formation by replaying its events.

        Args:
            aggregate_id: Id of the formation

        Returns:
            Formation: The rehydrated aggregate, with no pending events

        Raises:
            AggregateNotFound: If no stored event belongs to the aggregate
            UnknownEventKind: If any stored event cannot be reconstructed
        """
        events = self._events_for(aggregate_id)
        if not events:
            raise AggregateNotFound(aggregate_id)

        formation = Formation.from_state(fold_changes(events), version=len(events))
        logger.debug(f"Loaded formation {aggregate_id} from {len(events)} events")
        return formation

    def exists(self, aggregate_id: str) -> bool:
        """Return True if at least one event is stored for the aggregate."""
        return self.event_store.count_for(aggregate_id) > 0

    def persist(self, formation: Formation) -> None:
        """
        Append the formation's pending events to the store.

        Events are appended in recording order, then the pending buffer is
        cleared and the version advanced, so persisting the same instance
        twice does not duplicate events. If the store fails part-way the
        error propagates and the buffer is left as it was.

        Args:
            formation: Aggregate to persist

        Raises:
            ConcurrencyError: If concurrency checks are on and the snapshot is stale
            StorageWriteError: If the store cannot write an event
        """
        pending = formation.pending_events
        if not pending:
            logger.debug(f"No pending events for formation {formation.id}")
            return

        if self.check_concurrency:
            actual_version = self.event_store.count_for(formation.id)
            if actual_version != formation.version:
                logger.warning(
                    f"Rejected persist of formation {formation.id}: loaded at version "
                    f"{formation.version}, store is at version {actual_version}"
                )
                raise ConcurrencyError(formation.id, formation.version, actual_version)

        for event in pending:
            self.event_store.append(event)

        formation.mark_events_as_committed()
        formation.version += len(pending)

        logger.debug(f"Persisted {len(pending)} events for formation {formation.id}, new version: {formation.version}")


def get_formation_repository(event_store: Optional[EventStore] = None) -> FormationRepository:
    """
    Build a FormationRepository using application configuration.

    Args:
        event_store: Store to use (a new InMemoryEventStore if not provided)

    Returns:
        FormationRepository: Configured repository instance
    """
    from formations.config import config

    from .store import InMemoryEventStore

    if event_store is None:
        event_store = InMemoryEventStore()

    check_concurrency = config.get("repository", {}).get("check_concurrency", False)
    return FormationRepository(event_store, check_concurrency=check_concurrency)
