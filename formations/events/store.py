"""
Append-only event store.

Defines the store interface used by the repository and an in-memory
implementation. Events are converted to their record form on append and
reconstructed into domain events on read, so any backend that can keep
records can be substituted without touching the repository or aggregate.
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from .envelope import EventRecord
from .formation_events import DomainEvent, from_record

logger = logging.getLogger(__name__)


class EventStoreError(Exception):
    """Base exception for EventStore operations."""

    pass


class StorageWriteError(EventStoreError):
    """Raised by a durable store when an append cannot be written."""

    pass


class ConcurrencyError(EventStoreError):
    """Raised when optimistic concurrency control fails."""

    def __init__(self, aggregate_id: str, expected_version: int, actual_version: int):
        super().__init__(
            f"Concurrency conflict on aggregate '{aggregate_id}': "
            f"expected version {expected_version}, actual version {actual_version}"
        )
        self.aggregate_id = aggregate_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class EventStore(ABC):
    """
    Append-only log of event records.

    The store exposes no deletion or mutation API. Reads return events in
    append order; ordering by business time is the repository's job.
    """

    @abstractmethod
    def append(self, event: DomainEvent) -> None:
        """
        Append a domain event to the log.

        Args:
            event: Event to append

        Raises:
            StorageWriteError: If a durable backend fails to write the record
        """
        pass

    @abstractmethod
    def list_all(self) -> List[DomainEvent]:
        """
        Return every stored event, in append order.

        Returns a new list on each call.

        Raises:
            UnknownEventKind: If a stored record carries an unknown kind tag
        """
        pass

    def count_for(self, aggregate_id: str) -> int:
        """Return the number of stored events for an aggregate."""
        return sum(1 for event in self.list_all() if event.aggregate_id == aggregate_id)


class InMemoryEventStore(EventStore):
    """In-memory EventStore keeping records in a list. Never fails on append."""

    def __init__(self):
        self._records: List[EventRecord] = []

    def append(self, event: DomainEvent) -> None:
        record = event.to_record()
        self._records.append(record)
        logger.debug(
            f"Appended {record.name} for aggregate '{record.aggregate_id}', "
            f"log size: {len(self._records)}"
        )

    def list_all(self) -> List[DomainEvent]:
        return [from_record(record) for record in self._records]

    def count_for(self, aggregate_id: str) -> int:
        return sum(1 for record in self._records if record.aggregate_id == aggregate_id)

    def records(self) -> List[EventRecord]:
        """Return a copy of the raw records, in append order."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)
