"""
Formation domain events.

Defines the typed events emitted by the Formation aggregate, their payload
models, and the conversion between a domain event and its storage record.

The set of events is closed: reconstruction dispatches over a registry keyed by
``EventKind``, and the registry is checked at import time to cover every kind.
Adding an event means adding a kind, a variant and a registry entry.
"""

from datetime import datetime
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .envelope import EventKind, EventRecord, ensure_utc, utc_now


class EventModelError(Exception):
    """Base exception for event model operations."""

    pass


class UnknownEventKind(EventModelError):
    """Raised when reconstructing an event from a record with an unknown kind tag."""

    def __init__(self, name: str):
        super().__init__(f"Unknown event kind: {name!r}")
        self.name = name


class FormationCreatedData(BaseModel):
    """Data payload for FormationCreated event."""

    id: str = Field(..., min_length=1, description="Formation identifier")
    name: str = Field(..., description="Formation name")
    duration_hours: Union[int, float] = Field(..., description="Duration of the formation in hours")


class FormationScheduledData(BaseModel):
    """Data payload for FormationScheduled event."""

    date: str = Field(..., description="Date the formation is scheduled on")
    instructor_name: str = Field(..., description="Name of the instructor")


class DomainEvent(BaseModel):
    """
    Base class for all formation domain events.

    A domain event is an immutable fact about one aggregate: its kind (fixed
    per subclass), the aggregate id, the creation time and the field changes.
    """

    model_config = ConfigDict(frozen=True)

    kind: ClassVar[EventKind]
    payload_model: ClassVar[Type[BaseModel]]

    aggregate_id: str = Field(..., description="Id of the aggregate this event mutates")
    created_at: datetime = Field(default_factory=utc_now, description="When the event was created (UTC)")
    changes: Dict[str, Any] = Field(default_factory=dict, description="Field changes carried by the event")

    @field_validator("created_at")
    @classmethod
    def created_at_must_be_utc(cls, v: datetime) -> datetime:
        """Ensure created_at is timezone-aware and in UTC."""
        return ensure_utc(v)

    @classmethod
    def create(cls, aggregate_id: str, changes: Mapping[str, Any]) -> "DomainEvent":
        """
        Create a new event stamped with the current time.

        The changes are checked against the variant's payload model before the
        event is built.

        Args:
            aggregate_id: Id of the aggregate this event mutates
            changes: Field changes carried by the event

        Returns:
            DomainEvent: The new event

        Raises:
            pydantic.ValidationError: If the changes do not match the payload model
        """
        payload = cls.payload_model.model_validate(dict(changes))
        return cls(aggregate_id=aggregate_id, created_at=utc_now(), changes=payload.model_dump())

    def to_record(self) -> EventRecord:
        """Convert this event to its storage record."""
        return EventRecord(
            name=self.kind.value,
            aggregate_id=self.aggregate_id,
            created_at=self.created_at,
            changes=dict(self.changes),
        )

    @staticmethod
    def from_record(record: Union[EventRecord, Mapping[str, Any]]) -> "DomainEvent":
        """Reconstruct a domain event from a record. See :func:`from_record`."""
        return from_record(record)


class FormationCreated(DomainEvent):
    """A formation was created. Changes hold the full initial projection."""

    kind: ClassVar[EventKind] = EventKind.FORMATION_CREATED
    payload_model: ClassVar[Type[BaseModel]] = FormationCreatedData


class FormationScheduled(DomainEvent):
    """A formation was scheduled on a date with an instructor."""

    kind: ClassVar[EventKind] = EventKind.FORMATION_SCHEDULED
    payload_model: ClassVar[Type[BaseModel]] = FormationScheduledData


EVENT_TYPES: Dict[EventKind, Type[DomainEvent]] = {
    EventKind.FORMATION_CREATED: FormationCreated,
    EventKind.FORMATION_SCHEDULED: FormationScheduled,
}

_missing_kinds = set(EventKind) - set(EVENT_TYPES)
if _missing_kinds:
    raise RuntimeError(f"No event type registered for kinds: {sorted(k.value for k in _missing_kinds)}")


def get_event_type(name: str) -> Optional[Type[DomainEvent]]:
    """
    Look up the event class for a kind tag.

    Args:
        name: Event kind tag

    Returns:
        The event class, or None if the tag is not a known kind
    """
    try:
        return EVENT_TYPES[EventKind(name)]
    except ValueError:
        return None


def from_record(record: Union[EventRecord, Mapping[str, Any]]) -> DomainEvent:
    """
    Reconstruct a domain event from its storage record.

    The stored ``created_at`` is preserved, never regenerated.

    Args:
        record: An EventRecord, or a mapping in wire shape

    Returns:
        DomainEvent: The matching event variant

    Raises:
        UnknownEventKind: If the record's kind tag is not a known kind
    """
    if not isinstance(record, EventRecord):
        record = EventRecord.from_dict(record)

    event_cls = get_event_type(record.name)
    if event_cls is None:
        raise UnknownEventKind(record.name)

    return event_cls(
        aggregate_id=record.aggregate_id,
        created_at=record.created_at,
        changes=dict(record.changes),
    )
