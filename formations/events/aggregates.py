"""
Formation aggregate and its pending event buffer.

Every business operation on a Formation mutates its fields and records the
matching domain event in the aggregate's pending buffer, so no field changes
without an event describing it. Loading goes the other way: the repository
folds stored events into a state mapping and the aggregate is rebuilt from
that memento without replaying business logic.
"""

from typing import Any, Iterator, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .formation_events import DomainEvent, FormationCreated, FormationScheduled


class PendingEvents:
    """
    Append-only buffer of uncommitted domain events owned by one aggregate.

    Aggregates embed a buffer instead of inheriting one, so new aggregate
    types are free to pick their own base class.
    """

    def __init__(self):
        self._events: List[DomainEvent] = []

    def record(self, event: DomainEvent) -> DomainEvent:
        """Add an event to the buffer and return it."""
        self._events.append(event)
        return event

    def snapshot(self) -> List[DomainEvent]:
        """Return a copy of the buffered events, in recording order."""
        return self._events.copy()

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[DomainEvent]:
        return iter(self.snapshot())


class FormationState(BaseModel):
    """Projection state (memento) a Formation is rehydrated from."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1, description="Formation identifier")
    name: str = Field(..., description="Formation name")
    duration_hours: Union[int, float] = Field(..., description="Duration of the formation in hours")
    date: Optional[str] = Field(None, description="Scheduled date, None until scheduled")
    instructor_name: Optional[str] = Field(None, description="Instructor name, None until scheduled")


class Formation:
    """
    Formation aggregate.

    ``id`` and ``duration_hours`` never change after creation; ``name`` is
    mutable; ``date`` and ``instructor_name`` stay None until the formation is
    scheduled. ``version`` is the number of stored events the instance was
    rehydrated from (or has persisted since).

    Build instances with :meth:`create` or :meth:`from_state`.
    """

    def __init__(
        self,
        formation_id: str,
        name: str,
        duration_hours: Union[int, float],
        date: Optional[str] = None,
        instructor_name: Optional[str] = None,
        version: int = 0,
    ):
        if not formation_id:
            raise ValueError("Formation id must not be empty")

        self._id = formation_id
        self.name = name
        self._duration_hours = duration_hours
        self.date = date
        self.instructor_name = instructor_name
        self.version = version
        self._pending = PendingEvents()

    @property
    def id(self) -> str:
        return self._id

    @property
    def duration_hours(self) -> Union[int, float]:
        return self._duration_hours

    @property
    def pending_events(self) -> List[DomainEvent]:
        """Events recorded since the aggregate was loaded or last persisted."""
        return self._pending.snapshot()

    def mark_events_as_committed(self) -> None:
        """Mark all pending events as committed (clear the buffer)."""
        self._pending.clear()

    @classmethod
    def create(cls, formation_id: str, name: str, duration_hours: Union[int, float]) -> "Formation":
        """
        Create a new, unscheduled formation.

        Records a FormationCreated event carrying the full initial projection.
        The instance takes its fields from the validated event payload, so a
        coerced value (``"10"`` for duration) is the same live and reloaded.
        Id uniqueness is not checked here.

        Args:
            formation_id: Formation identifier (must not be empty)
            name: Formation name
            duration_hours: Duration in hours

        Returns:
            Formation: The new aggregate with one pending event

        Raises:
            ValueError: If formation_id is empty
            pydantic.ValidationError: If name or duration_hours has the wrong type
        """
        if not formation_id:
            raise ValueError("Formation id must not be empty")

        event = FormationCreated.create(
            formation_id, {"id": formation_id, "name": name, "duration_hours": duration_hours}
        )
        formation = cls(event.changes["id"], event.changes["name"], event.changes["duration_hours"])
        formation._pending.record(event)
        return formation

    def schedule_on(self, date: str, instructor_name: str) -> DomainEvent:
        """
        Schedule the formation on a date with an instructor.

        No validation of the date format or instructor is performed beyond
        both being strings. Fields are only updated once the event is built.

        Args:
            date: Date the formation takes place
            instructor_name: Name of the instructor

        Returns:
            DomainEvent: The FormationScheduled event

        Raises:
            pydantic.ValidationError: If date or instructor_name is not a string
        """
        event = FormationScheduled.create(self.id, {"date": date, "instructor_name": instructor_name})
        self.date = event.changes["date"]
        self.instructor_name = event.changes["instructor_name"]
        return self._pending.record(event)

    @classmethod
    def from_state(cls, state: Union[FormationState, Mapping[str, Any]], version: int = 0) -> "Formation":
        """
        Rehydrate a formation from a projection state (memento pattern).

        The result has no pending events; history is never re-emitted.

        Args:
            state: Folded projection state
            version: Number of stored events the state was folded from

        Returns:
            Formation: The rehydrated aggregate

        Raises:
            ValueError: If the state lacks required fields
        """
        if not isinstance(state, FormationState):
            try:
                state = FormationState.model_validate(dict(state))
            except ValidationError as e:
                raise ValueError(f"Invalid formation state: {e}") from e

        return cls(
            state.id,
            state.name,
            state.duration_hours,
            date=state.date,
            instructor_name=state.instructor_name,
            version=version,
        )

    def to_state(self) -> FormationState:
        """Capture the current fields as a memento."""
        return FormationState(
            id=self.id,
            name=self.name,
            duration_hours=self.duration_hours,
            date=self.date,
            instructor_name=self.instructor_name,
        )

    def __repr__(self) -> str:
        return (
            f"Formation(id={self.id!r}, name={self.name!r}, duration_hours={self.duration_hours!r}, "
            f"date={self.date!r}, instructor_name={self.instructor_name!r}, version={self.version})"
        )
