"""
Event record model and event kinds.

Defines the plain, immutable record every domain event is converted to before
it reaches the event store. This is the only serialization contract of the
system: a durable store substituted behind the store interface would persist
exactly this shape.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventKind(str, Enum):
    """Closed set of event kind tags."""

    FORMATION_CREATED = "FormationCreated"
    FORMATION_SCHEDULED = "FormationScheduled"


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Validate that a timestamp is timezone-aware and normalize it to UTC.

    Args:
        value: Timestamp to check

    Returns:
        datetime: The same instant expressed in UTC

    Raises:
        ValueError: If the timestamp is naive
    """
    if value.tzinfo is None:
        raise ValueError("created_at must be timezone-aware")
    if value.tzinfo != timezone.utc:
        value = value.astimezone(timezone.utc)
    return value


class EventRecord(BaseModel):
    """
    Storage shape of a domain event.

    Serialized by alias as ``{name, aggregateId, createdAt, changes}``. The
    ``name`` is kept as a plain string so that a record carrying a tag outside
    the known set can still be read back and rejected at reconstruction time.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., description="Event kind tag")
    aggregate_id: str = Field(..., alias="aggregateId", description="Id of the aggregate this event mutates")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt", description="When the event was created (UTC)")
    changes: Dict[str, Any] = Field(default_factory=dict, description="Field changes carried by the event")

    @field_validator("created_at")
    @classmethod
    def created_at_must_be_utc(cls, v: datetime) -> datetime:
        """Ensure created_at is timezone-aware and in UTC."""
        return ensure_utc(v)

    def to_dict(self) -> Dict[str, Any]:
        """Return the wire form, with ``createdAt`` rendered as ISO-8601."""
        return self.model_dump(by_alias=True, mode="json")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EventRecord":
        """Build a record from its wire form (aliases or field names)."""
        return cls.model_validate(dict(data))
