"""
Unit tests for the event record model (formations/events/envelope.py).
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from formations.events.envelope import EventKind, EventRecord


class TestEventRecord:
    """Test EventRecord creation, validation and wire form."""

    def test_populate_by_field_name(self):
        """Test building a record with Python field names."""
        created = datetime(2021, 5, 1, 12, 0, tzinfo=timezone.utc)
        record = EventRecord(
            name="FormationCreated", aggregate_id="DDD01", created_at=created, changes={"name": "DDD"}
        )

        assert record.name == "FormationCreated"
        assert record.aggregate_id == "DDD01"
        assert record.created_at == created
        assert record.changes == {"name": "DDD"}

    def test_populate_by_alias(self):
        """Test building a record from wire-shaped keys."""
        record = EventRecord.from_dict(
            {
                "name": "FormationScheduled",
                "aggregateId": "DDD01",
                "createdAt": "2021-05-01T12:00:00+00:00",
                "changes": {"date": "2021-05-01"},
            }
        )

        assert record.aggregate_id == "DDD01"
        assert record.created_at == datetime(2021, 5, 1, 12, 0, tzinfo=timezone.utc)

    def test_to_dict_uses_wire_keys(self):
        """Test the wire form uses camelCase keys and an ISO timestamp."""
        record = EventRecord(
            name="FormationCreated",
            aggregate_id="DDD01",
            created_at=datetime(2021, 5, 1, 12, 0, tzinfo=timezone.utc),
            changes={"id": "DDD01"},
        )

        data = record.to_dict()

        assert set(data) == {"name", "aggregateId", "createdAt", "changes"}
        assert data["aggregateId"] == "DDD01"
        assert data["createdAt"].startswith("2021-05-01T12:00:00")
        assert EventRecord.from_dict(data) == record

    def test_created_at_defaults_to_now_utc(self):
        """Test that created_at is stamped with the current UTC time."""
        before = datetime.now(timezone.utc)
        record = EventRecord(name="FormationCreated", aggregate_id="DDD01")
        after = datetime.now(timezone.utc)

        assert record.created_at.tzinfo == timezone.utc
        assert before <= record.created_at <= after

    def test_naive_created_at_rejected(self):
        """Test that naive timestamps are refused."""
        with pytest.raises(ValidationError, match="timezone-aware"):
            EventRecord(name="FormationCreated", aggregate_id="DDD01", created_at=datetime(2021, 5, 1))

    def test_created_at_normalized_to_utc(self):
        """Test that aware non-UTC timestamps are converted to UTC."""
        paris = timezone(timedelta(hours=2))
        record = EventRecord(
            name="FormationCreated", aggregate_id="DDD01", created_at=datetime(2021, 5, 1, 14, 0, tzinfo=paris)
        )

        assert record.created_at.tzinfo == timezone.utc
        assert record.created_at.hour == 12

    def test_record_is_frozen(self):
        """Test that record fields cannot be reassigned."""
        record = EventRecord(name="FormationCreated", aggregate_id="DDD01")

        with pytest.raises(ValidationError):
            record.aggregate_id = "OTHER"

    def test_unknown_name_is_representable(self):
        """Test that a record may carry a tag outside the known kinds."""
        record = EventRecord(name="NOPE", aggregate_id="DDD01")

        assert record.name == "NOPE"
        assert record.name not in {kind.value for kind in EventKind}
