"""
Formation commands and their results.

A command carries the intent to change one formation; the handler in
``handlers.py`` turns it into a load, mutate and persist cycle.
"""

from typing import Optional

from pydantic import BaseModel, Field


class Command(BaseModel):
    """Base class for formation commands."""


class CommandResult(BaseModel):
    """Outcome of one handled command."""

    aggregate_id: str = Field(..., description="Id of the formation the command changed")
    version: int = Field(..., description="Formation version after its events were persisted")
    event_count: int = Field(..., description="Number of events the command appended")
    message: Optional[str] = Field(None, description="Human-readable summary")


class CommandValidationError(Exception):
    """Raised when a command cannot be applied to the current state."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field
