"""
Formation-related commands.
"""

from typing import Union

from pydantic import Field

from . import Command


class CreateFormationCommand(Command):
    """Command to create a new formation."""

    formation_id: str = Field(..., min_length=1, description="Unique identifier for the formation")
    name: str = Field(..., description="Name of the formation")
    duration_hours: Union[int, float] = Field(..., gt=0, description="Duration of the formation in hours")


class ScheduleFormationCommand(Command):
    """Command to schedule an existing formation."""

    formation_id: str = Field(..., min_length=1, description="Unique identifier for the formation")
    date: str = Field(..., description="Date the formation takes place")
    instructor_name: str = Field(..., description="Name of the instructor")
