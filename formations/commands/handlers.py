"""
Command handler implementations.

Each command runs as one synchronous load, mutate and persist cycle, so
tasks sharing an event loop cannot interleave inside a cycle.
"""

import logging

from formations.events.aggregates import Formation
from formations.events.repository import FormationRepository

from . import Command, CommandResult, CommandValidationError
from .formation_commands import CreateFormationCommand, ScheduleFormationCommand

logger = logging.getLogger(__name__)


class FormationCommandHandler:
    """Handles formation-related commands."""

    def __init__(self, repository: FormationRepository):
        """
        Initialize the handler.

        Args:
            repository: Repository used to load and persist formations
        """
        self.repository = repository

    def handle(self, command: Command) -> CommandResult:
        """
        Handle a formation command.

        Args:
            command: Formation command to handle

        Returns:
            CommandResult: Result of command execution

        Raises:
            CommandValidationError: If the command type is unknown or the formation already exists
            AggregateNotFound: If a schedule command targets a missing formation
        """
        if isinstance(command, CreateFormationCommand):
            return self._handle_create(command)
        elif isinstance(command, ScheduleFormationCommand):
            return self._handle_schedule(command)
        else:
            raise CommandValidationError(f"Unknown command type: {type(command)}")

    def _handle_create(self, command: CreateFormationCommand) -> CommandResult:
        if self.repository.exists(command.formation_id):
            raise CommandValidationError(f"Formation {command.formation_id} already exists", field="formation_id")

        formation = Formation.create(command.formation_id, command.name, command.duration_hours)
        event_count = len(formation.pending_events)
        self.repository.persist(formation)

        logger.info(f"Created formation {command.formation_id} with {event_count} events")

        return CommandResult(
            aggregate_id=command.formation_id,
            version=formation.version,
            event_count=event_count,
            message=f"Formation '{command.name}' created successfully",
        )

    def _handle_schedule(self, command: ScheduleFormationCommand) -> CommandResult:
        formation = self.repository.get_by_id(command.formation_id)
        formation.schedule_on(command.date, command.instructor_name)
        self.repository.persist(formation)

        logger.info(f"Scheduled formation {command.formation_id} on {command.date} with {command.instructor_name}")

        return CommandResult(
            aggregate_id=command.formation_id,
            version=formation.version,
            event_count=1,
            message=f"Formation scheduled on {command.date}",
        )
