"""
main.py

Demo driver for the formation event store.

Creates a formation through the command handler, waits, loads it once,
then runs competing schedule tasks concurrently on that single snapshot.
Each task sleeps for its configured delay, schedules the formation and
persists it. The final reload shows which schedule won: the event with
the later creation time, not necessarily the task that was started last.

Run with ``python -m formations.main``; defaults come from the ``demo`` and
``repository`` sections of the configuration.
"""

import argparse
import asyncio
import json
from typing import List, Optional

from formations.commands.formation_commands import CreateFormationCommand
from formations.commands.handlers import FormationCommandHandler
from formations.config import DemoConfig, ScheduleStep, config
from formations.events.aggregates import Formation
from formations.events.repository import FormationRepository
from formations.events.store import InMemoryEventStore
from formations.utils.logger import get_logger

logger = get_logger()


async def schedule_after(
    repository: FormationRepository, formation: Formation, delay: float, date: str, instructor_name: str
) -> None:
    """Wait `delay` seconds, then schedule the formation and persist it."""
    await asyncio.sleep(delay)
    formation.schedule_on(date, instructor_name)
    repository.persist(formation)
    logger.info(f"Scheduled {formation.id} on {date} after {delay}s")


async def run_scenario(repository: FormationRepository, demo: DemoConfig) -> Formation:
    """
    Run the create / wait / competing schedules scenario.

    Args:
        repository: Repository backed by the store to exercise
        demo: Scenario parameters

    Returns:
        Formation: The formation reloaded after every schedule task finished

    Raises:
        CommandValidationError: If the formation id already has events
        ConcurrencyError: If the repository checks concurrency and a task persists a stale snapshot
    """
    created = FormationCommandHandler(repository).handle(
        CreateFormationCommand(formation_id=demo.formation_id, name=demo.name, duration_hours=demo.duration_hours)
    )
    logger.info(created.message)

    await asyncio.sleep(demo.initial_delay)

    snapshot = repository.get_by_id(demo.formation_id)
    await asyncio.gather(
        *(
            schedule_after(repository, snapshot, step.delay, step.date, demo.instructor_name)
            for step in demo.schedules
        )
    )

    return repository.get_by_id(demo.formation_id)


def _parse_schedule(value: str) -> ScheduleStep:
    """Parse a DELAY:DATE command-line value."""
    delay, sep, date = value.partition(":")
    if not sep or not date:
        raise argparse.ArgumentTypeError(f"Expected DELAY:DATE, got {value!r}")
    try:
        return ScheduleStep(delay=float(delay), date=date)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Invalid schedule {value!r}: {e}")


def main(argv: Optional[List[str]] = None) -> None:
    """
    Parse command-line arguments and run the demo scenario.

    Command-line arguments override configuration defaults. The resulting
    event log and final formation are logged.
    """
    demo_defaults = DemoConfig(**config["demo"])

    parser = argparse.ArgumentParser(description="Event-sourced formation store demo")
    parser.add_argument("--formation-id", default=demo_defaults.formation_id, help="Id of the demo formation")
    parser.add_argument("--name", default=demo_defaults.name, help="Name of the demo formation")
    parser.add_argument(
        "--duration-hours", type=float, default=demo_defaults.duration_hours, help="Duration in hours"
    )
    parser.add_argument(
        "--instructor", default=demo_defaults.instructor_name, help="Instructor used by every schedule task"
    )
    parser.add_argument(
        "--initial-delay",
        type=float,
        default=demo_defaults.initial_delay,
        help="Seconds to wait between creation and loading the snapshot",
    )
    parser.add_argument(
        "--schedule",
        dest="schedules",
        action="append",
        type=_parse_schedule,
        metavar="DELAY:DATE",
        help="Competing schedule task (repeatable); replaces the configured tasks",
    )
    parser.add_argument(
        "--check-concurrency",
        action=argparse.BooleanOptionalAction,
        default=config["repository"]["check_concurrency"],
        help=(
            "Reject persists from stale snapshots. The schedule tasks share one snapshot, "
            "which never goes stale, so the default scenario ends the same either way"
        ),
    )
    args = parser.parse_args(argv)

    demo = DemoConfig(
        formation_id=args.formation_id,
        name=args.name,
        duration_hours=args.duration_hours,
        instructor_name=args.instructor,
        initial_delay=args.initial_delay,
        schedules=args.schedules or demo_defaults.schedules,
    )

    event_store = InMemoryEventStore()
    repository = FormationRepository(event_store, check_concurrency=args.check_concurrency)

    logger.info("Starting formation scenario")
    try:
        final = asyncio.run(run_scenario(repository, demo))
    except Exception as e:
        logger.critical(f"Formation scenario failed: {e}", exc_info=True)
        raise
    finally:
        log = [record.to_dict() for record in event_store.records()]
        logger.info(f"Event log: {json.dumps(log, indent=2)}")

    logger.info(f"Final formation: {final!r}")


if __name__ == "__main__":
    main()
