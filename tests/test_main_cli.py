"""
tests/test_main_cli.py

Tests for the demo CLI: argument parsing, scenario orchestration and logging.
"""

import argparse
import sys
from unittest.mock import patch

import pytest

from formations.config import ScheduleStep
from formations.events.repository import FormationRepository
from formations.events.store import ConcurrencyError
from formations.main import _parse_schedule, config, main


class TestParseSchedule:
    """Test DELAY:DATE parsing."""

    def test_valid(self):
        assert _parse_schedule("0.5:2021-05-01") == ScheduleStep(delay=0.5, date="2021-05-01")

    @pytest.mark.parametrize("value", ["2021", "abc:2021", "1:", "-1:2021"])
    def test_invalid(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            _parse_schedule(value)


class TestMainCLI:
    """Test main() orchestration."""

    def test_runs_scenario_and_logs_final_state(self):
        argv = ["--initial-delay", "0", "--schedule", "0.03:2021", "--schedule", "0:2020"]

        with patch("formations.main.logger") as mock_logger:
            main(argv)

        messages = [c.args[0] for c in mock_logger.info.call_args_list]
        assert messages[0] == "Starting formation scenario"
        assert "Formation 'Introduction to DDD' created successfully" in messages
        assert any(m.startswith("Event log:") and "FormationScheduled" in m for m in messages)
        assert "date='2021'" in messages[-1]
        assert messages[-1].startswith("Final formation: Formation(id='DDD01'")

    def test_custom_formation_arguments(self):
        argv = [
            "--formation-id", "ES01",
            "--name", "Event Sourcing",
            "--duration-hours", "7",
            "--instructor", "Alice",
            "--initial-delay", "0",
            "--schedule", "0:2022",
        ]

        with patch("formations.main.logger") as mock_logger:
            main(argv)

        final = mock_logger.info.call_args_list[-1].args[0]
        assert "id='ES01'" in final
        assert "instructor_name='Alice'" in final
        assert "date='2022'" in final

    def test_check_concurrency_on_shared_snapshot_succeeds(self):
        argv = ["--initial-delay", "0", "--schedule", "0.02:2021", "--schedule", "0:2020", "--check-concurrency"]

        with patch("formations.main.logger") as mock_logger:
            main(argv)

        assert "version=3" in mock_logger.info.call_args_list[-1].args[0]

    def test_failure_logged_and_reraised(self):
        with patch("formations.main.logger") as mock_logger, patch(
            "formations.main.run_scenario", side_effect=ConcurrencyError("DDD01", 1, 2)
        ):
            with pytest.raises(ConcurrencyError):
                main(["--initial-delay", "0"])

        mock_logger.critical.assert_called_once()

    def test_uses_sys_argv_by_default(self):
        with patch.object(sys, "argv", ["formations-demo", "--initial-delay", "0", "--schedule", "0:2020"]), patch(
            "formations.main.logger"
        ) as mock_logger:
            main()

        assert "date='2020'" in mock_logger.info.call_args_list[-1].args[0]


class TestCheckConcurrencyFlag:
    """Test that the command line can switch the configured concurrency check either way."""

    def _repository_kwargs(self, argv, configured):
        with patch.dict(config["repository"], {"check_concurrency": configured}), patch(
            "formations.main.FormationRepository", wraps=FormationRepository
        ) as mock_repository, patch("formations.main.logger"):
            main(["--initial-delay", "0", "--schedule", "0:2020"] + argv)

        return mock_repository.call_args.kwargs

    def test_config_default_used_without_flag(self):
        assert self._repository_kwargs([], configured=True)["check_concurrency"] is True

    def test_no_flag_overrides_enabled_config(self):
        assert self._repository_kwargs(["--no-check-concurrency"], configured=True)["check_concurrency"] is False

    def test_flag_overrides_disabled_config(self):
        assert self._repository_kwargs(["--check-concurrency"], configured=False)["check_concurrency"] is True
