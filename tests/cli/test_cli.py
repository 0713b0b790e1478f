"""CLI tests for the status, run and stamp commands."""

import json
import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from app_upgrader.cli.main import main
from app_upgrader.config import NAME_ENV, STATE_FILE_ENV

STEPS_MODULE = '''
from app_upgrader.upgrade import FatalError, NonFatalError, StepRegistry, Success, VersionSet

clean = StepRegistry(VersionSet.from_range(2))
clean.add(1, Success)
clean.add(2, Success)

with_errors = StepRegistry(VersionSet.from_range(3))
with_errors.add(1, Success)
with_errors.add(2, lambda: NonFatalError("lost volume setting"))
with_errors.add(3, Success)

failing = StepRegistry(VersionSet.from_range(3))
failing.add(1, Success)
failing.add(2, lambda: FatalError("sync failed"))
failing.add(3, Success)

incomplete = StepRegistry(VersionSet.from_range(2))
incomplete.add(1, Success)

not_a_registry = 42
'''


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    """Path of the JSON version store used by the CLI."""
    return tmp_path / "state" / "versions.json"


@pytest.fixture(autouse=True)
def steps_module(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
    """Make a sample step module importable as ``sample_upgrades``."""
    (tmp_path / "sample_upgrades.py").write_text(STEPS_MODULE)
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.delitem(sys.modules, "sample_upgrades", raising=False)
    monkeypatch.delenv(STATE_FILE_ENV, raising=False)
    monkeypatch.delenv(NAME_ENV, raising=False)
    return "sample_upgrades"


def invoke(cli_runner: CliRunner, state_file: Path, *args: str):
    return cli_runner.invoke(main, ["--state-file", str(state_file), "--name", "myapp", *args])


def read_version(state_file: Path) -> int:
    return json.loads(state_file.read_text())["myapp"]["version"]


@pytest.mark.unit
class TestRunCommand:
    """Tests for the run command."""

    def test_should_upgrade_to_latest(self, cli_runner: CliRunner, state_file: Path) -> None:
        """Verify a clean run exits 0 and commits the latest version."""
        result = invoke(cli_runner, state_file, "run", "--steps", "sample_upgrades:clean")

        assert result.exit_code == 0, result.output
        assert "Upgrade completed successfully" in result.output
        assert "Upgrading to version 2" in result.output
        assert read_version(state_file) == 2

    def test_should_warn_on_non_fatal_errors(
        self, cli_runner: CliRunner, state_file: Path
    ) -> None:
        """Verify non-fatal errors are reported without failing."""
        result = invoke(cli_runner, state_file, "run", "--steps", "sample_upgrades:with_errors")

        assert result.exit_code == 0, result.output
        assert "completed with errors" in result.output
        assert "lost volume setting" in result.output
        assert read_version(state_file) == 3

    def test_should_fail_on_fatal_error(self, cli_runner: CliRunner, state_file: Path) -> None:
        """Verify a fatal error exits 1 and keeps the last good version."""
        result = invoke(cli_runner, state_file, "run", "--steps", "sample_upgrades:failing")

        assert result.exit_code == 1
        assert "Upgrade failed" in result.output
        assert "on version 2" in result.output
        assert "sync failed" in result.output
        assert read_version(state_file) == 1

    def test_should_abort_on_missing_step(self, cli_runner: CliRunner, state_file: Path) -> None:
        """Verify a missing step is reported and exits 1."""
        result = invoke(cli_runner, state_file, "run", "--steps", "sample_upgrades:incomplete")

        assert result.exit_code == 1
        assert "No upgrade step registered for version 2" in result.output
        assert read_version(state_file) == 1

    def test_should_reject_bad_import_path(self, cli_runner: CliRunner, state_file: Path) -> None:
        """Verify a path without ':' is a usage error."""
        result = invoke(cli_runner, state_file, "run", "--steps", "sample_upgrades")

        assert result.exit_code == 2
        assert "module:attribute" in result.output

    def test_should_reject_non_registry(self, cli_runner: CliRunner, state_file: Path) -> None:
        """Verify the target must be a StepRegistry."""
        result = invoke(
            cli_runner, state_file, "run", "--steps", "sample_upgrades:not_a_registry"
        )

        assert result.exit_code == 2
        assert "is not a StepRegistry" in result.output

    def test_should_reject_unknown_module(self, cli_runner: CliRunner, state_file: Path) -> None:
        """Verify import failures are usage errors."""
        result = invoke(cli_runner, state_file, "run", "--steps", "no_such_module_xyz:steps")

        assert result.exit_code == 2
        assert "Cannot import" in result.output

    def test_should_import_steps_from_working_directory(
        self, cli_runner: CliRunner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Verify a module in the current directory resolves without installing it."""
        project = tmp_path / "project"
        project.mkdir()
        (project / "local_upgrades.py").write_text(
            "from app_upgrader.upgrade import StepRegistry, Success, VersionSet\n"
            "steps = StepRegistry(VersionSet.from_range(1))\n"
            "steps.add(1, Success)\n"
        )
        monkeypatch.chdir(project)
        monkeypatch.setattr(sys, "path", [p for p in sys.path if p not in ("", str(project))])
        monkeypatch.delitem(sys.modules, "local_upgrades", raising=False)
        state_file = project / "versions.json"

        result = invoke(cli_runner, state_file, "run", "--steps", "local_upgrades:steps")

        assert result.exit_code == 0, result.output
        assert read_version(state_file) == 1


@pytest.mark.unit
class TestStatusCommand:
    """Tests for the status command."""

    def test_should_list_pending_versions(self, cli_runner: CliRunner, state_file: Path) -> None:
        """Verify pending versions are listed for a fresh slot."""
        result = invoke(cli_runner, state_file, "status", "--steps", "sample_upgrades:clean")

        assert result.exit_code == 0, result.output
        assert "Current version: 0" in result.output
        assert "Pending: 2" in result.output
        assert "Run 'app-upgrader run'" in result.output

    def test_should_flag_missing_steps(self, cli_runner: CliRunner, state_file: Path) -> None:
        """Verify versions without steps are marked."""
        result = invoke(
            cli_runner, state_file, "status", "--steps", "sample_upgrades:incomplete"
        )

        assert result.exit_code == 0, result.output
        assert "- 2 (no step registered)" in result.output

    def test_should_report_up_to_date(self, cli_runner: CliRunner, state_file: Path) -> None:
        """Verify an upgraded slot reports up to date."""
        invoke(cli_runner, state_file, "run", "--steps", "sample_upgrades:clean")

        result = invoke(cli_runner, state_file, "status", "--steps", "sample_upgrades:clean")

        assert result.exit_code == 0, result.output
        assert "Up to date" in result.output


@pytest.mark.unit
class TestStampCommand:
    """Tests for the stamp command."""

    def test_should_stamp_version(self, cli_runner: CliRunner, state_file: Path) -> None:
        """Verify stamp records the version without running steps."""
        result = invoke(
            cli_runner, state_file, "stamp", "2", "--steps", "sample_upgrades:failing"
        )

        assert result.exit_code == 0, result.output
        assert "Stamped 'myapp' at version 2" in result.output
        assert read_version(state_file) == 2

    def test_should_reject_unknown_version(self, cli_runner: CliRunner, state_file: Path) -> None:
        """Verify stamping an unknown version fails."""
        result = invoke(cli_runner, state_file, "stamp", "9", "--steps", "sample_upgrades:clean")

        assert result.exit_code == 1
        assert "Unknown version" in result.output
        assert not state_file.exists()


@pytest.mark.unit
class TestConfigOption:
    """Tests for the --config option."""

    def test_should_read_config_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Verify the state file and slot name come from YAML."""
        state_file = tmp_path / "from-config.json"
        config_file = tmp_path / "upgrader.yaml"
        config_file.write_text(f'state_file: "{state_file}"\nname: configured\n')

        result = cli_runner.invoke(
            main, ["--config", str(config_file), "run", "--steps", "sample_upgrades:clean"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(state_file.read_text())["configured"]["version"] == 2

    def test_should_report_invalid_config(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        """Verify an invalid config file is a usage error."""
        config_file = tmp_path / "upgrader.yaml"
        config_file.write_text("invalid: yaml: content:")

        result = cli_runner.invoke(
            main, ["--config", str(config_file), "status", "--steps", "sample_upgrades:clean"]
        )

        assert result.exit_code == 2
        assert "Invalid config file" in result.output
