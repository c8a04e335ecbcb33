"""Tests for the ``vapor doctor`` command (cli/doctor.py).

Program lookups are mocked at the shell/runner boundary, so no docker,
swift or git install is required.

Coverage:
* Individual collectors return the expected :class:`Check` rows.
* Missing programs are warnings, not failures.
* Doctor returns GENERAL_ERROR when a check fails.
* CLI routing dispatches to ``run_doctor``.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from vapor_toolbox.cli import exit_codes
from vapor_toolbox.cli.doctor import (
    REQUIRED_PROGRAMS,
    Check,
    CheckLevel,
    _os_check,
    _program_check,
    _python_version_check,
    _toolbox_version_check,
    collect_checks,
    run_doctor,
)
from vapor_toolbox.config import Settings
from vapor_toolbox.exceptions import UsageError
from vapor_toolbox.version import __version__


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _ctx(found: bool = True) -> MagicMock:
    ctx = MagicMock()
    ctx.shell.program_exists.return_value = found
    ctx.runner.resolve.side_effect = lambda program: f"/usr/bin/{program}"
    return ctx


# ---------------------------------------------------------------------------
# Individual check functions
# ---------------------------------------------------------------------------

class TestCheckRow:
    def test_status_markup(self) -> None:
        assert Check("git", "/usr/bin/git", CheckLevel.OK).status == "[green]OK[/green]"

    def test_status_with_note(self) -> None:
        check = Check("Python", "3.8.0", CheckLevel.FAIL, ">=3.10 required")
        assert check.status == "[red]FAIL (>=3.10 required)[/red]"


class TestPythonVersionCheck:
    def test_current_interpreter_passes(self) -> None:
        check = _python_version_check()
        assert check.label == "Python"
        assert check.level is CheckLevel.OK

    @patch("vapor_toolbox.cli.doctor.MINIMUM_PYTHON", (99, 0))
    def test_too_old(self) -> None:
        check = _python_version_check()
        assert check.level is CheckLevel.FAIL
        assert check.note == ">=99.0 required"


class TestProgramCheck:
    def test_found_shows_resolved_path(self) -> None:
        check = _program_check(_ctx(found=True), "docker")
        assert check == Check("docker", "/usr/bin/docker", CheckLevel.OK)

    def test_missing_is_a_warning(self) -> None:
        ctx = _ctx(found=False)
        check = _program_check(ctx, "swift")
        assert check == Check("swift", "not found", CheckLevel.WARN)
        ctx.runner.resolve.assert_not_called()


class TestOsCheck:
    def test_returns_row(self) -> None:
        check = _os_check()
        assert check.label == "OS"
        assert check.level is CheckLevel.OK

    @patch("vapor_toolbox.cli.doctor.platform.machine", return_value="arm64")
    @patch("vapor_toolbox.cli.doctor.platform.release", return_value="23.4.0")
    @patch("vapor_toolbox.cli.doctor.platform.system", return_value="Darwin")
    def test_darwin_is_displayed_as_macos(
        self,
        _mock_system: MagicMock,
        _mock_release: MagicMock,
        _mock_machine: MagicMock,
    ) -> None:
        assert _os_check().value == "macOS 23.4.0 (arm64)"

    @patch("vapor_toolbox.cli.doctor.platform.system", return_value="Linux")
    def test_other_systems_unchanged(self, _mock_system: MagicMock) -> None:
        assert _os_check().value.startswith("Linux ")


class TestToolboxVersionCheck:
    def test_returns_current_version(self) -> None:
        assert _toolbox_version_check() == Check("vapor-toolbox", __version__, CheckLevel.OK)


class TestCollectChecks:
    def test_one_row_per_program(self) -> None:
        labels = [check.label for check in collect_checks(_ctx())]
        assert labels == ["vapor-toolbox", "Python", "OS", *REQUIRED_PROGRAMS]


# ---------------------------------------------------------------------------
# run_doctor integration
# ---------------------------------------------------------------------------

class TestRunDoctor:
    def test_all_pass_returns_success(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = run_doctor(_ctx(found=True))
        assert code == exit_codes.SUCCESS
        out = capsys.readouterr().out
        assert "All checks passed." in out
        for program in REQUIRED_PROGRAMS:
            assert program in out

    def test_missing_programs_still_succeed(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = run_doctor(_ctx(found=False))
        assert code == exit_codes.SUCCESS
        out = capsys.readouterr().out
        assert "not found" in out
        assert "WARN" in out

    @patch("vapor_toolbox.cli.doctor.MINIMUM_PYTHON", (99, 0))
    def test_failure_returns_general_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = run_doctor(_ctx(found=True))
        assert code == exit_codes.GENERAL_ERROR
        assert "Some checks failed." in capsys.readouterr().out

    def test_rejects_arguments(self) -> None:
        with pytest.raises(UsageError, match="vapor doctor"):
            run_doctor(_ctx(), ["--fix"])


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestDoctorRouting:
    @patch("vapor_toolbox.cli.commands.run_doctor", return_value=exit_codes.SUCCESS)
    def test_doctor_dispatches(self, mock_run: MagicMock) -> None:
        from vapor_toolbox.cli.app import main

        ctx = MagicMock(settings=Settings())
        code = main(["doctor"], context=ctx)
        assert code == exit_codes.SUCCESS
        mock_run.assert_called_once_with(ctx, ())

    @patch("vapor_toolbox.cli.commands.run_doctor", return_value=exit_codes.GENERAL_ERROR)
    def test_doctor_failure_propagates(self, _mock_run: MagicMock) -> None:
        from vapor_toolbox.cli.app import main

        assert main(["doctor"], context=MagicMock(settings=Settings())) == exit_codes.GENERAL_ERROR
