"""Tests for the process runner (infra/process_runner.py).

These tests spawn ``/bin/sh`` for real: the stderr policy and the
registry discipline are properties of actual child processes.

Coverage:
* ``run_captured`` fails iff stderr is non-empty, whatever the exit code.
* Trailing whitespace trimming.
* ``ResolutionError`` vs ``LaunchError`` vs ``ExecutionError``.
* Environment inheritance and override.
* ``run`` honours each stream mode of its ``ProcessSpec``.
* ``run_interactive`` wait statuses, echo, streaming.
* The registry is empty before and after every interactive run.
"""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from vapor_toolbox.core.models import (
    OutputChunk,
    ProcessSpec,
    StreamMode,
    StreamOrigin,
    WaitStatus,
)
from vapor_toolbox.exceptions import (
    ExecutionError,
    LaunchError,
    ResolutionError,
    ToolboxError,
)
from vapor_toolbox.infra.process_runner import (
    ProcessRegistry,
    SubprocessRunner,
    _stream_target,
)

pytestmark = pytest.mark.skipif(
    not os.path.exists("/bin/sh"), reason="requires a POSIX /bin/sh",
)

SH = "/bin/sh"


@pytest.fixture
def echo() -> MagicMock:
    return MagicMock()


@pytest.fixture
def runner(echo: MagicMock) -> SubprocessRunner:
    return SubprocessRunner(echo=echo)


# ---------------------------------------------------------------------------
# Captured execution and the stderr policy
# ---------------------------------------------------------------------------

class TestRunCaptured:
    def test_returns_stdout(self, runner: SubprocessRunner) -> None:
        assert runner.run_captured(SH, ["-c", "echo hello"]) == "hello"

    def test_trailing_whitespace_trimmed(self, runner: SubprocessRunner) -> None:
        assert runner.run_captured(SH, ["-c", "printf 'hello \\n\\n'"]) == "hello"

    def test_leading_whitespace_kept(self, runner: SubprocessRunner) -> None:
        assert runner.run_captured(SH, ["-c", "printf '  indented'"]) == "  indented"

    def test_stderr_with_exit_zero_is_failure(self, runner: SubprocessRunner) -> None:
        with pytest.raises(ExecutionError) as exc_info:
            runner.run_captured(SH, ["-c", "echo oops >&2; exit 0"])
        assert exc_info.value.exit_code == 0
        assert "oops" in exc_info.value.stderr
        assert str(exc_info.value) == "oops"

    def test_exit_137_with_empty_stderr_is_success(self, runner: SubprocessRunner) -> None:
        assert runner.run_captured(SH, ["-c", "echo fine; exit 137"]) == "fine"

    def test_nonzero_exit_with_stderr_keeps_code(self, runner: SubprocessRunner) -> None:
        with pytest.raises(ExecutionError) as exc_info:
            runner.run_captured(SH, ["-c", "echo bad >&2; exit 4"])
        assert exc_info.value.exit_code == 4
        assert exc_info.value.command_line is not None
        assert exc_info.value.command_line.startswith(SH)

    def test_never_echoes(self, runner: SubprocessRunner, echo: MagicMock) -> None:
        runner.run_captured(SH, ["-c", "true"])
        echo.assert_not_called()

    def test_resolves_bare_program_name(self, runner: SubprocessRunner) -> None:
        assert runner.run_captured("sh", ["-c", "echo resolved"]) == "resolved"

    def test_inherits_environment(
        self, runner: SubprocessRunner, monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("VAPOR_TEST_VALUE", "inherited")
        assert runner.run_captured(SH, ["-c", "echo $VAPOR_TEST_VALUE"]) == "inherited"

    def test_environment_override(self) -> None:
        runner = SubprocessRunner(env={"VAPOR_TEST_VALUE": "42"})
        assert runner.run_captured(SH, ["-c", "echo $VAPOR_TEST_VALUE"]) == "42"


class TestRun:
    def test_returns_both_streams_without_policy(self, runner: SubprocessRunner) -> None:
        outcome = runner.run(ProcessSpec(SH, ("-c", "echo out; echo err >&2; exit 3")))
        assert outcome.stdout == "out\n"
        assert outcome.stderr == "err\n"
        assert outcome.returncode == 3
        assert outcome.succeeded is False

    def test_inherited_stdout_is_not_captured(
        self, runner: SubprocessRunner, capfd: pytest.CaptureFixture[str],
    ) -> None:
        spec = ProcessSpec(SH, ("-c", "echo visible"), stdout=StreamMode.INHERIT)
        outcome = runner.run(spec)
        assert outcome.stdout == ""
        assert "visible" in capfd.readouterr().out

    def test_inherited_stderr_does_not_fail_the_run(
        self, runner: SubprocessRunner, capfd: pytest.CaptureFixture[str],
    ) -> None:
        spec = ProcessSpec(SH, ("-c", "echo loud >&2"), stderr=StreamMode.INHERIT)
        outcome = runner.run(spec)
        assert outcome.stderr == ""
        assert outcome.succeeded
        assert "loud" in capfd.readouterr().err

    def test_streamed_output_is_collected(self, runner: SubprocessRunner) -> None:
        spec = ProcessSpec(SH, ("-c", "echo piped"), stdout=StreamMode.STREAM)
        assert runner.run(spec).stdout == "piped\n"

    @pytest.mark.parametrize(
        ("mode", "expected"),
        [
            (StreamMode.CAPTURE, subprocess.PIPE),
            (StreamMode.STREAM, subprocess.PIPE),
            (StreamMode.INHERIT, None),
        ],
    )
    def test_stream_targets(self, mode: StreamMode, expected: int | None) -> None:
        assert _stream_target(mode) == expected


# ---------------------------------------------------------------------------
# Resolution and launch failures
# ---------------------------------------------------------------------------

class TestResolve:
    def test_absolute_path_unchanged(self, runner: SubprocessRunner) -> None:
        assert runner.resolve("/no/such/dir/tool") == "/no/such/dir/tool"

    def test_bare_name_becomes_absolute(self, runner: SubprocessRunner) -> None:
        assert runner.resolve("sh").startswith("/")

    def test_missing_program_raises_resolution_error(self, runner: SubprocessRunner) -> None:
        with pytest.raises(ResolutionError) as exc_info:
            runner.run_captured("vapor-no-such-program-xyz", [])
        assert exc_info.value.program == "vapor-no-such-program-xyz"
        assert exc_info.value.hint is not None

    def test_shell_builtin_is_not_a_program(self, runner: SubprocessRunner) -> None:
        with pytest.raises(ResolutionError):
            runner.resolve("cd")

    def test_resolution_error_is_not_execution_error(self) -> None:
        assert not issubclass(ResolutionError, ExecutionError)
        assert not issubclass(ResolutionError, LaunchError)
        assert issubclass(ResolutionError, ToolboxError)


class TestLaunchFailures:
    def test_missing_absolute_path(self, runner: SubprocessRunner, tmp_path: Path) -> None:
        with pytest.raises(LaunchError):
            runner.run_captured(str(tmp_path / "missing"), [])

    def test_not_executable(self, runner: SubprocessRunner, tmp_path: Path) -> None:
        script = tmp_path / "script.sh"
        script.write_text("echo hi\n")
        script.chmod(0o644)
        with pytest.raises(LaunchError) as exc_info:
            runner.run_captured(str(script), [])
        assert exc_info.value.program == str(script)


# ---------------------------------------------------------------------------
# Interactive execution
# ---------------------------------------------------------------------------

class TestRunInteractive:
    def test_success_is_zero(self, runner: SubprocessRunner) -> None:
        assert runner.run_interactive(SH, ["-c", "exit 0"]) == 0

    def test_returns_raw_wait_status(self, runner: SubprocessRunner) -> None:
        assert runner.run_interactive(SH, ["-c", "exit 3"]) == 3 << 8

    def test_exit_130_is_interrupted_status(self, runner: SubprocessRunner) -> None:
        assert runner.run_interactive(SH, ["-c", "exit 130"]) == WaitStatus.INTERRUPTED

    def test_signalled_child_reports_signal_number(self, runner: SubprocessRunner) -> None:
        assert runner.run_interactive(SH, ["-c", "kill -TERM $$"]) == 15

    def test_echoes_command_line(self, runner: SubprocessRunner, echo: MagicMock) -> None:
        runner.run_interactive(SH, ["-c", "true"])
        echo.assert_called_once_with(f"{SH} -c true")

    def test_streams_chunks_by_origin(self, runner: SubprocessRunner) -> None:
        chunks: list[OutputChunk] = []
        status = runner.run_interactive(
            SH, ["-c", "echo out; echo err >&2"], on_output=chunks.append,
        )
        assert status == 0
        stdout = b"".join(c.data for c in chunks if c.origin is StreamOrigin.STDOUT)
        stderr = b"".join(c.data for c in chunks if c.origin is StreamOrigin.STDERR)
        assert stdout == b"out\n"
        assert stderr == b"err\n"

    def test_missing_program(self, runner: SubprocessRunner) -> None:
        with pytest.raises(ResolutionError):
            runner.run_interactive("vapor-no-such-program-xyz", [])


# ---------------------------------------------------------------------------
# Registry discipline
# ---------------------------------------------------------------------------

class TestRegistryAroundInteractiveRuns:
    @pytest.mark.parametrize("script", ["exit 0", "exit 1", "exit 130", "kill -TERM $$"])
    def test_empty_before_and_after(self, runner: SubprocessRunner, script: str) -> None:
        assert runner.registry.current is None
        runner.run_interactive(SH, ["-c", script])
        assert runner.registry.current is None

    def test_empty_after_launch_error(self, runner: SubprocessRunner, tmp_path: Path) -> None:
        with pytest.raises(LaunchError):
            runner.run_interactive(str(tmp_path / "missing"), [])
        assert runner.registry.current is None

    def test_set_while_child_runs(self, runner: SubprocessRunner) -> None:
        seen: list[object] = []

        def _record(_chunk: OutputChunk) -> None:
            seen.append(runner.registry.current)

        runner.run_interactive(SH, ["-c", "echo tick"], on_output=_record)
        assert seen
        assert all(handle is not None for handle in seen)
        assert runner.registry.current is None

    def test_cleared_when_callback_raises(self, runner: SubprocessRunner) -> None:
        def _explode(_chunk: OutputChunk) -> None:
            raise RuntimeError("callback failed")

        with pytest.raises(RuntimeError, match="callback failed"):
            runner.run_interactive(SH, ["-c", "echo tick; exec sleep 5"], on_output=_explode)
        assert runner.registry.current is None

    def test_refuses_second_interactive_child(self, echo: MagicMock) -> None:
        registry = ProcessRegistry()
        runner = SubprocessRunner(registry, echo=echo)
        with registry.running(MagicMock()):
            with pytest.raises(RuntimeError, match="already running"):
                runner.run_interactive(SH, ["-c", "true"])
        echo.assert_not_called()


class TestProcessRegistry:
    def test_running_sets_and_clears(self) -> None:
        registry = ProcessRegistry()
        process = MagicMock()
        with registry.running(process):
            assert registry.current is process
            assert registry.busy
        assert registry.current is None

    def test_cleared_on_exception(self) -> None:
        registry = ProcessRegistry()
        with pytest.raises(ValueError):
            with registry.running(MagicMock()):
                raise ValueError("boom")
        assert registry.current is None

    def test_send_signal_without_child(self) -> None:
        assert ProcessRegistry().send_signal(2) is False

    def test_send_signal_to_live_child(self) -> None:
        registry = ProcessRegistry()
        process = MagicMock()
        process.poll.return_value = None
        with registry.running(process):
            assert registry.send_signal(2) is True
        process.send_signal.assert_called_once_with(2)

    def test_send_signal_skips_exited_child(self) -> None:
        registry = ProcessRegistry()
        process = MagicMock()
        process.poll.return_value = 0
        with registry.running(process):
            assert registry.send_signal(2) is False
        process.send_signal.assert_not_called()
