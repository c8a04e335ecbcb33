"""Infrastructure: launching external programs.

This module is the **only** place in the codebase that touches
:mod:`subprocess`.  Every ``OSError`` raised while spawning is caught
here and re-raised as a :class:`~vapor_toolbox.exceptions.ToolboxError`
subclass.

Failure policy for captured runs
--------------------------------
A captured run fails **iff the child wrote to stderr**.  The exit status
is ignored: ``exit 0`` with diagnostics on stderr raises
:class:`ExecutionError`, ``exit 137`` with a silent stderr succeeds.
This is a compatibility quirk that callers such as
:meth:`Shell.program_exists` depend on, not a recommendation.
"""

from __future__ import annotations

import logging
import os
import queue
import shlex
import subprocess
import sys
import threading
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import IO

from vapor_toolbox.core.models import (
    CapturedText,
    ExitStatus,
    OutputChunk,
    ProcessSpec,
    StreamMode,
    StreamOrigin,
)
from vapor_toolbox.core.protocols import EchoFunction
from vapor_toolbox.exceptions import (
    ExecutionError,
    LaunchError,
    ResolutionError,
)

logger = logging.getLogger(__name__)

RESOLVER_SHELL: str = "/bin/sh"
"""Shell used to look programs up on ``PATH`` (``command -v``)."""

_CHUNK_SIZE: int = 64 * 1024


# ---------------------------------------------------------------------------
# Running-process registry
# ---------------------------------------------------------------------------

class ProcessRegistry:
    """Holds the single interactive child of one invocation.

    Signal handlers read :attr:`current` to forward interrupts.  The
    handle is set only inside :meth:`running` and cleared in its
    ``finally`` block, so it can never point at a reaped process.
    """

    def __init__(self) -> None:
        self._current: subprocess.Popen[bytes] | None = None

    @property
    def current(self) -> subprocess.Popen[bytes] | None:
        return self._current

    @property
    def busy(self) -> bool:
        return self._current is not None

    @contextmanager
    def running(self, process: subprocess.Popen[bytes]) -> Iterator[subprocess.Popen[bytes]]:
        if self._current is not None:
            raise RuntimeError("An interactive process is already running.")
        self._current = process
        try:
            yield process
        finally:
            self._current = None

    def send_signal(self, signum: int) -> bool:
        """Forward *signum* to the registered child.

        Returns ``False`` when no live child is registered.
        """
        process = self._current
        if process is None or process.poll() is not None:
            return False
        logger.debug("forwarding signal %d to pid %d", signum, process.pid)
        process.send_signal(signum)
        return True


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------

def _echo_stdout(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _stream_target(mode: StreamMode) -> int | None:
    """Map a :class:`StreamMode` onto a :class:`subprocess.Popen` argument."""
    if mode is StreamMode.INHERIT:
        return None
    return subprocess.PIPE


class SubprocessRunner:
    """Concrete :class:`~vapor_toolbox.core.protocols.ProcessRunner`.

    Parameters
    ----------
    registry:
        Where the interactive child is recorded while it runs.  A fresh
        registry is created when omitted.
    env:
        Environment for every child.  ``None`` inherits ``os.environ``
        at launch time.
    echo:
        Receives the command line before an interactive launch.
        Defaults to writing to standard output.
    """

    def __init__(
        self,
        registry: ProcessRegistry | None = None,
        *,
        env: Mapping[str, str] | None = None,
        echo: EchoFunction | None = None,
    ) -> None:
        self.registry: ProcessRegistry = registry if registry is not None else ProcessRegistry()
        self._env: Mapping[str, str] | None = env
        self._echo: EchoFunction = echo or _echo_stdout

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, program: str) -> str:
        """Return an absolute path for *program*.

        Absolute paths are returned unchanged.  Anything else is looked
        up by running ``command -v`` in :data:`RESOLVER_SHELL`.

        Raises
        ------
        ResolutionError
            When the lookup prints nothing usable.
        """
        if os.path.isabs(program):
            return program
        try:
            found = self.run_captured(
                RESOLVER_SHELL, ["-c", f"command -v {shlex.quote(program)}"]
            )
        except ExecutionError as exc:
            raise ResolutionError(program) from exc
        if not found.startswith("/"):
            raise ResolutionError(program)
        logger.debug("resolved %s -> %s", program, found)
        return found

    # ------------------------------------------------------------------
    # Captured execution
    # ------------------------------------------------------------------

    def run(self, spec: ProcessSpec) -> CapturedText:
        """Run *spec* to completion and return whatever it captured.

        Streams in :attr:`StreamMode.INHERIT` go straight to this
        process's own descriptors and come back as ``""``.  No failure
        policy is applied; see :meth:`run_captured`.
        """
        path = self.resolve(spec.program)
        process = self._launch(spec, path)
        stdout, stderr = process.communicate()
        logger.debug("%s exited with %d", spec.command_line, process.returncode)
        return CapturedText(
            stdout=_decode(stdout),
            stderr=_decode(stderr),
            returncode=process.returncode,
        )

    def run_captured(self, program: str, args: Sequence[str] = ()) -> str:
        """Run *program* and return stdout with trailing whitespace removed.

        Raises
        ------
        ExecutionError
            When the child wrote anything to stderr, whatever its exit
            status.
        """
        spec = ProcessSpec(program, tuple(args), env=self._env)
        outcome = self.run(spec)
        if not outcome.succeeded:
            raise ExecutionError(
                outcome.stderr,
                exit_code=outcome.returncode,
                command_line=spec.command_line,
            )
        return outcome.stdout.rstrip()

    # ------------------------------------------------------------------
    # Interactive execution
    # ------------------------------------------------------------------

    def run_interactive(
        self,
        program: str,
        args: Sequence[str] = (),
        on_output: Callable[[OutputChunk], None] | None = None,
    ) -> int:
        """Run *program* attached to the terminal and return its raw wait status.

        With *on_output*, stdout and stderr are piped instead and every
        chunk is handed to the callback on the calling thread.  The
        child is registered in :attr:`registry` for the duration of the
        call.
        """
        output_mode = StreamMode.INHERIT if on_output is None else StreamMode.STREAM
        spec = ProcessSpec(
            program,
            tuple(args),
            env=self._env,
            stdin=StreamMode.INHERIT,
            stdout=output_mode,
            stderr=output_mode,
        )
        if self.registry.busy:
            raise RuntimeError("An interactive process is already running.")

        self._echo(spec.command_line)
        path = self.resolve(spec.program)
        process = self._launch(spec, path)

        with self.registry.running(process):
            try:
                if on_output is not None:
                    _pump(process, on_output)
                returncode = process.wait()
            except BaseException:
                process.kill()
                process.wait()
                raise

        status = ExitStatus.from_returncode(returncode)
        logger.debug("%s terminated with wait status %d", spec.command_line, status.wait_status)
        return status.wait_status

    # ------------------------------------------------------------------
    # Spawning
    # ------------------------------------------------------------------

    def _launch(self, spec: ProcessSpec, path: str) -> subprocess.Popen[bytes]:
        env = spec.env if spec.env is not None else os.environ
        logger.debug("spawning %s", shlex.join([path, *spec.args]))
        try:
            return subprocess.Popen(
                [path, *spec.args],
                env=dict(env),
                stdin=_stream_target(spec.stdin),
                stdout=_stream_target(spec.stdout),
                stderr=_stream_target(spec.stderr),
            )
        except OSError as exc:
            raise LaunchError(spec.program, exc.strerror or str(exc)) from exc


# ---------------------------------------------------------------------------
# Streaming helpers
# ---------------------------------------------------------------------------

def _pump(
    process: subprocess.Popen[bytes],
    on_output: Callable[[OutputChunk], None],
) -> None:
    """Drain both output pipes, delivering chunks in arrival order."""
    chunks: queue.Queue[OutputChunk | None] = queue.Queue()
    readers = [
        threading.Thread(
            target=_read_stream,
            args=(stream, origin, chunks),
            daemon=True,
        )
        for stream, origin in (
            (process.stdout, StreamOrigin.STDOUT),
            (process.stderr, StreamOrigin.STDERR),
        )
        if stream is not None
    ]
    for reader in readers:
        reader.start()

    finished = 0
    while finished < len(readers):
        chunk = chunks.get()
        if chunk is None:
            finished += 1
            continue
        on_output(chunk)

    for reader in readers:
        reader.join()


def _read_stream(
    stream: IO[bytes],
    origin: StreamOrigin,
    sink: queue.Queue[OutputChunk | None],
) -> None:
    try:
        while True:
            data = stream.read1(_CHUNK_SIZE)  # type: ignore[attr-defined]
            if not data:
                break
            sink.put(OutputChunk(origin, data))
    finally:
        stream.close()
        sink.put(None)
