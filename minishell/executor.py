"""Running a parsed command line: builtins, programs and the pipes between them."""

from __future__ import annotations

import io
import subprocess
import sys
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import IO, Union

from .builtins import is_builtin, run_builtin_with_output, run_builtin_without_output
from .model import Command, FatalShellError, ShellState, ShellSyntaxError
from .pathsearch import build_argv, find_executable
from .redirs import Streams, apply_redirections

# What the next stage reads: a running program's output, captured bytes, or
# nothing at all (the terminal).
_Upstream = Union[IO[bytes], bytes, None]


@dataclass
class _Resources:
    processes: list[subprocess.Popen] = field(default_factory=list)
    feeders: list[threading.Thread] = field(default_factory=list)
    files: list[IO[bytes]] = field(default_factory=list)

    def release(self) -> None:
        for feeder in self.feeders:
            feeder.join()
        for process in self.processes:
            process.wait()
        for handle in self.files:
            handle.close()


def _feed(pipe: IO[bytes], data: bytes) -> None:
    try:
        pipe.write(data)
    except (BrokenPipeError, OSError):
        pass
    finally:
        try:
            pipe.close()
        except OSError:
            pass


def _select_input(position: int, upstream: _Upstream, streams: Streams) -> _Upstream | str:
    """Pick the input of a stage.

    From the second stage on, the pipe from the previous stage takes the
    place of standard input even when the stage has input redirections.
    """
    if position > 0:
        return upstream if upstream is not None else b""
    if streams.stdin_path is not None:
        return streams.stdin_path
    if streams.stdin_data is not None:
        return streams.stdin_data.encode()
    return None


def _open_output(streams: Streams, resources: _Resources) -> IO[bytes] | None:
    if streams.stdout_path is None:
        return None
    try:
        handle = open(streams.stdout_path, "ab" if streams.append else "wb")
    except OSError as exc:
        raise ShellSyntaxError("Err: not a valid file") from exc
    resources.files.append(handle)
    return handle


def _run_output_builtin(
    state: ShellState,
    command: Command,
    output: IO[bytes] | None,
    is_last: bool,
) -> tuple[bool, _Upstream]:
    """Run an output builtin; returns whether it was one and what it passes on."""
    buffer = io.StringIO()
    if not run_builtin_with_output(state, command, buffer):
        return False, None
    data = buffer.getvalue().encode()
    if output is not None:
        output.write(data)
        output.flush()
        return True, b"" if not is_last else None
    if not is_last:
        return True, data
    sys.stdout.write(buffer.getvalue())
    sys.stdout.flush()
    return True, None


def _program_path(state: ShellState, name: str) -> str:
    if name[:1] in ("/", "~", ".") or is_builtin(name):
        return name
    return find_executable(state, name)


def _launch(
    state: ShellState,
    command: Command,
    path: str,
    source: _Upstream | str,
    output: IO[bytes] | None,
    is_last: bool,
    resources: _Resources,
) -> subprocess.Popen | None:
    stdin: object = None
    data: bytes | None = None
    if isinstance(source, str):
        try:
            handle = open(source, "rb")
        except OSError as exc:
            raise ShellSyntaxError("Err: not a valid file") from exc
        resources.files.append(handle)
        stdin = handle
    elif isinstance(source, bytes):
        stdin = subprocess.PIPE
        data = source
    elif source is not None:
        stdin = source

    if output is not None:
        stdout: object = output
    elif not is_last:
        stdout = subprocess.PIPE
    else:
        stdout = None

    sys.stdout.flush()
    try:
        process = subprocess.Popen(
            build_argv(command.command, command.arguments),
            executable=path,
            stdin=stdin,
            stdout=stdout,
            env=dict(state.env),
        )
    except OSError:
        print("Execv err: check input", file=sys.stderr)
        return None
    finally:
        if source is not None and not isinstance(source, (str, bytes)):
            source.close()

    resources.processes.append(process)
    if data is not None and process.stdin is not None:
        feeder = threading.Thread(target=_feed, args=(process.stdin, data), daemon=True)
        feeder.start()
        resources.feeders.append(feeder)
    return process


def run_pipeline(state: ShellState, commands: Sequence[Command]) -> int:
    """Run ``commands`` as one pipeline and return the status of the last stage.

    Raises :class:`ShellSyntaxError` when a stage has no command, a
    redirection fails or a program cannot be found; stages already
    started are still waited for.
    """
    resources = _Resources()
    upstream: _Upstream = None
    last_process: subprocess.Popen | None = None
    status = 0
    try:
        for position, command in enumerate(commands):
            is_last = position == len(commands) - 1
            streams = apply_redirections(state, command)
            if not command.command:
                state.errors.executor_level_syntax_error = True
                raise ShellSyntaxError("Err: no command")
            if state.errors.executor_level_syntax_error:
                raise ShellSyntaxError("Err: command aborted")
            if state.errors.fatal_error:
                raise FatalShellError("Err: fatal error")
            state.pipe_check = len(commands) > 1

            if run_builtin_without_output(state, command):
                if upstream is not None and not isinstance(upstream, bytes):
                    upstream.close()
                upstream = None if is_last else b""
                last_process, status = None, 0
                continue

            path = _program_path(state, command.command)
            source = _select_input(position, upstream, streams)
            output = _open_output(streams, resources)

            handled, passed_on = _run_output_builtin(state, command, output, is_last)
            if handled:
                if source is not None and not isinstance(source, (str, bytes)):
                    source.close()
                upstream = passed_on
                last_process, status = None, 0
                continue

            process = _launch(state, command, path, source, output, is_last, resources)
            if process is None:
                upstream = None if is_last else b""
                last_process, status = None, 1
                continue
            last_process = process
            upstream = process.stdout if not is_last and output is None else (
                None if is_last else b""
            )
    finally:
        resources.release()
        state.pipe_check = False

    if last_process is not None:
        code = last_process.returncode
        status = code if code is not None and code >= 0 else 0
    return status


def execute(state: ShellState) -> None:
    """Run the parsed command line held in ``state``.

    On success the status of the last stage becomes
    ``state.last_exit_code``; recoverable errors are reported on stderr.
    """
    if not state.commands:
        return
    try:
        state.last_exit_code = run_pipeline(state, state.commands)
    except ShellSyntaxError as error:
        print(error, file=sys.stderr)