"""Heredocs and file redirections of a pipeline stage."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .model import Command, RedirType, ShellState, ShellSyntaxError

_HEREDOC_PROMPT = "\033[33m> \033[0m"


@dataclass
class Streams:
    """Where a command reads from and writes to after its redirections.

    ``stdin_data`` holds heredoc text; ``stdin_path`` names an input file
    and takes precedence. ``stdout_path`` names the output file, opened
    for appending when ``append`` is set.
    """

    stdin_data: str | None = None
    stdin_path: str | None = None
    stdout_path: str | None = None
    append: bool = False


def _prompt_lines() -> Iterator[str]:
    while True:
        try:
            yield input(_HEREDOC_PROMPT)
        except EOFError:
            return


def collect_heredoc(delimiter: str, lines: Iterable[str]) -> str:
    """Gather lines until one equals ``delimiter`` or the input ends.

    Every collected line is followed by a newline. A line starting with
    an end-of-transmission character also ends the heredoc.
    """
    collected: list[str] = []
    for line in lines:
        line = line.rstrip("\n")
        if line == delimiter or line.startswith("\x04"):
            break
        collected.append(line + "\n")
    return "".join(collected)


def _check_input_file(filename: str, state: ShellState) -> None:
    if not os.path.exists(filename):
        state.errors.executor_level_syntax_error = True
        raise ShellSyntaxError(f"Err: {filename} doesn't exist")
    try:
        fd = os.open(filename, os.O_RDONLY)
    except OSError as exc:
        raise ShellSyntaxError("Err: not a valid file") from exc
    os.close(fd)


def _open_output_file(filename: str, append: bool) -> None:
    flags = os.O_WRONLY | os.O_CREAT | (os.O_APPEND if append else os.O_TRUNC)
    try:
        fd = os.open(filename, flags, 0o666)
    except OSError as exc:
        raise ShellSyntaxError("Err: not a valid file") from exc
    os.close(fd)


def apply_redirections(
    state: ShellState,
    command: Command,
    input_lines: Iterable[str] | None = None,
) -> Streams:
    """Resolve the redirections of ``command`` into :class:`Streams`.

    All heredocs are read first, in order, from ``input_lines`` (the
    terminal when None); the last one supplies standard input. Then
    input files are checked (only when there is a command) and output
    files are created or truncated in order; the last of each kind wins.
    """
    streams = Streams()
    redirects = command.redirects
    if not redirects:
        return streams

    heredocs = [r for r in redirects if r.type is RedirType.HERE_DOC]
    if heredocs:
        lines = iter(input_lines) if input_lines is not None else _prompt_lines()
        for redirect in heredocs:
            streams.stdin_data = collect_heredoc(redirect.file, lines)
            state.multiple_heredoc_check = True

    for redirect in redirects:
        if redirect.type is RedirType.INPUT_REDIR and command.command:
            _check_input_file(redirect.file, state)
            streams.stdin_path = redirect.file
        elif redirect.type is RedirType.OUTPUT_REDIR:
            _open_output_file(redirect.file, append=False)
            streams.stdout_path = redirect.file
            streams.append = False
        elif redirect.type is RedirType.OUTPUT_REDIR_APPEND:
            _open_output_file(redirect.file, append=True)
            streams.stdout_path = redirect.file
            streams.append = True
    return streams