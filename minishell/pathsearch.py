"""Locating programs on PATH and building what is handed to them."""

from __future__ import annotations

import os

from .model import ShellState, ShellSyntaxError


def _list_directory(directory: str) -> list[str] | None:
    try:
        return os.listdir(directory)
    except OSError:
        return None


def find_executable(state: ShellState, command: str) -> str:
    """Return ``<dir>/<command>`` for the first PATH directory holding ``command``.

    Directories that cannot be read are skipped. Raises
    :class:`ShellSyntaxError` and marks an executor error when PATH is
    unset, when no PATH directory exists, or when nothing matches.
    """
    path = state.env.get("PATH")
    if not path:
        state.errors.executor_level_syntax_error = True
        raise ShellSyntaxError("Error: PATH not set")
    any_readable = False
    for directory in (part for part in path.split(":") if part):
        entries = _list_directory(directory)
        if entries is None:
            continue
        any_readable = True
        if command in entries:
            return f"{directory}/{command}"
    state.errors.executor_level_syntax_error = True
    if not any_readable:
        raise ShellSyntaxError("Err: no valid PATH set")
    raise ShellSyntaxError(f"Err: {command}: command not found")


def env_to_list(env: dict[str, str]) -> list[str]:
    """Turn the variable mapping into ``key=value`` strings, in order."""
    return [f"{key}={value}" for key, value in env.items()]


def build_argv(command: str, arguments: list[str]) -> list[str]:
    """Return the argument vector for a program: its name, then its arguments."""
    return [command, *arguments]