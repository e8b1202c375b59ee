"""Commands the shell runs itself instead of looking them up on PATH."""

from __future__ import annotations

import os
import re
import sys
from typing import TextIO

from .model import Command, ShellState, ShellSyntaxError

BUILTINS = frozenset({"echo", "export", "env", "unset", "pwd", "cd", "exit"})

_ATOI = re.compile(r"\s*([+-]?)(\d*)")


class ShellExit(Exception):
    """Raised by the ``exit`` builtin; ``code`` is the process exit status."""

    def __init__(self, code: int = 0) -> None:
        super().__init__(code)
        self.code = code


def is_builtin(name: str | None) -> bool:
    """True if ``name`` is one of the shell's builtin commands."""
    return name in BUILTINS


def _is_n_flag(arg: str) -> bool:
    return arg.startswith("-n") and set(arg[1:]) == {"n"}


def echo(args: list[str], out: TextIO) -> int:
    """Print the arguments separated by spaces; ``-n`` suppresses the newline."""
    suppress_newline = False
    for position, arg in enumerate(args):
        if _is_n_flag(arg):
            suppress_newline = True
            continue
        out.write(arg)
        if position + 1 < len(args):
            out.write(" ")
    if not suppress_newline:
        out.write("\n")
    return 0


def _print_vars(variables: dict[str, str], out: TextIO) -> None:
    for key, value in variables.items():
        out.write(f"{key}={value}\n")


def env(state: ShellState, args: list[str], out: TextIO) -> int:
    """Print every variable as ``key=value``; takes no arguments."""
    if args:
        state.errors.parser_level_syntax_error = True
        raise ShellSyntaxError("Err: arguments")
    _print_vars(state.env, out)
    return 0


def unset(state: ShellState, args: list[str]) -> int:
    """Remove each named variable from the environment."""
    if not args:
        state.errors.parser_level_syntax_error = True
        raise ShellSyntaxError("Err: no arguments")
    for name in args:
        if name not in state.env:
            raise ShellSyntaxError("Err: variable not found")
        del state.env[name]
    return 0


def _split_assignment(arg: str) -> list[str]:
    return [part for part in arg.split("=") if part]


def export(state: ShellState, args: list[str], out: TextIO) -> int:
    """Set variables from ``key=value`` arguments, or list them with none.

    A bare name that is not yet known is remembered without a value.
    """
    if not args:
        _print_vars(state.env, out)
        _print_vars(state.no_value_env, out)
        return 0
    for arg in args:
        parts = _split_assignment(arg)
        if len(parts) == 1:
            name = parts[0]
            if name not in state.env and name not in state.no_value_env:
                state.no_value_env[name] = " "
    for arg in args:
        parts = _split_assignment(arg)
        if len(parts) < 2:
            continue
        name, value = parts[0], "=".join(parts[1:])
        if name in state.no_value_env:
            del state.no_value_env[name]
        else:
            state.env.pop(name, None)
        state.env[name] = value
    return 0


def pwd(state: ShellState, out: TextIO) -> int:
    """Print the ``PWD`` variable."""
    out.write(state.env.get("PWD", "") + "\n")
    return 0


def cd(state: ShellState, args: list[str]) -> int:
    """Change the working directory and update ``PWD``."""
    if not args:
        return 0
    if len(args) > 1:
        state.errors.parser_level_syntax_error = True
        raise ShellSyntaxError("Err: too many arguments")
    try:
        os.chdir(args[0])
    except OSError as exc:
        raise ShellSyntaxError("Err: chdir") from exc
    if "PWD" in state.env:
        state.env["PWD"] = os.getcwd()
    return 0


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    sign, digits = match.group(1), match.group(2)
    if not digits:
        return 0
    value = int(digits)
    return -value if sign == "-" else value


def exit_builtin(state: ShellState, command: Command) -> int:
    """Leave the shell by raising :class:`ShellExit`.

    Does nothing when the command is followed by another pipeline stage.
    """
    if state.commands and state.commands[-1] is not command:
        return 0
    args = command.arguments
    if not args:
        raise ShellExit(0)
    if any(not (char.isdigit() or char == "-") for char in args[0]):
        raise ShellSyntaxError("Err: non-numerical arg.")
    if len(args) > 1:
        raise ShellSyntaxError("Err: too many args.")
    raise ShellExit(_atoi(args[0]) & 0xFF)


def _report(error: ShellSyntaxError) -> None:
    print(error, file=sys.stderr)


def run_builtin_without_output(state: ShellState, command: Command) -> bool:
    """Run builtins that change the shell itself.

    Returns True when the command was fully handled here (``unset``,
    ``cd``, ``exit``). ``export`` with arguments updates the environment
    but is still reported as unhandled so that its output stage runs.
    """
    name = command.command
    try:
        if name == "export" and command.arguments:
            export(state, command.arguments, sys.stdout)
        if name == "unset":
            unset(state, command.arguments)
        elif name == "cd":
            cd(state, command.arguments)
        elif name == "exit":
            exit_builtin(state, command)
        else:
            return False
    except ShellSyntaxError as error:
        _report(error)
    return True


def run_builtin_with_output(state: ShellState, command: Command, out: TextIO) -> bool:
    """Run builtins that write output; True if the command was one of them."""
    name = command.command
    try:
        if name == "echo":
            echo(command.arguments, out)
        elif name == "export":
            export(state, command.arguments, out)
        elif name == "pwd":
            pwd(state, out)
        elif name == "env":
            env(state, command.arguments, out)
        else:
            return False
    except ShellSyntaxError as error:
        _report(error)
    return True