"""Quote extraction and expansion of the last exit status."""

from __future__ import annotations

from .model import ShellState, ShellSyntaxError


def extract_single_quoted(text: str, index: int) -> tuple[str, int]:
    """Read a single-quoted string whose opening quote is at ``index``.

    Returns the text between the quotes and the index just past the
    closing quote. Nothing inside single quotes is expanded.
    """
    if index >= len(text):
        raise ValueError("index is past the end of the text")
    end = text.find("'", index + 1)
    if end == -1:
        raise ShellSyntaxError("Oops: close ur parentheses")
    return text[index + 1:end], end + 1


def expand_exit_status(argument: str, status: int | str) -> str:
    """Replace each ``$`` and the character after it with ``status``."""
    code = str(status)
    parts: list[str] = []
    chars = iter(argument)
    for char in chars:
        if char == "$":
            parts.append(code)
            next(chars, None)
        else:
            parts.append(char)
    return "".join(parts)


def expand_exit_codes(state: ShellState) -> None:
    """Expand ``$?`` in every argument of every command, then reset the status."""
    for command in state.commands:
        command.arguments = [
            expand_exit_status(arg, state.last_exit_code) if "$?" in arg else arg
            for arg in command.arguments
        ]
    state.last_exit_code = 0