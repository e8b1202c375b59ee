"""Core data types shared by the lexer, parser and executor."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum


class TokenType(IntEnum):
    """Kind of a lexer token."""

    EXEC = 1
    ARGUMENT = 2
    FLAG = 3
    PIPE = 4
    REDIRECT = 5


class RedirType(IntEnum):
    """Kind of a redirection attached to a command."""

    OUTPUT_REDIR_APPEND = 1
    HERE_DOC = 2
    OUTPUT_REDIR = 3
    INPUT_REDIR = 4


class ShellError(Exception):
    """Base class for errors reported while handling a command line."""


class ShellSyntaxError(ShellError):
    """The command line is malformed; the shell reports it and carries on."""


class FatalShellError(ShellError):
    """An error after which the shell cannot continue."""


@dataclass
class Token:
    """One token produced by the lexer."""

    text: str
    type: TokenType
    argument_check: bool = False


@dataclass
class Redirect:
    """A redirection: the target file (or heredoc delimiter) and its kind."""

    file: str
    type: RedirType


@dataclass
class Command:
    """One stage of a pipeline."""

    command: str | None = None
    arguments: list[str] = field(default_factory=list)
    redirects: list[Redirect] = field(default_factory=list)
    flag: str | None = None


@dataclass
class ErrorChecks:
    """Flags recording at which stage the current command line failed."""

    lexer_level_syntax_error: bool = False
    parser_level_syntax_error: bool = False
    executor_level_syntax_error: bool = False
    environment_error: bool = False
    fatal_error: bool = False

    def reset(self) -> None:
        """Clear every flag before a new command line is handled."""
        self.lexer_level_syntax_error = False
        self.parser_level_syntax_error = False
        self.executor_level_syntax_error = False
        self.environment_error = False
        self.fatal_error = False

    @property
    def any(self) -> bool:
        """True if any flag is set."""
        return (
            self.lexer_level_syntax_error
            or self.parser_level_syntax_error
            or self.executor_level_syntax_error
            or self.environment_error
            or self.fatal_error
        )


@dataclass
class ShellState:
    """Everything the shell keeps between and during command lines."""

    env: dict[str, str] = field(default_factory=dict)
    no_value_env: dict[str, str] = field(default_factory=dict)
    tokens: list[Token] = field(default_factory=list)
    commands: list[Command] = field(default_factory=list)
    errors: ErrorChecks = field(default_factory=ErrorChecks)
    prompt: str | None = None
    last_exit_code: int = 0
    pipe_check: bool = False
    is_redirect: bool = False
    multiple_heredoc_check: bool = False

    def clear_command(self) -> None:
        """Drop the tokens, parsed commands and prompt of the last line."""
        self.prompt = None
        self.tokens = []
        self.commands = []


def check_leading_token(tokens: list[Token], errors: ErrorChecks) -> None:
    """Reject a token list that is empty or starts with a pipe or a flag."""
    if not tokens:
        raise ShellSyntaxError("empty command")
    first = tokens[0]
    if first.type is TokenType.PIPE:
        errors.parser_level_syntax_error = True
        raise ShellSyntaxError("Err: unexpected token '|'")
    if first.type is TokenType.FLAG:
        errors.parser_level_syntax_error = True
        raise ShellSyntaxError("Err: unexpected token '-n'")