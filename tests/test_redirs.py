import pytest

from minishell.model import Command, Redirect, RedirType, ShellState, ShellSyntaxError
from minishell.redirs import Streams, apply_redirections, collect_heredoc


def test_collect_heredoc_stops_at_delimiter():
    lines = iter(["first", "second", "EOF", "after"])
    assert collect_heredoc("EOF", lines) == "first\nsecond\n"
    assert next(lines) == "after"


def test_collect_heredoc_strips_trailing_newlines():
    assert collect_heredoc("end", ["one\n", "end\n"]) == "one\n"


def test_collect_heredoc_delimiter_must_match_exactly():
    assert collect_heredoc("end", ["ending", "en", "end"]) == "ending\nen\n"


def test_collect_heredoc_stops_on_eot_character():
    assert collect_heredoc("end", ["kept", "\x04", "lost"]) == "kept\n"


def test_collect_heredoc_ends_with_input():
    assert collect_heredoc("end", ["only"]) == "only\n"
    assert collect_heredoc("end", []) == ""


def test_no_redirections_gives_default_streams():
    state = ShellState()
    assert apply_redirections(state, Command(command="cat")) == Streams()


def test_output_redirection_creates_and_truncates(tmp_path):
    target = tmp_path / "out.txt"
    target.write_text("old content")
    command = Command(command="echo", redirects=[Redirect(str(target), RedirType.OUTPUT_REDIR)])
    streams = apply_redirections(ShellState(), command)
    assert streams.stdout_path == str(target)
    assert streams.append is False
    assert target.read_text() == ""


def test_append_redirection_keeps_content(tmp_path):
    target = tmp_path / "log.txt"
    target.write_text("kept")
    command = Command(
        command="echo",
        redirects=[Redirect(str(target), RedirType.OUTPUT_REDIR_APPEND)],
    )
    streams = apply_redirections(ShellState(), command)
    assert streams.stdout_path == str(target)
    assert streams.append is True
    assert target.read_text() == "kept"


def test_every_output_file_is_created_last_wins(tmp_path):
    first = tmp_path / "a"
    second = tmp_path / "b"
    command = Command(
        command="echo",
        redirects=[
            Redirect(str(first), RedirType.OUTPUT_REDIR),
            Redirect(str(second), RedirType.OUTPUT_REDIR_APPEND),
        ],
    )
    streams = apply_redirections(ShellState(), command)
    assert first.exists() and second.exists()
    assert streams.stdout_path == str(second)
    assert streams.append is True


def test_output_into_missing_directory_fails(tmp_path):
    target = tmp_path / "missing" / "out"
    command = Command(command="echo", redirects=[Redirect(str(target), RedirType.OUTPUT_REDIR)])
    with pytest.raises(ShellSyntaxError, match="not a valid file"):
        apply_redirections(ShellState(), command)


def test_input_redirection_existing_file(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("data")
    command = Command(command="cat", redirects=[Redirect(str(source), RedirType.INPUT_REDIR)])
    streams = apply_redirections(ShellState(), command)
    assert streams.stdin_path == str(source)
    assert streams.stdin_data is None


def test_input_redirection_missing_file(tmp_path):
    missing = str(tmp_path / "nope")
    state = ShellState()
    command = Command(command="cat", redirects=[Redirect(missing, RedirType.INPUT_REDIR)])
    with pytest.raises(ShellSyntaxError, match="doesn't exist"):
        apply_redirections(state, command)
    assert state.errors.executor_level_syntax_error


def test_input_redirection_ignored_without_command(tmp_path):
    missing = str(tmp_path / "nope")
    state = ShellState()
    command = Command(command=None, redirects=[Redirect(missing, RedirType.INPUT_REDIR)])
    assert apply_redirections(state, command).stdin_path is None
    assert not state.errors.executor_level_syntax_error


def test_heredoc_supplies_stdin():
    state = ShellState()
    command = Command(command="cat", redirects=[Redirect("END", RedirType.HERE_DOC)])
    streams = apply_redirections(state, command, ["hello", "world", "END"])
    assert streams.stdin_data == "hello\nworld\n"
    assert state.multiple_heredoc_check


def test_heredocs_share_input_and_last_wins():
    command = Command(
        command="cat",
        redirects=[
            Redirect("A", RedirType.HERE_DOC),
            Redirect("B", RedirType.HERE_DOC),
        ],
    )
    streams = apply_redirections(ShellState(), command, ["one", "A", "two", "B", "three"])
    assert streams.stdin_data == "two\n"


def test_input_file_read_after_heredocs(tmp_path):
    source = tmp_path / "in.txt"
    source.write_text("data")
    command = Command(
        command="cat",
        redirects=[
            Redirect(str(source), RedirType.INPUT_REDIR),
            Redirect("END", RedirType.HERE_DOC),
        ],
    )
    streams = apply_redirections(ShellState(), command, ["line", "END"])
    assert streams.stdin_data == "line\n"
    assert streams.stdin_path == str(source)