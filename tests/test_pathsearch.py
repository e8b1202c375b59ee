import os

import pytest

from minishell.model import ShellState, ShellSyntaxError
from minishell.pathsearch import build_argv, env_to_list, find_executable


def _make_program(directory, name):
    program = directory / name
    program.write_text("#!/bin/sh\n")
    program.chmod(0o755)
    return program


def test_finds_program_in_path(tmp_path):
    _make_program(tmp_path, "tool")
    state = ShellState(env={"PATH": str(tmp_path)})
    assert find_executable(state, "tool") == f"{tmp_path}/tool"
    assert not state.errors.executor_level_syntax_error


def test_first_matching_directory_wins(tmp_path):
    first = tmp_path / "first"
    second = tmp_path / "second"
    first.mkdir()
    second.mkdir()
    _make_program(first, "tool")
    _make_program(second, "tool")
    state = ShellState(env={"PATH": f"{first}:{second}"})
    assert find_executable(state, "tool") == f"{first}/tool"


def test_missing_directories_are_skipped(tmp_path):
    real = tmp_path / "bin"
    real.mkdir()
    _make_program(real, "tool")
    missing = tmp_path / "absent"
    state = ShellState(env={"PATH": f"{missing}::{real}"})
    assert find_executable(state, "tool") == f"{real}/tool"


def test_name_must_match_exactly(tmp_path):
    _make_program(tmp_path, "toolbox")
    state = ShellState(env={"PATH": str(tmp_path)})
    with pytest.raises(ShellSyntaxError, match="command not found"):
        find_executable(state, "tool")
    assert state.errors.executor_level_syntax_error


def test_path_not_set():
    state = ShellState(env={})
    with pytest.raises(ShellSyntaxError, match="PATH not set"):
        find_executable(state, "ls")
    assert state.errors.executor_level_syntax_error


def test_no_valid_path(tmp_path):
    state = ShellState(env={"PATH": str(tmp_path / "nowhere")})
    with pytest.raises(ShellSyntaxError, match="no valid PATH set"):
        find_executable(state, "ls")
    assert state.errors.executor_level_syntax_error


def test_env_to_list_keeps_order_and_round_trips():
    env = {"HOME": "/home/someone", "A": "x=y", "EMPTY": ""}
    lines = env_to_list(env)
    assert lines[0] == "HOME=/home/someone"
    assert dict(line.split("=", 1) for line in lines) == env


def test_env_to_list_empty():
    assert env_to_list({}) == []


def test_build_argv_puts_command_first():
    args = ["-l", "dir"]
    argv = build_argv("ls", args)
    assert argv == ["ls", "-l", "dir"]
    assert args == ["-l", "dir"]


def test_build_argv_without_arguments():
    assert build_argv(os.sep + "bin" + os.sep + "true", []) == ["/bin/true"]