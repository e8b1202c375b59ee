# minishell

A small shell engine. It takes a command line that has already been
parsed into commands and runs it: `$?` expansion, the usual builtins,
input/output redirections, here-documents and pipelines of external
programs.

## What is in the package

| Module                 | Purpose                                                               |
|------------------------|-----------------------------------------------------------------------|
| `minishell.model`      | Token and command types, redirection kinds, shell state and errors     |
| `minishell.expansion`  | Single-quote extraction and `$?` expansion of command arguments        |
| `minishell.builtins`   | `echo`, `env`, `export`, `unset`, `pwd`, `cd` and `exit`               |
| `minishell.pathsearch` | Finding a program on `PATH`, building `argv` and the environment list  |
| `minishell.redirs`     | `<`, `>`, `>>` and `<<` redirections, here-document collection         |
| `minishell.executor`   | Running a pipeline and recording the exit status of its last stage     |

## Core types

- `TokenType` and `RedirType` are the token and redirection kinds.
- `Token`, `Redirect` and `Command` describe a parsed command line: a
  `Command` has a name, its arguments and a list of `Redirect`s.
- `ShellState` holds the environment (`env`), the names exported without a
  value (`no_value_env`), the last exit status (`last_exit_code`) and the
  tokens and commands of the current line. `ShellState.clear_command()`
  drops the current line's prompt, tokens and commands.
- `ErrorChecks` collects the syntax and fatal error flags of one line;
  `ErrorChecks.reset()` clears them.
- `check_leading_token(tokens, errors)` rejects an empty token list or one
  that starts with a pipe or a flag.
- Errors are raised as `ShellError`, with `ShellSyntaxError` for problems
  with the input and `FatalShellError` for problems the shell cannot go on
  after. The `exit` builtin raises `minishell.builtins.ShellExit`, whose
  `code` is the exit status.

## Examples

Expanding the last exit status in an argument:

```python
from minishell.expansion import expand_exit_status

expand_exit_status("status: $?", 3)   # "status: 3"
```

Checking for a builtin and running `echo` into any text stream:

```python
import io
from minishell.builtins import echo, is_builtin

is_builtin("echo")    # True
is_builtin("ls")      # False

out = io.StringIO()
echo(["-n", "hello", "world"], out)
out.getvalue()        # "hello world"
```

Collecting a here-document from a sequence of lines:

```python
from minishell.redirs import collect_heredoc

collect_heredoc("EOF", ["first", "second", "EOF", "ignored"])
# "first\nsecond\n"
```

Running a parsed line:

```python
from minishell.model import Command, ShellState
from minishell.executor import execute

state = ShellState(env={"PATH": "/usr/bin:/bin"})
state.commands = [Command("echo", ["hi"]), Command("wc", ["-c"])]
execute(state)
state.last_exit_code   # exit status of the last stage
```

`execute(state)` applies each stage's redirections, runs builtins inside
the current process and starts external programs with `subprocess`,
connecting the stages with pipes. Recoverable errors are printed on
standard error; `FatalShellError` and `ShellExit` reach the caller.
`run_pipeline(state, commands)` does the same for any list of commands and
returns the status instead of storing it.

## Behaviour worth knowing

- `echo` accepts any number of `-n`, `-nn`, … arguments and then prints no
  trailing newline.
- `env` prints every variable as `key=value` and rejects arguments.
- `export` with no arguments prints the environment followed by the names
  exported without a value; `export NAME` records a name without a value;
  in `export NAME=a=b` everything after the first `=` is the value.
- `unset` with no arguments, or with a name that is not set, is an error.
- `pwd` prints the `PWD` variable; `cd` updates `PWD`, if it is set, after
  changing directory.
- `exit` with a numeric argument exits with that status modulo 256; a
  non-numeric argument or more than one argument is an error. When `exit`
  is not the last command of the line it does nothing.
- A command name that starts with `/`, `~` or `.` is run as given;
  otherwise it is looked up in each directory of `PATH` in turn.
- Here-documents are read from the terminal when no lines are given to
  `apply_redirections`; when a stage has several, the last one supplies its
  input. From the second stage of a pipeline on, the pipe from the previous
  stage is the input even if the stage has input redirections.

## What the package does not do

There is no tokenizer or parser for raw command-line text and no
interactive prompt loop, so the package installs no command. The caller
builds the `Command` list (or fills `ShellState.commands`) and calls
`execute`. Variable expansion other than `$?` is not performed here.