# minishell

A small interactive command shell. It reads a line, splits it into words,
expands variables and runs the result. It supports:

- single quotes (taken literally) and double quotes (with `$NAME` expansion)
- `$NAME` and `$?` (the exit status of the last command); unknown variables
  expand to nothing, and a `$` not followed by a name stays a literal `$`
- pipelines: `ls | grep py | wc -l`
- redirections: `<`, `>`, `>>`, and here-documents with `<<`
- the builtins `echo` (with `-n`), `cd`, `pwd`, `export`, `unset`, `env` and `exit`

Other commands are looked up on `PATH`, or run as given when the name holds
a `/`. A command that cannot be found prints
`minishell: command not found: NAME` and sets the status to 127.

## Installing

```
pip install .
```

## Running

```
minishell
```

The prompt is `minishell % `, and here-document lines are read at a `> `
prompt. When Python's `readline` module is available, the prompt has line
editing and history. End the session with Ctrl-D or `exit`, which takes an
optional numeric status (taken modulo 256; a non-numeric one gives status 2):

```
minishell % export GREETING=hello
minishell % echo "$GREETING world" > out.txt
minishell % cat < out.txt | tr a-z A-Z
HELLO WORLD
minishell % exit 3
```

Ctrl-C abandons the current line and sets the status to 130. Syntax errors,
such as a missing redirection target or an unclosed quote, are reported and
leave the status unchanged.

A builtin that is the only command on its line runs inside the shell, so
`cd`, `export` and `unset` take effect. A builtin that is part of a pipeline
runs on a copy of the environment, and its changes are not kept.

## Using it from Python

```python
import io
from minishell.shell import Shell

out = io.StringIO()
shell = Shell({"HOME": "/tmp", "PATH": "/usr/bin:/bin"}, out=out)
status = shell.process_line('echo "home is $HOME"')
print(out.getvalue())
```

`Shell` also takes a `read_line` callable, called with a prompt and
returning the next line or `None` at end of input; `Shell.run()` loops over
it and returns the final status. Setting `shell.debug = True` makes
`process_line` print a dump of the parsed commands before running them.

The parsing steps can be used on their own: `minishell.lexer.tokenize` turns
a line into tokens, `minishell.commands.build_commands` groups them into
commands with their redirections, and `minishell.executor.run_commands` runs
them. `minishell.env.Environment` holds the shell's variables in order.

## What it does not do

This is a deliberately small shell. It has no command separators or
conditionals (`;`, `&&`, `||`), no wildcard expansion, no backslash escapes,
no background jobs or job control, no scripts or control-flow statements,
and no aliases or functions.

## Tests

```
pip install .[test]
pytest
```