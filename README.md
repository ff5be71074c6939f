# minish

A small interactive command shell. It reads a line, splits it on pipes,
expands variables and quotes, applies redirections, and then runs either a
builtin or an external program found on `PATH`.

## Running

```
pip install .
minish
```

The prompt is `minishell $ `. To end the session, press Ctrl-D or use the
`exit` builtin. Ctrl-C at the prompt starts a new line, and SIGQUIT does not
stop the shell.

## What it understands

- **Pipelines**, for example `ls -l | grep py | wc -l`. The commands run one
  after another, and each command's output becomes the next command's input.
  Only the first command of a pipeline can change the shell's variables or its
  working directory.
- **Quotes.** Single quotes keep their text exactly as written. Double quotes
  still expand `$NAME`. A quote that is never closed is kept as a literal
  character.
- **Variables.** `$NAME` expands to the variable's value, or to nothing when
  the variable is unset. `$?` expands to the exit status of the last command.
- **Redirections:**
  - `< file` reads input from a file.
  - `<< DELIM` reads a here-document at a `> ` prompt. It ends at a line
    whose first five characters match `DELIM`, or at end of input.
  - `> file` writes output to a file, truncating it first.
  - `>> file` appends output to a file.

  A redirection may be written next to its word, as in `echo hi>out.txt`.
  When there are several redirections of one kind, the last one is used.
  Every output file that is named is still created.
- **Syntax errors.** A line such as `echo >> >`, or a redirection with no
  file after it, prints `minishell: syntax error near unexpected token ...`
  and sets the status to 258.

## Builtins

| Builtin  | Behaviour |
|----------|-----------|
| `echo`   | Prints its arguments. `-n` drops the trailing newline; it may be repeated and written as `-nnn`. |
| `cd`     | Changes directory. With no argument, or with `~`, it goes to `$HOME`. `~/path` is taken relative to `$HOME`. |
| `pwd`    | Prints the working directory. |
| `env`    | Prints every variable that has a value. |
| `export` | Sets variables (`KEY` or `KEY=value`). With no argument it lists all variables, sorted, in `declare -x KEY="value"` form. |
| `unset`  | Removes variables. |
| `exit`   | Prints `exit` and leaves the shell with the given status modulo 256. A non-numeric argument leaves with status 255. Inside a pipeline it only checks its arguments. |

An invalid identifier given to `export` or `unset` prints
`minishell: <cmd>: `<arg>': not a valid identifier` and gives status 1. An
unknown command prints `minishell: <name>: command not found` and gives
status 127.

## Using it from Python

```python
import sys
from minish.shell import Shell

shell = Shell(environ={"PATH": "/usr/bin:/bin", "HOME": "/tmp"},
              stdout=sys.stdout, stderr=sys.stderr)
status = shell.run_line("echo $HOME | cat")
```

`Shell.loop(read_line)` runs the prompt loop. It takes any callable that
accepts a prompt and returns a line, or `None` at end of input. The loop
returns the code the shell exits with.

The lower-level pieces can also be used on their own:

- `minish.parser.parse` turns a line into `Command` objects.
- `minish.tokens.split_command` and `minish.tokens.expand_word` split words
  and do quote removal and variable expansion.
- `minish.env.Environment` holds the variables.
- `minish.executor.Executor` runs commands.
- `minish.errors.ShellError` carries the error messages and exit statuses.

## What it does not do

The shell has no:

- `;`, `&&` or `||` lists
- background jobs or job control
- globbing
- backslash escapes
- history file
- script files; it only reads lines interactively or through `Shell`

## Tests

```
pip install .[test]
pytest
```