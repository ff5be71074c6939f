"""Running parsed commands: builtins, programs, pipes and redirections."""

from __future__ import annotations

import io
import os
import subprocess
import sys
import tempfile
from contextlib import ExitStack
from typing import BinaryIO, Callable, Iterable, Optional, TextIO

from minish import builtins
from minish.builtins import ShellExit, is_builtin
from minish.env import Environment, split_fields
from minish.errors import ErrorCode, ShellError
from minish.parser import Command
from minish.redirect import check_syntax, collect_redirections
from minish.tokens import RedirFlag

ReadLine = Callable[[str], Optional[str]]


def _read_line(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def join_path(directory: str, name: str) -> str:
    """Join a directory from ``PATH`` and a command name with a slash."""
    return f"{directory}/{name}"


def _exists(path: str) -> bool:
    try:
        os.stat(path)
    except OSError:
        return False
    return True


def find_program(name: str, env: Environment) -> str | None:
    """Locate the program for ``name``.

    A name that already points at an existing file is used as it is;
    otherwise each directory of ``PATH`` is tried in order.
    """
    if not name:
        return None
    if _exists(name):
        return name
    for directory in split_fields(env.get("PATH"), ":"):
        candidate = join_path(directory, name)
        if _exists(candidate):
            return candidate
    return None


class Executor:
    """Runs pipelines of commands against one environment.

    ``status`` holds the exit status of the last pipeline run.
    """

    def __init__(
        self,
        env: Environment,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        read_line: ReadLine | None = None,
    ) -> None:
        self.env = env
        self.stdout = stdout if stdout is not None else sys.stdout
        self.stderr = stderr if stderr is not None else sys.stderr
        self.read_line = read_line if read_line is not None else _read_line
        self.status = 0

    def run(self, commands: Iterable[Command]) -> int:
        """Run a pipeline and return the exit status of its last command.

        Only the first command may change the shell's environment and
        working directory; the others run as if in a child process.
        """
        status = self.status
        incoming: BinaryIO | None = None
        with ExitStack() as stack:
            for index, command in enumerate(commands):
                outgoing: BinaryIO | None = None
                if command.piped:
                    outgoing = stack.enter_context(tempfile.TemporaryFile())
                if index == 0:
                    status = self.run_command(command, incoming, outgoing)
                else:
                    status = self._run_isolated(command, incoming, outgoing)
                if outgoing is not None:
                    outgoing.seek(0)
                incoming = outgoing
        self.status = status
        return status

    def run_command(
        self,
        command: Command,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
    ) -> int:
        """Run one command and return its exit status.

        ``stdin`` and ``stdout`` are binary files standing in for standard
        input and output; None means the executor's own streams.
        """
        try:
            self.status = self._execute(command, stdin, stdout)
        except ShellError as error:
            self._report(error)
            self.status = error.exit_status()
        except ShellExit as leaving:
            if isinstance(leaving.__cause__, ShellError):
                self._report(leaving.__cause__)
            raise
        return self.status

    def _run_isolated(
        self, command: Command, stdin: BinaryIO | None, stdout: BinaryIO | None
    ) -> int:
        saved_env = self.env
        saved_cwd = os.getcwd()
        self.env = Environment(saved_env.as_list())
        try:
            return self.run_command(command, stdin, stdout)
        finally:
            self.env = saved_env
            os.chdir(saved_cwd)

    def _execute(
        self, command: Command, stdin: BinaryIO | None, stdout: BinaryIO | None
    ) -> int:
        if not command.tokens:
            return self.status
        check_syntax(command)
        redirections = collect_redirections(command)
        with ExitStack() as stack:
            source = redirections.open_input(self.read_line)
            if source is not None:
                stdin = stack.enter_context(source)
            sink = redirections.open_output()
            if sink is not None:
                stdout = stack.enter_context(sink)
            if is_builtin(command.name()):
                self._run_builtin(command, stdout)
                return 0
            return self._run_program(command, stdin, stdout)

    def _run_builtin(self, command: Command, stdout: BinaryIO | None) -> None:
        actions = {
            "pwd": lambda out: builtins.pwd(out),
            "cd": lambda out: builtins.cd(command, self.env),
            "exit": lambda out: builtins.exit_builtin(command, out),
            "env": lambda out: builtins.env_builtin(self.env, out),
            "export": lambda out: builtins.export(command, self.env, out),
            "echo": lambda out: builtins.echo(command, out),
            "unset": lambda out: builtins.unset(command, self.env),
        }
        buffer = io.StringIO()
        try:
            actions[command.name()](buffer)
        finally:
            self._emit(buffer.getvalue(), stdout)

    def _run_program(
        self, command: Command, stdin: BinaryIO | None, stdout: BinaryIO | None
    ) -> int:
        path = find_program(command.name(), self.env)
        if path is None:
            if command.tokens[0].redir_flag == RedirFlag.VALID:
                return self.status
            raise ShellError(ErrorCode.COMMAND_NOT_FOUND, command.tokens)
        target, captured = self._stdout_target(stdout)
        try:
            completed = subprocess.run(
                [path, *command.arguments()],
                stdin=stdin,
                stdout=target,
                env=self._child_environment(),
                check=False,
            )
        except OSError as exc:
            raise ShellError(ErrorCode.COMMAND_NOT_FOUND, command.tokens) from exc
        if captured:
            self._emit(completed.stdout.decode(errors="replace"), None)
        return max(completed.returncode, 0)

    def _stdout_target(self, stdout: BinaryIO | None):
        if stdout is not None:
            stdout.flush()
            return stdout, False
        try:
            descriptor = self.stdout.fileno()
        except (AttributeError, OSError, ValueError):
            return subprocess.PIPE, True
        self.stdout.flush()
        return descriptor, False

    def _child_environment(self) -> dict[str, str]:
        variables: dict[str, str] = {}
        for entry in self.env:
            key, sep, value = entry.partition("=")
            if sep:
                variables[key] = value
        return variables

    def _emit(self, text: str, stdout: BinaryIO | None) -> None:
        if not text:
            return
        if stdout is None:
            self.stdout.write(text)
            self.stdout.flush()
        else:
            stdout.write(text.encode())

    def _report(self, error: ShellError) -> None:
        for line in error.messages():
            self.stderr.write(line + "\n")
        self.stderr.flush()