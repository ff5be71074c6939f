"""The interactive prompt loop."""

from __future__ import annotations

import os
import signal
import sys
from typing import Callable, Mapping, Optional, TextIO

from minish.builtins import ShellExit
from minish.env import Environment
from minish.executor import Executor
from minish.parser import is_blank, parse

PROMPT = "minishell $ "
_EOF_FAREWELL = "\x1b[1A\033[12Cexit\n"

ReadLine = Callable[[str], Optional[str]]


def _read_prompt(prompt: str) -> str | None:
    try:
        return input(prompt)
    except EOFError:
        return None


def _on_quit(signum, frame) -> None:
    """Keep the shell alive on SIGQUIT; started programs get the default."""


class Shell:
    """A shell session: an environment, an executor and the last status."""

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        source = os.environ if environ is None else environ
        self.env = Environment(f"{key}={value}" for key, value in source.items())
        self.stdout = stdout if stdout is not None else sys.stdout
        self.executor = Executor(self.env, self.stdout, stderr)

    @property
    def status(self) -> int:
        """Exit status of the last command line."""
        return self.executor.status

    def run_line(self, line: str) -> int:
        """Parse and run one input line; blank lines are skipped."""
        if line and not is_blank(line):
            commands = parse(line, self.executor.env, self.executor.status)
            self.executor.run(commands)
        return self.executor.status

    def loop(self, read_line: ReadLine) -> int:
        """Read and run lines until end of input or ``exit``.

        Returns the code the shell exits with.
        """
        self.executor.read_line = read_line
        while True:
            try:
                line = read_line(PROMPT)
            except KeyboardInterrupt:
                self.stdout.write("\n")
                continue
            if line is None:
                break
            try:
                self.run_line(line)
            except KeyboardInterrupt:
                self.stdout.write("\n")
            except ShellExit as leaving:
                self.stdout.flush()
                return leaving.code
        self.stdout.write(_EOF_FAREWELL)
        self.stdout.flush()
        return 0


def main(argv=None) -> int:
    """Start an interactive shell on the process's own streams."""
    try:
        import readline  # noqa: F401  (line editing and history for input())
    except ImportError:
        pass
    shell = Shell(os.environ, sys.stdout, sys.stderr)
    previous = None
    if hasattr(signal, "SIGQUIT"):
        previous = signal.signal(signal.SIGQUIT, _on_quit)
    try:
        return shell.loop(_read_prompt)
    finally:
        if previous is not None:
            signal.signal(signal.SIGQUIT, previous)


if __name__ == "__main__":
    raise SystemExit(main())