import shlex
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import PurePath

from task_resolver.logging.logger import Log
from task_resolver.resolution.exceptions import ExecutionError

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class CommandResult:
    stdout: str
    stderr: str
    exit_code: int


class CommandAdapter:
    """Runs allow-listed executables without a shell, under a deadline."""

    def __init__(
        self,
        allowed_commands: Iterable[str],
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        self._allowed = frozenset(allowed_commands)
        self._timeout = timeout_seconds

    def run(self, command_line: str) -> CommandResult:
        """Run a command line and capture its output.

        Raises:
            ExecutionError: if the line cannot be parsed, the executable is not
                allowed, cannot be spawned, or exceeds the deadline.
        """
        argv = self._split(command_line)
        executable = PurePath(argv[0]).name
        if executable not in self._allowed:
            raise ExecutionError(f"command '{executable}' is not permitted")
        Log.info(f"Running command: {shlex.join(argv)}")
        try:
            completed = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ExecutionError(
                f"command '{executable}' timed out after {self._timeout:g}s"
            ) from exc
        except OSError as exc:
            raise ExecutionError(f"cannot run '{executable}': {exc}") from exc
        return CommandResult(
            stdout=completed.stdout,
            stderr=completed.stderr,
            exit_code=completed.returncode,
        )

    def _split(self, command_line: str) -> list[str]:
        try:
            argv = shlex.split(command_line)
        except ValueError as exc:
            raise ExecutionError(f"cannot parse command '{command_line}': {exc}") from exc
        if not argv:
            raise ExecutionError("command is empty")
        return argv
