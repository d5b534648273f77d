"""Shell command runner - Spawns one command through the host shell."""

import logging
import os
import subprocess

from .base import ExecutionOutcome

logger = logging.getLogger(__name__)


def _wait_for_exit(process: subprocess.Popen) -> tuple[int, bool]:
    """
    Wait for a process and return (returncode, coredump).

    On POSIX the raw wait status is read directly so the core dump flag
    survives. returncode follows the subprocess convention: -N for signal N.
    """
    if os.name != "posix":
        return process.wait(), False

    _, status = os.waitpid(process.pid, 0)
    process.returncode = os.waitstatus_to_exitcode(status)
    coredump = os.WIFSIGNALED(status) and os.WCOREDUMP(status)
    return process.returncode, coredump


class ShellCommandRunner:
    """
    Runs commands through the host shell.

    Standard streams are inherited from the parent process.
    One attempt per call: no retries, no timeout, no state kept between calls.
    """

    def __init__(self, shell: str | None = None):
        """
        Initialize the runner.

        Args:
            shell: Shell executable to use instead of the platform default
        """
        self.shell = shell

    def execute(self, command: str) -> ExecutionOutcome:
        """Run a command to completion and classify its termination."""
        logger.debug(f"Spawning: {command}")

        try:
            process = subprocess.Popen(command, shell=True, executable=self.shell)
        except OSError as e:
            logger.debug(f"Could not start {command!r}: {e}")
            return ExecutionOutcome.spawn_failed(e.strerror or str(e))

        with process:
            returncode, coredump = _wait_for_exit(process)

        if returncode < 0:
            return ExecutionOutcome.killed(-returncode, coredump)
        return ExecutionOutcome.exited(returncode)
