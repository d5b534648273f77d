"""Worker pool - Runs independent commands with a bounded number in flight."""

import logging
import time
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed

from .base import CommandResult, CommandRunner, ExecutionOutcome, FailurePolicy, OutcomeKind, RunnerCallbacks

logger = logging.getLogger(__name__)


class WorkerPool:
    """
    Bounded-concurrency executor for the commands of one concurrent stage.

    At most `limit` commands run at any instant. When one finishes the next
    queued command is admitted. run_all returns only after every command has
    terminated, whatever its outcome.
    """

    def __init__(
        self,
        runner: CommandRunner,
        callbacks: RunnerCallbacks | None = None,
        policy: FailurePolicy = FailurePolicy.STRICT,
    ):
        self.runner = runner
        self.callbacks = callbacks or RunnerCallbacks()
        self.policy = policy

    def run_all(self, commands: Sequence[str], limit: int) -> list[CommandResult]:
        """
        Run every command, never more than `limit` at once.

        Args:
            commands: Independent shell commands
            limit: Maximum number of commands in flight

        Returns:
            One CommandResult per input command, in completion order
        """
        if limit < 1:
            raise ValueError(f"Concurrency limit must be at least 1, got {limit}")
        if not commands:
            return []

        workers = min(limit, len(commands))
        results: list[CommandResult] = []
        cb = self.callbacks

        logger.debug(f"Running {len(commands)} commands with {workers} workers")

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="fanout") as executor:
            futures = {executor.submit(self._run_one, command): command for command in commands}

            for future in as_completed(futures):
                command = futures[future]
                try:
                    result = future.result()
                except Exception as e:
                    # A runner should classify failures itself; keep siblings going anyway
                    logger.exception(f"Runner raised while executing {command!r}")
                    result = CommandResult(command, ExecutionOutcome.spawn_failed(str(e)))

                results.append(result)
                self._report(result)

                if cb.on_command_complete:
                    cb.on_command_complete(result)

        return results

    def _run_one(self, command: str) -> CommandResult:
        """Execute one command on a worker thread."""
        if self.callbacks.on_command_start:
            self.callbacks.on_command_start(command)

        start = time.monotonic()
        outcome = self.runner.execute(command)
        return CommandResult(command, outcome, time.monotonic() - start)

    def _report(self, result: CommandResult) -> None:
        """Report a failed member as soon as it is observed."""
        outcome = result.outcome
        if not self.policy.is_failure(outcome):
            logger.debug(f"Finished {result.command!r}: {outcome.describe()}")
            return

        fatal = outcome.kind == OutcomeKind.SPAWN_FAILED
        logger.info(f"{result.command!r} {outcome.describe()}")

        if self.callbacks.on_command_failed:
            self.callbacks.on_command_failed(result, fatal)
