"""Stage executor - Runs one stage and decides whether the workflow goes on."""

import logging
import time

from ..workflow import ConcurrentStage, SequentialStage, Stage, StageKind
from .base import (
    CommandResult,
    CommandRunner,
    ExecutionOutcome,
    FailurePolicy,
    OutcomeKind,
    RunnerCallbacks,
    StageResult,
)
from .pool import WorkerPool

logger = logging.getLogger(__name__)


class StageExecutor:
    """
    Executes a single stage.

    A failing sequential stage aborts the workflow. Failing members of a
    concurrent stage are reported but the workflow continues, unless a
    member could not be started at all.
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

    def execute(self, stage: Stage, limit: int) -> StageResult:
        """
        Run a stage to completion.

        Args:
            stage: The stage to run
            limit: Concurrency limit for concurrent stages

        Returns:
            StageResult telling the orchestrator to continue or abort
        """
        if stage.kind == StageKind.SEQUENTIAL:
            return self._run_sequential(stage)

        elif stage.kind == StageKind.CONCURRENT:
            return self._run_concurrent(stage, limit)

        raise TypeError(f"Unknown stage: {stage!r}")

    def _run_sequential(self, stage: SequentialStage) -> StageResult:
        cb = self.callbacks
        if cb.on_command_start:
            cb.on_command_start(stage.command)

        start = time.monotonic()
        try:
            outcome = self.runner.execute(stage.command)
        except Exception as e:
            # A raising runner counts as a spawn failure, as in WorkerPool
            logger.exception(f"Runner raised while executing {stage.command!r}")
            outcome = ExecutionOutcome.spawn_failed(str(e))
        result = CommandResult(stage.command, outcome, time.monotonic() - start)

        if cb.on_command_complete:
            cb.on_command_complete(result)

        if not self.policy.is_failure(outcome):
            return StageResult.proceed([result])

        reason = f"{stage.command!r} {outcome.describe()}"
        logger.info(reason)
        if cb.on_command_failed:
            cb.on_command_failed(result, True)
        return StageResult.abort(reason, [result])

    def _run_concurrent(self, stage: ConcurrentStage, limit: int) -> StageResult:
        pool = WorkerPool(self.runner, self.callbacks, self.policy)
        results = pool.run_all(stage.commands, limit)

        # The pool has already reported each failure as it happened
        spawn_failures = [r for r in results if r.outcome.kind == OutcomeKind.SPAWN_FAILED]
        if spawn_failures:
            names = ", ".join(repr(r.command) for r in spawn_failures)
            return StageResult.abort(f"Could not start {names}", results)

        return StageResult.proceed(results)
