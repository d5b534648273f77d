"""Workflow orchestrator - Drives stages strictly in order."""

import logging

from ..workflow import Workflow
from .base import CommandRunner, FailurePolicy, RunnerCallbacks, WorkflowResult
from .shell import ShellCommandRunner
from .stage import StageExecutor

logger = logging.getLogger(__name__)


class WorkflowOrchestrator:
    """
    Runs a workflow one stage at a time.

    Stage k+1 never starts before stage k has fully finished. The first
    stage that asks to abort ends the run with a non-zero exit code.
    Uses callbacks for progress reporting without coupling to UI.
    """

    def __init__(self, runner: CommandRunner | None = None, policy: FailurePolicy = FailurePolicy.STRICT):
        """
        Initialize the orchestrator.

        Args:
            runner: Command runner to use (defaults to the host shell)
            policy: Which outcomes count as failures
        """
        self.runner = runner or ShellCommandRunner()
        self.policy = policy

    def run(self, workflow: Workflow, limit: int, callbacks: RunnerCallbacks | None = None) -> WorkflowResult:
        """
        Execute a workflow.

        Args:
            workflow: The workflow to execute
            limit: Concurrency limit shared by every concurrent stage
            callbacks: Optional callbacks for progress reporting

        Returns:
            WorkflowResult with execution summary
        """
        if limit < 1:
            raise ValueError(f"Concurrency limit must be at least 1, got {limit}")

        cb = callbacks or RunnerCallbacks()
        executor = StageExecutor(self.runner, cb, self.policy)
        result = WorkflowResult(success=True, workflow_name=workflow.name, stages_total=len(workflow))

        if cb.on_workflow_start:
            cb.on_workflow_start(workflow.name, len(workflow))

        for index, stage in enumerate(workflow):
            if cb.on_stage_start:
                cb.on_stage_start(index, stage)

            stage_result = executor.execute(stage, limit)

            failed = [r for r in stage_result.results if self.policy.is_failure(r.outcome)]
            result.commands_run += len(stage_result.results)
            result.commands_failed += len(failed)
            result.errors.extend(f"{r.command}: {r.outcome.describe()}" for r in failed)

            if cb.on_stage_complete:
                cb.on_stage_complete(index, stage_result)

            if stage_result.should_abort:
                logger.info(f"Stage {index + 1} failed, stopping: {stage_result.reason}")
                result.success = False
                result.failed_stage = index
                break

            result.stages_completed += 1

        if cb.on_workflow_complete:
            cb.on_workflow_complete(result)

        return result
