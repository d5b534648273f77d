"""
Runners layer - Execution engine for workflows.

Runners execute workflows, handling stage ordering, bounded concurrency
and failure propagation. Progress is reported through callbacks.
"""

from .base import (
    CommandResult,
    CommandRunner,
    ExecutionOutcome,
    FailurePolicy,
    OutcomeKind,
    RunnerCallbacks,
    StageAction,
    StageResult,
    WorkflowResult,
)
from .orchestrator import WorkflowOrchestrator
from .pool import WorkerPool
from .shell import ShellCommandRunner
from .stage import StageExecutor

__all__ = [
    "CommandResult",
    "CommandRunner",
    "ExecutionOutcome",
    "FailurePolicy",
    "OutcomeKind",
    "RunnerCallbacks",
    "StageAction",
    "StageResult",
    "WorkflowResult",
    "WorkflowOrchestrator",
    "WorkerPool",
    "ShellCommandRunner",
    "StageExecutor",
]
