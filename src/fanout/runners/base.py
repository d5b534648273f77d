"""Base runner classes, outcomes and protocols."""

import signal
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from ..constants import EXIT_FAILURE, EXIT_SUCCESS

if TYPE_CHECKING:
    from ..workflow import Command, Stage


class OutcomeKind(Enum):
    """How a single command terminated."""

    SUCCEEDED = "succeeded"
    EXITED_NON_ZERO = "exited_non_zero"
    KILLED_BY_SIGNAL = "killed_by_signal"
    SPAWN_FAILED = "spawn_failed"


def signal_name(signum: int) -> str:
    """Return the symbolic name of a signal number, e.g. 9 -> SIGKILL."""
    try:
        return signal.Signals(signum).name
    except ValueError:
        return f"signal {signum}"


@dataclass(frozen=True)
class ExecutionOutcome:
    """Classified termination of one command."""

    kind: OutcomeKind
    exit_code: int | None = None
    signal: int | None = None
    coredump: bool = False
    reason: str | None = None

    @classmethod
    def succeeded(cls) -> "ExecutionOutcome":
        return cls(OutcomeKind.SUCCEEDED, exit_code=0)

    @classmethod
    def exited(cls, code: int) -> "ExecutionOutcome":
        """Outcome for a normal exit; code 0 is a success."""
        if code == 0:
            return cls.succeeded()
        return cls(OutcomeKind.EXITED_NON_ZERO, exit_code=code)

    @classmethod
    def killed(cls, signum: int, coredump: bool = False) -> "ExecutionOutcome":
        return cls(OutcomeKind.KILLED_BY_SIGNAL, signal=signum, coredump=coredump)

    @classmethod
    def spawn_failed(cls, reason: str) -> "ExecutionOutcome":
        return cls(OutcomeKind.SPAWN_FAILED, reason=reason)

    @property
    def ok(self) -> bool:
        return self.kind == OutcomeKind.SUCCEEDED

    def describe(self) -> str:
        """Human-readable description of the outcome."""
        if self.kind == OutcomeKind.SUCCEEDED:
            return "succeeded"
        if self.kind == OutcomeKind.EXITED_NON_ZERO:
            return f"exited with status {self.exit_code}"
        if self.kind == OutcomeKind.KILLED_BY_SIGNAL:
            core = " (core dumped)" if self.coredump else ""
            return f"killed by {signal_name(self.signal)}{core}"
        return f"failed to start: {self.reason}"


class FailurePolicy(Enum):
    """
    Decides which outcomes count as failures.

    STRICT treats any non-zero exit, signal death or spawn failure as a failure.
    SIGNALS_ONLY keeps the legacy behaviour where a normal non-zero exit is
    treated like success. Spawn failures are failures under every policy.
    """

    STRICT = "strict"
    SIGNALS_ONLY = "signals_only"

    def is_failure(self, outcome: ExecutionOutcome) -> bool:
        if outcome.kind == OutcomeKind.SUCCEEDED:
            return False
        if outcome.kind == OutcomeKind.EXITED_NON_ZERO:
            return self == FailurePolicy.STRICT
        return True


@dataclass(frozen=True)
class CommandResult:
    """A command paired with its outcome."""

    command: "Command"
    outcome: ExecutionOutcome
    duration: float = 0.0


class StageAction(Enum):
    """What the orchestrator should do after a stage."""

    CONTINUE = "continue"
    ABORT = "abort"


@dataclass
class StageResult:
    """Result of executing one stage."""

    action: StageAction
    reason: str | None = None
    results: list[CommandResult] = field(default_factory=list)

    @classmethod
    def proceed(cls, results: list[CommandResult] | None = None) -> "StageResult":
        return cls(StageAction.CONTINUE, results=list(results or []))

    @classmethod
    def abort(cls, reason: str, results: list[CommandResult] | None = None) -> "StageResult":
        return cls(StageAction.ABORT, reason=reason, results=list(results or []))

    @property
    def should_abort(self) -> bool:
        return self.action == StageAction.ABORT


@dataclass
class WorkflowResult:
    """Result of running a workflow."""

    success: bool
    workflow_name: str
    stages_total: int = 0
    stages_completed: int = 0
    commands_run: int = 0
    commands_failed: int = 0
    # Index of the stage that aborted the run, if any
    failed_stage: int | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def stages_skipped(self) -> int:
        return self.stages_total - self.stages_completed

    @property
    def exit_code(self) -> int:
        """Process exit code for this run."""
        return EXIT_SUCCESS if self.success else EXIT_FAILURE


@dataclass
class RunnerCallbacks:
    """
    Callbacks for progress reporting.

    Allows the CLI to display progress without coupling the engine to Rich.
    All callbacks are optional - if None, no callback is made.
    on_command_start runs on worker threads for concurrent stages.
    """

    # Workflow lifecycle
    on_workflow_start: Callable[[str, int], None] | None = None  # name, total_stages
    on_workflow_complete: Callable[[WorkflowResult], None] | None = None

    # Stage lifecycle
    on_stage_start: Callable[[int, "Stage"], None] | None = None  # index, stage
    on_stage_complete: Callable[[int, StageResult], None] | None = None  # index, result

    # Command lifecycle
    on_command_start: Callable[[str], None] | None = None  # command
    on_command_complete: Callable[[CommandResult], None] | None = None
    on_command_failed: Callable[[CommandResult, bool], None] | None = None  # result, fatal


class CommandRunner(Protocol):
    """Protocol for anything that can run one command to completion."""

    def execute(self, command: "Command") -> ExecutionOutcome:
        """
        Run a command once and classify how it terminated.

        Args:
            command: Shell command string

        Returns:
            ExecutionOutcome describing the termination
        """
        ...
