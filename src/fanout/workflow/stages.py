"""Stage and workflow definitions."""

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

# A command is an opaque string handed to the host shell
Command = str


class WorkflowError(ValueError):
    """Raised when a workflow cannot be assembled from its declarations."""


class StageKind(Enum):
    """How the commands of a stage are executed."""

    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"


def _check_command(command: Command) -> None:
    if not isinstance(command, str) or not command.strip():
        raise WorkflowError(f"Invalid command: {command!r}")


@dataclass(frozen=True)
class SequentialStage:
    """A single command that must finish before anything else starts."""

    command: Command

    def __post_init__(self):
        _check_command(self.command)

    @property
    def kind(self) -> StageKind:
        return StageKind.SEQUENTIAL

    @property
    def commands(self) -> tuple[Command, ...]:
        return (self.command,)


@dataclass(frozen=True)
class ConcurrentStage:
    """
    A group of independent commands that may run at the same time.

    The commands are never ordered relative to each other. How many of them
    run at once is decided by the concurrency limit of the run, not the stage.
    """

    commands: tuple[Command, ...]

    def __post_init__(self):
        # Accept any sequence but store a tuple so the stage stays read-only
        object.__setattr__(self, "commands", tuple(self.commands))
        if not self.commands:
            raise WorkflowError("A concurrent stage needs at least one command")
        for command in self.commands:
            _check_command(command)

    @property
    def kind(self) -> StageKind:
        return StageKind.CONCURRENT


Stage = SequentialStage | ConcurrentStage


@dataclass(frozen=True)
class Workflow:
    """
    An ordered, non-empty, read-only sequence of stages.

    Workflows define WHAT to run. The orchestrator decides HOW.
    """

    stages: tuple[Stage, ...]
    name: str = "workflow"

    def __post_init__(self):
        object.__setattr__(self, "stages", tuple(self.stages))
        if not self.stages:
            raise WorkflowError("Workflow has no stages")

    def __iter__(self) -> Iterator[Stage]:
        return iter(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    @property
    def total_commands(self) -> int:
        """Number of commands across all stages."""
        return sum(len(stage.commands) for stage in self.stages)
