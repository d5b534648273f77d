"""
Workflow builder - Turns command-line step declarations into a Workflow.

Grouping happens here and only here:
1. Consecutive concurrent declarations merge into one ConcurrentStage
2. Every sequential declaration becomes its own SequentialStage
3. The stdin marker becomes one ConcurrentStage at its position
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from ..constants import CONCURRENT_FLAGS, SEQUENTIAL_FLAGS, STDIN_FLAGS
from .stages import Command, ConcurrentStage, SequentialStage, Stage, Workflow, WorkflowError


class StepType(Enum):
    """Kinds of step declarations accepted on the command line."""

    SEQUENTIAL = "sequential"
    CONCURRENT = "concurrent"
    STDIN = "stdin"


@dataclass(frozen=True)
class StepDeclaration:
    """One step as declared by the user, before grouping."""

    step_type: StepType
    command: Command | None = None


def parse_step_args(tokens: Iterable[str]) -> list[StepDeclaration]:
    """
    Parse raw step tokens, preserving their order.

    Args:
        tokens: Tokens such as ["-s", "make", "-c", "test a", "-i"]

    Returns:
        List of step declarations in command-line order

    Raises:
        WorkflowError: On an unknown token or a flag missing its command
    """
    declarations: list[StepDeclaration] = []
    remaining = list(tokens)
    idx = 0

    while idx < len(remaining):
        token = remaining[idx]
        flag, _, inline_value = token.partition("=")

        if token in STDIN_FLAGS:
            declarations.append(StepDeclaration(StepType.STDIN))
            idx += 1
            continue

        if flag in SEQUENTIAL_FLAGS or flag in CONCURRENT_FLAGS:
            step_type = StepType.SEQUENTIAL if flag in SEQUENTIAL_FLAGS else StepType.CONCURRENT
            if inline_value:
                command = inline_value
                idx += 1
            elif idx + 1 < len(remaining):
                command = remaining[idx + 1]
                idx += 2
            else:
                raise WorkflowError(f"Option {flag} requires a command")

            if not command.strip():
                raise WorkflowError(f"Option {flag} was given an empty command")
            declarations.append(StepDeclaration(step_type, command))
            continue

        raise WorkflowError(f"Unexpected argument: {token!r} (use -s CMD, -c CMD or -i)")

    return declarations


def read_stdin_commands(stream: TextIO) -> list[Command]:
    """Read one command per line, trimming whitespace and dropping blank lines."""
    return [line.strip() for line in stream if line.strip()]


def build_workflow(
    declarations: Iterable[StepDeclaration],
    stdin_commands: Iterable[Command] | None = None,
    name: str = "workflow",
) -> Workflow:
    """
    Group step declarations into stages.

    Args:
        declarations: Steps in declaration order
        stdin_commands: Commands read from stdin, used where a STDIN step appears
        name: Workflow name for reporting

    Returns:
        A Workflow ready for execution

    Raises:
        WorkflowError: If no stage results from the declarations
    """
    stdin_list = list(stdin_commands or [])
    stages: list[Stage] = []
    pending: list[Command] = []

    def flush_pending():
        if pending:
            stages.append(ConcurrentStage(tuple(pending)))
            pending.clear()

    for declaration in declarations:
        if declaration.step_type == StepType.CONCURRENT:
            pending.append(declaration.command)

        elif declaration.step_type == StepType.SEQUENTIAL:
            flush_pending()
            stages.append(SequentialStage(declaration.command))

        elif declaration.step_type == StepType.STDIN:
            flush_pending()
            # An empty stdin contributes no stage
            if stdin_list:
                stages.append(ConcurrentStage(tuple(stdin_list)))

    flush_pending()

    if not stages:
        raise WorkflowError("No commands given (use -s CMD, -c CMD or -i)")

    return Workflow(stages=tuple(stages), name=name)


def needs_stdin(declarations: Iterable[StepDeclaration]) -> bool:
    """Check whether any declaration asks for commands from stdin."""
    return any(d.step_type == StepType.STDIN for d in declarations)
