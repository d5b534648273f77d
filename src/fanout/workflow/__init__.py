"""
Workflow layer - Stage and workflow definitions.

Workflows are DATA STRUCTURES that define what to run.
They do NOT execute anything - that's the runner's job.
"""

from .builder import StepDeclaration, StepType, build_workflow, needs_stdin, parse_step_args, read_stdin_commands
from .stages import Command, ConcurrentStage, SequentialStage, Stage, StageKind, Workflow, WorkflowError

__all__ = [
    "Command",
    "ConcurrentStage",
    "SequentialStage",
    "Stage",
    "StageKind",
    "Workflow",
    "WorkflowError",
    "StepDeclaration",
    "StepType",
    "build_workflow",
    "needs_stdin",
    "parse_step_args",
    "read_stdin_commands",
]
